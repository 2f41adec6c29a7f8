"""
Checkout service: start a hosted Stripe checkout for a subscription plan.

The service:
- Resolves the plan to a Stripe price for the requested interval
- Validates the price with Stripe before anything is created
- Gets or creates the organization's Stripe customer
- Creates the Stripe checkout session and records it as pending

Errors propagate as payment exceptions; the view maps their category to an
HTTP status. No local row is written before the price and customer checks
pass.

Usage:
    from payments.services import CheckoutRequest, CheckoutService

    result = CheckoutService.create_checkout_session(
        CheckoutRequest(
            organization_id="org_1",
            customer_email="a@example.com",
            plan_id="starter",
            billing_interval="month",
        )
    )
    redirect_to = result.checkout_url
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from django.conf import settings

from core.services import BaseService

from payments.adapters import CreateCheckoutSessionParams, StripeAdapter
from payments.exceptions import PriceValidationError, StripeResourceNotFoundError
from payments.models import CheckoutSessionRecord
from payments.services.customer_service import CustomerService
from payments.services.plan_lookup import PlanLookupService
from payments.state_machines import BillingInterval, CheckoutSessionStatus


# =============================================================================
# Parameter Types
# =============================================================================


@dataclass
class CheckoutRequest:
    """
    Parameters for starting a checkout.

    Attributes:
        organization_id: Organization buying the plan
        customer_email: Billing email from the trusted request headers
        plan_id: Plan identifier from the catalog
        billing_interval: 'month' or 'year'
        overages_enabled: Overage billing opt-in
        overage_bandwidth: Bandwidth overage opt-in
        overage_api: API overage opt-in
        metadata: Extra string metadata for the session
    """

    organization_id: str
    customer_email: str
    plan_id: str
    billing_interval: str
    overages_enabled: bool = False
    overage_bandwidth: bool = False
    overage_api: bool = False
    metadata: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate parameters after initialization."""
        if not self.organization_id:
            raise ValueError("organization_id is required")
        if not self.plan_id:
            raise ValueError("plan_id is required")
        if self.billing_interval not in BillingInterval.values:
            raise ValueError("billing_interval must be 'month' or 'year'")

    def overage_flags(self) -> dict[str, str]:
        """Overage flags as the string values Stripe metadata requires."""
        return {
            "overages_enabled": _flag(self.overages_enabled),
            "overage_bandwidth": _flag(self.overage_bandwidth),
            "overage_api": _flag(self.overage_api),
        }


@dataclass
class CheckoutResult:
    """
    Result of a started checkout.

    Attributes:
        checkout_url: Hosted checkout URL to redirect the customer to
        session_id: Stripe Checkout Session ID (cs_xxx)
        record: The pending CheckoutSessionRecord
    """

    checkout_url: str
    session_id: str
    record: CheckoutSessionRecord | None = None


def _flag(value: bool) -> str:
    return "true" if value else "false"


def build_success_url() -> str:
    """Success redirect; Stripe substitutes the session id placeholder."""
    base = settings.CHECKOUT_REDIRECT_BASE_URL.rstrip("/")
    return f"{base}/checkout-success?session_id={{CHECKOUT_SESSION_ID}}"


def build_cancel_url() -> str:
    """Cancel redirect."""
    base = settings.CHECKOUT_REDIRECT_BASE_URL.rstrip("/")
    return f"{base}/checkout-cancel"


# =============================================================================
# Checkout Service
# =============================================================================


class CheckoutService(BaseService):
    """
    Entry point for starting a subscription checkout.

    All methods are classmethods - no instance state is maintained.
    """

    @classmethod
    def validate_price(cls, price_id: str, billing_interval: str) -> dict[str, Any]:
        """
        Check that a price can be sold for ``billing_interval``.

        The price must be well formed, exist in Stripe, be active and, when
        recurring, bill at the requested interval.

        Returns:
            The Stripe price dict

        Raises:
            PriceValidationError: Any check fails
            StripeError: Stripe could not be reached
        """
        if not price_id or not price_id.startswith("price_"):
            raise PriceValidationError(
                "Invalid price ID format. Price IDs must start with 'price_'",
                details={"price_id": price_id},
            )

        try:
            price = StripeAdapter.retrieve_price(price_id)
        except StripeResourceNotFoundError as e:
            raise PriceValidationError(
                f"Price ID {price_id} does not exist in Stripe",
                error_code="PRICE_NOT_FOUND",
                details={"price_id": price_id},
            ) from e

        if not price.get("active"):
            raise PriceValidationError(
                f"Price ID {price_id} is not active",
                error_code="PRICE_INACTIVE",
                details={"price_id": price_id},
            )

        recurring = price.get("recurring") or {}
        interval = recurring.get("interval")
        if interval and interval != billing_interval:
            raise PriceValidationError(
                f"Price ID {price_id} has billing interval '{interval}' "
                f"but received '{billing_interval}'",
                error_code="PRICE_INTERVAL_MISMATCH",
                details={"price_id": price_id, "price_interval": interval},
            )

        return price

    @classmethod
    def create_checkout_session(cls, request: CheckoutRequest) -> CheckoutResult:
        """
        Start a hosted checkout and record it as pending.

        Args:
            request: Checkout parameters

        Returns:
            CheckoutResult with the redirect URL

        Raises:
            PlanNotFoundError: Unknown plan or no price for the interval
            PriceValidationError: Price unusable for this checkout
            CustomerEmailConflictError: Email differs from the one on file
            CustomerEmailRequiredError: First checkout without an email
            StripeError: Stripe call failed
        """
        log = cls.get_logger()
        log_context = {
            "organization_id": request.organization_id,
            "plan_id": request.plan_id,
            "billing_interval": request.billing_interval,
        }
        log.info("Starting checkout", extra=log_context)

        price_id = PlanLookupService.get_price_id(request.plan_id, request.billing_interval)
        cls.validate_price(price_id, request.billing_interval)

        link = CustomerService.get_or_create_customer(
            request.organization_id,
            request.customer_email,
        )

        overage_flags = request.overage_flags()
        session_metadata = {
            **request.metadata,
            "organization_id": request.organization_id,
            "plan_id": request.plan_id,
            "billing_interval": request.billing_interval,
            **overage_flags,
        }

        session = StripeAdapter.create_checkout_session(
            CreateCheckoutSessionParams(
                price_id=price_id,
                customer_id=link.stripe_customer_id,
                success_url=build_success_url(),
                cancel_url=build_cancel_url(),
                metadata=session_metadata,
            )
        )

        record = CheckoutSessionRecord.objects.create(
            organization_id=request.organization_id,
            stripe_session_id=session.id,
            stripe_customer_id=link.stripe_customer_id,
            plan_id=request.plan_id,
            billing_interval=request.billing_interval,
            metadata={**request.metadata, **overage_flags},
            status=CheckoutSessionStatus.PENDING,
        )

        log.info(
            "Checkout session created",
            extra={**log_context, "session_id": session.id, "price_id": price_id},
        )
        return CheckoutResult(checkout_url=session.url, session_id=session.id, record=record)
