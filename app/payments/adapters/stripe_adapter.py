"""
Stripe API adapter for checkout and subscription operations.

This module provides the StripeAdapter class which encapsulates all
Stripe API interactions. All Stripe calls should go through this
adapter to ensure consistent error handling and observability.

Features:
- Per-request API key (no key stored on the stripe module)
- Automatic error translation to domain exceptions
- Structured logging with timing metrics
- Plain dict results, so callers never depend on SDK object types

Configuration (via settings):
- STRIPE_SECRET_KEY: Stripe API secret key
- STRIPE_WEBHOOK_SECRET: Webhook signing secret
- STRIPE_API_TIMEOUT_SECONDS: API call timeout (default: 10)
- STRIPE_MAX_RETRIES: SDK network retries (default: 2)

Timeout and network retries are applied once by ``configure_stripe_client``
when the payments app is ready.

Usage:
    from payments.adapters import StripeAdapter, CreateCheckoutSessionParams

    result = StripeAdapter.create_checkout_session(
        CreateCheckoutSessionParams(
            price_id="price_123",
            customer_id="cus_123",
            success_url="https://app.example.com/checkout-success?session_id={CHECKOUT_SESSION_ID}",
            cancel_url="https://app.example.com/checkout-cancel",
            metadata={"organization_id": "org_1"},
        )
    )
    redirect_to = result.url
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

import stripe
from django.conf import settings

from payments.exceptions import (
    StripeAPIUnavailableError,
    StripeAuthenticationError,
    StripeInvalidRequestError,
    StripeRateLimitError,
    StripeResourceNotFoundError,
    StripeSignatureVerificationError,
)


SUBSCRIPTION_EXPAND = ["items.data.price.product"]
CHECKOUT_SESSION_EXPAND = ["line_items.data.price.product"]


# =============================================================================
# Data Types
# =============================================================================


@dataclass
class CreateCheckoutSessionParams:
    """
    Parameters for creating a Stripe Checkout Session.

    Attributes:
        price_id: Stripe Price ID (price_xxx) for the single line item
        customer_id: Stripe Customer ID (cus_xxx)
        success_url: Redirect after payment, may contain {CHECKOUT_SESSION_ID}
        cancel_url: Redirect when the customer abandons checkout
        metadata: String map attached to the session and its subscription
        mode: Checkout mode (default: 'subscription')
        quantity: Line item quantity (default: 1)
    """

    price_id: str
    customer_id: str
    success_url: str
    cancel_url: str
    metadata: dict[str, str] = field(default_factory=dict)
    mode: str = "subscription"
    quantity: int = 1

    def __post_init__(self) -> None:
        """Validate parameters after initialization."""
        if not self.price_id:
            raise ValueError("price_id is required")
        if not self.customer_id:
            raise ValueError("customer_id is required")
        if not self.success_url or not self.cancel_url:
            raise ValueError("success_url and cancel_url are required")
        if self.quantity <= 0:
            raise ValueError("quantity must be positive")


@dataclass
class CheckoutSessionResult:
    """
    Result from Stripe Checkout Session creation.

    Attributes:
        id: Checkout Session ID (cs_xxx)
        url: Hosted checkout URL to redirect the customer to
        status: Session status ('open' right after creation)
        customer_id: Stripe Customer ID the session belongs to
        metadata: Attached metadata
        raw_response: Full Stripe response dict
    """

    id: str
    url: str
    status: str | None = None
    customer_id: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    raw_response: dict[str, Any] = field(default_factory=dict)


# =============================================================================
# Client Configuration
# =============================================================================


def configure_stripe_client() -> None:
    """
    Apply timeout and network retry settings to the Stripe SDK.

    Called once from ``PaymentsConfig.ready()``. The API key is not set
    here; every call passes ``api_key`` explicitly.
    """
    timeout = getattr(settings, "STRIPE_API_TIMEOUT_SECONDS", 10)
    stripe.max_network_retries = getattr(settings, "STRIPE_MAX_RETRIES", 2)
    stripe.default_http_client = stripe.RequestsClient(timeout=timeout)


# =============================================================================
# Stripe Adapter
# =============================================================================


class StripeAdapter:
    """
    Adapter for Stripe API operations.

    All methods are classmethods - no instance state is maintained.
    Thread-safe for use from request threads and Celery workers.

    Usage:
        customer = StripeAdapter.create_customer("a@example.com", "org_1")
        subscription = StripeAdapter.retrieve_subscription("sub_123")
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Get logger for this adapter."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @staticmethod
    def _api_key() -> str:
        return settings.STRIPE_SECRET_KEY

    # =========================================================================
    # Customers
    # =========================================================================

    @classmethod
    def create_customer(
        cls,
        email: str,
        organization_id: str,
        name: str | None = None,
    ) -> dict[str, Any]:
        """
        Create a Stripe Customer for an organization.

        Args:
            email: Billing email
            organization_id: Stored in the customer's metadata
            name: Optional display name

        Returns:
            Stripe customer as a dict
        """
        logger = cls.get_logger()

        log_context = {
            "operation": "create_customer",
            "organization_id": organization_id,
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        params: dict[str, Any] = {
            "email": email,
            "metadata": {"organization_id": organization_id},
        }
        if name:
            params["name"] = name

        try:
            customer = stripe.Customer.create(api_key=cls._api_key(), **params)

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "customer_id": customer.id,
                    "duration_ms": duration_ms,
                },
            )
            return customer.to_dict()

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    @classmethod
    def update_customer_email(cls, customer_id: str, email: str) -> dict[str, Any]:
        """
        Set the email on an existing Stripe Customer.

        Only used to backfill a customer that was created without one.
        """
        logger = cls.get_logger()

        log_context = {
            "operation": "update_customer_email",
            "customer_id": customer_id,
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            customer = stripe.Customer.modify(
                customer_id,
                api_key=cls._api_key(),
                email=email,
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={**log_context, "duration_ms": duration_ms},
            )
            return customer.to_dict()

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    @classmethod
    def retrieve_customer(cls, customer_id: str) -> dict[str, Any]:
        """Retrieve a Stripe Customer by ID."""
        return cls._retrieve(stripe.Customer, "retrieve_customer", customer_id)

    # =========================================================================
    # Catalog
    # =========================================================================

    @classmethod
    def retrieve_price(cls, price_id: str) -> dict[str, Any]:
        """
        Retrieve a Stripe Price by ID.

        The result carries ``active`` and ``recurring.interval``, which
        checkout validates before creating a session.

        Raises:
            StripeResourceNotFoundError: No such price
        """
        return cls._retrieve(stripe.Price, "retrieve_price", price_id)

    @classmethod
    def retrieve_product(cls, product_id: str) -> dict[str, Any]:
        """Retrieve a Stripe Product by ID."""
        return cls._retrieve(stripe.Product, "retrieve_product", product_id)

    # =========================================================================
    # Checkout Sessions
    # =========================================================================

    @classmethod
    def create_checkout_session(
        cls,
        params: CreateCheckoutSessionParams,
    ) -> CheckoutSessionResult:
        """
        Create a hosted Checkout Session.

        The metadata is attached to the session and, in subscription mode,
        copied to ``subscription_data.metadata`` so the resulting
        subscription carries it too.

        Args:
            params: Parameters for creating the session

        Returns:
            CheckoutSessionResult with the session id and redirect URL

        Raises:
            StripeInvalidRequestError: Invalid parameters
            StripeAPIUnavailableError: Stripe service unavailable
        """
        logger = cls.get_logger()

        log_context = {
            "operation": "create_checkout_session",
            "customer_id": params.customer_id,
            "price_id": params.price_id,
            "mode": params.mode,
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        request: dict[str, Any] = {
            "mode": params.mode,
            "customer": params.customer_id,
            "line_items": [{"price": params.price_id, "quantity": params.quantity}],
            "success_url": params.success_url,
            "cancel_url": params.cancel_url,
            "metadata": params.metadata,
        }
        if params.mode == "subscription":
            request["subscription_data"] = {"metadata": params.metadata}

        try:
            session = stripe.checkout.Session.create(api_key=cls._api_key(), **request)

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "session_id": session.id,
                    "duration_ms": duration_ms,
                },
            )

            raw = session.to_dict()
            return CheckoutSessionResult(
                id=session.id,
                url=raw.get("url") or "",
                status=raw.get("status"),
                customer_id=raw.get("customer"),
                metadata=dict(raw.get("metadata") or {}),
                raw_response=raw,
            )

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    @classmethod
    def retrieve_checkout_session(
        cls,
        session_id: str,
        expand: list[str] | None = None,
    ) -> dict[str, Any]:
        """
        Retrieve a Checkout Session with its line items expanded.

        Args:
            session_id: Checkout Session ID (cs_xxx)
            expand: Expansion paths (default: line item price and product)
        """
        return cls._retrieve(
            stripe.checkout.Session,
            "retrieve_checkout_session",
            session_id,
            expand=CHECKOUT_SESSION_EXPAND if expand is None else expand,
        )

    # =========================================================================
    # Subscriptions
    # =========================================================================

    @classmethod
    def retrieve_subscription(cls, subscription_id: str) -> dict[str, Any]:
        """
        Retrieve the current Subscription with items, prices and products.

        Webhook payloads may be partial or stale; every reconciliation
        write starts from this call.

        Raises:
            StripeResourceNotFoundError: No such subscription
        """
        return cls._retrieve(
            stripe.Subscription,
            "retrieve_subscription",
            subscription_id,
            expand=SUBSCRIPTION_EXPAND,
        )

    # =========================================================================
    # Webhook Verification
    # =========================================================================

    @classmethod
    def verify_webhook_signature(
        cls,
        payload: bytes,
        signature: str,
        webhook_secret: str | None = None,
    ) -> dict[str, Any]:
        """
        Verify and parse a Stripe webhook event.

        Args:
            payload: Raw webhook payload bytes, exactly as received
            signature: Stripe-Signature header value
            webhook_secret: Signing secret (default: settings.STRIPE_WEBHOOK_SECRET)

        Returns:
            Parsed event data dict

        Raises:
            StripeSignatureVerificationError: Invalid signature or payload
        """
        secret = webhook_secret or settings.STRIPE_WEBHOOK_SECRET
        try:
            event = stripe.Webhook.construct_event(payload, signature, secret)
            return event.to_dict()
        except stripe.SignatureVerificationError as e:
            cls.get_logger().warning(
                "Webhook signature verification failed",
                extra={"error": str(e)},
            )
            raise StripeSignatureVerificationError(
                "Invalid webhook signature",
                stripe_code="signature_verification_failed",
                details={"error": str(e)},
            ) from e
        except ValueError as e:
            raise StripeSignatureVerificationError(
                "Invalid webhook payload",
                stripe_code="invalid_payload",
                details={"error": str(e)},
            ) from e

    # =========================================================================
    # Internals
    # =========================================================================

    @classmethod
    def _retrieve(
        cls,
        resource: Any,
        operation: str,
        object_id: str,
        expand: list[str] | None = None,
    ) -> dict[str, Any]:
        """Retrieve one Stripe object by id and return it as a dict."""
        logger = cls.get_logger()

        log_context = {
            "operation": operation,
            "object_id": object_id,
        }

        start_time = time.time()
        logger.debug("Starting Stripe operation", extra=log_context)

        kwargs: dict[str, Any] = {"api_key": cls._api_key()}
        if expand:
            kwargs["expand"] = expand

        try:
            obj = resource.retrieve(object_id, **kwargs)

            duration_ms = (time.time() - start_time) * 1000
            logger.debug(
                "Stripe operation completed",
                extra={**log_context, "duration_ms": duration_ms},
            )
            return obj.to_dict()

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    @classmethod
    def _handle_stripe_error(
        cls,
        error: Exception,
        log_context: dict[str, Any],
        duration_ms: float,
    ) -> None:
        """
        Translate Stripe exceptions to domain exceptions.

        Args:
            error: The Stripe exception
            log_context: Logging context dict
            duration_ms: Operation duration for logging

        Raises:
            StripeResourceNotFoundError: Object does not exist
            StripeInvalidRequestError: Invalid request parameters
            StripeAuthenticationError: Invalid API key
            StripeRateLimitError: Rate limited
            StripeAPIUnavailableError: Network error, 5xx or unknown error
        """
        logger = cls.get_logger()

        log_context = {**log_context, "duration_ms": duration_ms}

        if isinstance(error, stripe.InvalidRequestError):
            if error.code == "resource_missing":
                logger.warning(
                    "Stripe resource not found",
                    extra={**log_context, "stripe_code": error.code},
                )
                raise StripeResourceNotFoundError(
                    str(error.user_message or error),
                    stripe_code=error.code,
                    details={"param": error.param} if error.param else None,
                ) from error

            logger.error(
                "Invalid request to Stripe",
                extra={**log_context, "stripe_code": error.code},
            )
            raise StripeInvalidRequestError(
                str(error.user_message or error),
                stripe_code=error.code,
            ) from error

        elif isinstance(error, stripe.RateLimitError):
            logger.warning(
                "Rate limited by Stripe",
                extra=log_context,
            )
            raise StripeRateLimitError(
                "Stripe rate limit exceeded. Please retry.",
                stripe_code="rate_limit",
            ) from error

        elif isinstance(error, stripe.APIConnectionError):
            logger.error(
                "Connection error to Stripe",
                extra=log_context,
                exc_info=True,
            )
            raise StripeAPIUnavailableError(
                "Could not connect to Stripe. Please retry.",
                stripe_code="api_connection_error",
            ) from error

        elif isinstance(error, stripe.AuthenticationError):
            logger.critical(
                "Stripe authentication failed - check API key",
                extra=log_context,
            )
            raise StripeAuthenticationError(
                "Stripe authentication failed",
                stripe_code="authentication_error",
            ) from error

        elif isinstance(error, stripe.APIError):
            logger.error(
                "Stripe API error",
                extra=log_context,
                exc_info=True,
            )
            raise StripeAPIUnavailableError(
                "Stripe service error. Please retry.",
                stripe_code="api_error",
            ) from error

        else:
            logger.error(
                f"Unexpected error from Stripe: {type(error).__name__}",
                extra=log_context,
                exc_info=True,
            )
            raise StripeAPIUnavailableError(
                f"Unexpected Stripe error: {error}",
                stripe_code="unknown_error",
            ) from error
