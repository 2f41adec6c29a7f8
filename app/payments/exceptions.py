"""
Payment-specific exceptions for checkout and reconciliation.

Every payment exception also inherits one of the core categories, so the
API layer can choose an HTTP status from the category alone.

Exception Hierarchy:
    PaymentError (base for payment domain)
    ├── PlanNotFoundError - Unknown plan or no price for the interval (NotFoundError)
    ├── PriceValidationError - Price missing, inactive or wrong interval (ValidationError)
    ├── CustomerEmailRequiredError - New customer without an email (ValidationError)
    ├── CustomerEmailConflictError - Email differs from the one on file (ConflictError)
    ├── CustomerLinkNotFoundError - Event references an unknown customer (NotFoundError)
    ├── WebhookPayloadError - Event lacks an id the handler needs (ValidationError)
    ├── SubscriptionPeriodError - Period bounds missing after fallback (ValidationError)
    └── StripeError - Base for all Stripe errors (ExternalServiceError)
        ├── StripeInvalidRequestError - Invalid request params (permanent)
        │   └── StripeResourceNotFoundError - No such object (permanent, NotFoundError)
        ├── StripeAuthenticationError - Bad API key (permanent)
        ├── StripeSignatureVerificationError - Webhook signature invalid (permanent)
        ├── StripeRateLimitError - Rate limited (transient)
        └── StripeAPIUnavailableError - Network or 5xx (transient)

Usage:
    from payments.exceptions import CustomerEmailConflictError

    raise CustomerEmailConflictError(
        "Email mismatch between customer and checkout request.",
        details={"organization_id": "org_2"},
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import (
    BaseApplicationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Payment Domain Exceptions
# =============================================================================


class PaymentError(BaseApplicationError):
    """
    Base exception for all payment operations.

    The webhook processor catches this (and anything else) per event and
    records it on the ledger entry instead of failing the delivery.
    """

    default_error_code: str = "PAYMENT_ERROR"


class PlanNotFoundError(PaymentError, NotFoundError):
    """
    Raised when a plan id cannot be resolved to a Stripe price.

    Example:
        raise PlanNotFoundError(
            "Subscription plan with UID 'gold' not found",
            details={"plan_id": "gold"},
        )
    """

    default_error_code: str = "PLAN_NOT_FOUND"


class PriceValidationError(PaymentError, ValidationError):
    """
    Raised when a resolved price cannot be used for checkout.

    Covers a malformed price id, a price Stripe does not know, an
    inactive price, and a recurring interval that differs from the
    requested billing interval. No checkout session is created.
    """

    default_error_code: str = "PRICE_INVALID"


class CustomerEmailRequiredError(PaymentError, ValidationError):
    """Raised when a Customer Link must be created but no email was supplied."""

    default_error_code: str = "CUSTOMER_EMAIL_REQUIRED"


class CustomerEmailConflictError(PaymentError, ConflictError):
    """
    Raised when checkout supplies an email that differs from the one on file.

    Email changes belong to an explicit profile update, never to checkout.
    """

    default_error_code: str = "CUSTOMER_EMAIL_CONFLICT"


class CustomerLinkNotFoundError(PaymentError, NotFoundError):
    """
    Raised when an event references a Stripe customer with no Customer Link.

    This is a hard failure for the event: the ledger entry stays
    unprocessed so a later delivery can succeed once the link exists.
    """

    default_error_code: str = "CUSTOMER_LINK_NOT_FOUND"


class WebhookPayloadError(PaymentError, ValidationError):
    """Raised when an event object lacks an identifier its handler needs."""

    default_error_code: str = "INVALID_WEBHOOK_PAYLOAD"


class SubscriptionPeriodError(PaymentError, ValidationError):
    """
    Raised when a subscription has no usable current period bounds.

    Both the root fields and the first subscription item were checked.
    This points to Stripe API-version drift, not a normal runtime state.
    """

    default_error_code: str = "SUBSCRIPTION_PERIOD_MISSING"


# =============================================================================
# Stripe-Specific Exceptions
# =============================================================================


class StripeError(PaymentError, ExternalServiceError):
    """
    Base exception for all Stripe-related errors.

    Attributes:
        stripe_code: Stripe's internal error code
        is_retryable: Whether the same call may succeed later

    Callers decide what to do with ``is_retryable``; nothing in this
    package retries automatically.
    """

    default_error_code: str = "STRIPE_ERROR"
    is_retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        stripe_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if stripe_code:
            details["stripe_code"] = stripe_code
        super().__init__(message, error_code=error_code, details=details)
        self.stripe_code = stripe_code


# -----------------------------------------------------------------------------
# Permanent Errors (do not retry)
# -----------------------------------------------------------------------------


class StripeInvalidRequestError(StripeError):
    """
    Invalid request parameters sent to Stripe.

    The request itself is malformed and will never succeed with the
    same parameters.
    """

    default_error_code: str = "INVALID_STRIPE_REQUEST"
    is_retryable: bool = False


class StripeResourceNotFoundError(StripeInvalidRequestError, NotFoundError):
    """Stripe has no object with the requested id (``resource_missing``)."""

    default_error_code: str = "STRIPE_RESOURCE_NOT_FOUND"
    is_retryable: bool = False


class StripeAuthenticationError(StripeError):
    """The configured secret key was rejected. Operational issue."""

    default_error_code: str = "STRIPE_AUTHENTICATION_FAILED"
    is_retryable: bool = False


class StripeSignatureVerificationError(StripeError):
    """
    A webhook payload failed signature verification.

    The delivery is rejected with HTTP 400 before anything is recorded.
    """

    default_error_code: str = "STRIPE_SIGNATURE_INVALID"
    is_retryable: bool = False


# -----------------------------------------------------------------------------
# Transient Errors (may succeed later)
# -----------------------------------------------------------------------------


class StripeRateLimitError(StripeError):
    """Rate limited by the Stripe API."""

    default_error_code: str = "STRIPE_RATE_LIMITED"
    is_retryable: bool = True


class StripeAPIUnavailableError(StripeError):
    """
    Stripe API is temporarily unavailable.

    This covers network connectivity issues, timeouts and Stripe
    server errors (5xx).
    """

    default_error_code: str = "STRIPE_UNAVAILABLE"
    is_retryable: bool = True


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Payment domain
    "PaymentError",
    "PlanNotFoundError",
    "PriceValidationError",
    "CustomerEmailRequiredError",
    "CustomerEmailConflictError",
    "CustomerLinkNotFoundError",
    "WebhookPayloadError",
    "SubscriptionPeriodError",
    # Stripe-specific
    "StripeError",
    "StripeInvalidRequestError",
    "StripeResourceNotFoundError",
    "StripeAuthenticationError",
    "StripeSignatureVerificationError",
    "StripeRateLimitError",
    "StripeAPIUnavailableError",
]
