"""
Payment adapters for external services.

All Stripe API calls go through ``StripeAdapter`` so that error
translation, timing logs and API-key handling stay in one place.

Usage:
    from payments.adapters import StripeAdapter

    subscription = StripeAdapter.retrieve_subscription("sub_123")
"""

from payments.adapters.stripe_adapter import (
    CheckoutSessionResult,
    CreateCheckoutSessionParams,
    StripeAdapter,
    configure_stripe_client,
)

__all__ = [
    "CheckoutSessionResult",
    "CreateCheckoutSessionParams",
    "StripeAdapter",
    "configure_stripe_client",
]
