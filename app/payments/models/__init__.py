"""
Payment domain models.

This module contains the state store for checkout and reconciliation:
- CustomerLink: Organization to Stripe customer mapping
- CheckoutSessionRecord: One checkout attempt and its terminal state
- SubscriptionRecord: Mirror of a Stripe subscription
- SubscriptionPlan: Plan catalog resolved at checkout
- WebhookEvent: Event ledger for idempotent webhook processing
"""

from payments.models.checkout_session import CheckoutSessionRecord
from payments.models.customer_link import CustomerLink
from payments.models.subscription import SubscriptionRecord
from payments.models.subscription_plan import SubscriptionPlan
from payments.models.webhook_event import WebhookEvent

__all__ = [
    "CheckoutSessionRecord",
    "CustomerLink",
    "SubscriptionPlan",
    "SubscriptionRecord",
    "WebhookEvent",
]
