"""
Webhook handling for payment events from Stripe.

This module provides the view, processor and handlers for reconciling
subscription state from Stripe webhooks. Events are verified, recorded
idempotently in the WebhookEvent ledger and applied synchronously.

Usage:
    # In urls.py
    from payments.webhooks.views import stripe_webhook

    urlpatterns = [
        path("webhook", stripe_webhook, name="stripe_webhook"),
    ]
"""

from payments.webhooks.handlers import WebhookOutcome, dispatch_webhook, register_handler
from payments.webhooks.processor import WebhookProcessingResult, WebhookProcessor
from payments.webhooks.views import stripe_webhook

__all__ = [
    "WebhookOutcome",
    "WebhookProcessingResult",
    "WebhookProcessor",
    "dispatch_webhook",
    "register_handler",
    "stripe_webhook",
]
