"""
Webhook endpoint views for Stripe.

This module provides the HTTP endpoint for receiving Stripe webhooks.
The view:
1. Verifies the webhook signature against the raw request body
2. Records the event in the WebhookEvent ledger (idempotent)
3. Applies it synchronously through the handler registry
4. Acknowledges with a JSON body describing the outcome

A handler failure is still acknowledged with 200; the failure is recorded
on the ledger entry and the entry stays eligible for redelivery.

Usage:
    # In urls.py
    from payments.webhooks.views import stripe_webhook

    urlpatterns = [
        path("webhook", stripe_webhook, name="stripe_webhook"),
    ]
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from payments.adapters import StripeAdapter
from payments.exceptions import StripeSignatureVerificationError
from payments.webhooks.processor import WebhookProcessor


logger = logging.getLogger(__name__)


def _bad_request(message: str) -> JsonResponse:
    return JsonResponse({"error": message}, status=400)


@csrf_exempt
@require_POST
def stripe_webhook(request: HttpRequest) -> JsonResponse:
    """
    Receive, verify and apply Stripe webhook events.

    Security:
    - Signature verification prevents spoofed webhooks
    - CSRF exemption required for external webhooks
    - Only POST requests accepted

    Idempotency:
    - WebhookEvent.stripe_event_id is unique
    - A processed event is acknowledged again without reprocessing

    Returns:
        JsonResponse with status:
        - 200: {"received", "eventId", "processed", "message"}
        - 400: Secret not configured, signature missing or invalid,
          or event missing id/type

    Example Stripe-Signature header:
        t=1614556800,v1=xxx,v0=yyy
    """
    webhook_secret = settings.STRIPE_WEBHOOK_SECRET
    if not webhook_secret:
        logger.error("Webhook received but STRIPE_WEBHOOK_SECRET is not configured")
        return _bad_request("STRIPE_WEBHOOK_SECRET is not configured")

    signature = request.headers.get("Stripe-Signature", "")
    if not signature:
        logger.warning("Webhook received without Stripe-Signature header")
        return _bad_request("Missing Stripe signature header")

    try:
        event = StripeAdapter.verify_webhook_signature(request.body, signature, webhook_secret)
    except StripeSignatureVerificationError as e:
        logger.warning(
            "Webhook signature verification failed",
            extra={"error": str(e), "stripe_code": e.stripe_code},
        )
        return _bad_request(f"Webhook signature verification failed: {e.message}")

    if not event.get("id") or not event.get("type"):
        logger.warning("Webhook missing required fields")
        return _bad_request("Webhook event is missing id or type")

    result = WebhookProcessor.process_event(event)
    return JsonResponse(result.to_response(), status=200)
