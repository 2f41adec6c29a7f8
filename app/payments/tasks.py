"""
Celery tasks for payment processing.

This module provides async tasks for:
- Reprocessing Stripe webhook events whose handler failed

Webhooks are applied synchronously on receipt; these tasks only serve
operators (the WebhookEvent admin action) re-running a failed entry from
its stored payload. There is no automatic retry schedule; Stripe's own
redelivery covers that.

Usage:
    from payments.tasks import reprocess_webhook_event

    reprocess_webhook_event.delay(str(webhook_event.id))
"""

from __future__ import annotations

import logging
from uuid import UUID

from celery import shared_task

from payments.models import WebhookEvent

logger = logging.getLogger(__name__)


# =============================================================================
# Webhook Processing Tasks
# =============================================================================


@shared_task(acks_late=True)
def reprocess_webhook_event(webhook_event_id: str) -> dict:
    """
    Re-run a recorded webhook event through the handler registry.

    The stored payload was signature-verified on receipt, so it is not
    verified again. Processed entries are skipped.

    Args:
        webhook_event_id: UUID of the WebhookEvent to reprocess

    Returns:
        Dict with processing result status
    """
    # Import here to avoid circular imports
    from payments.webhooks.processor import WebhookProcessor

    if isinstance(webhook_event_id, str):
        webhook_event_id = UUID(webhook_event_id)

    logger.info(
        "Reprocessing webhook event",
        extra={"webhook_event_id": str(webhook_event_id)},
    )

    try:
        webhook_event = WebhookEvent.objects.get(id=webhook_event_id)
    except WebhookEvent.DoesNotExist:
        logger.error(
            "WebhookEvent not found",
            extra={"webhook_event_id": str(webhook_event_id)},
        )
        return {"status": "not_found", "webhook_event_id": str(webhook_event_id)}

    if webhook_event.is_processed:
        logger.info(
            "WebhookEvent already processed, skipping",
            extra={
                "webhook_event_id": str(webhook_event_id),
                "stripe_event_id": webhook_event.stripe_event_id,
            },
        )
        return {
            "status": "already_processed",
            "webhook_event_id": str(webhook_event_id),
        }

    result = WebhookProcessor.process_entry(webhook_event)

    return {
        "status": "processed" if result.processed else "failed",
        "webhook_event_id": str(webhook_event_id),
        "stripe_event_id": webhook_event.stripe_event_id,
        "message": result.message,
    }
