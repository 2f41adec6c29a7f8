"""
Webhook processor: the idempotency gate in front of the handlers.

Each Stripe event id is recorded once in the WebhookEvent ledger. The
first delivery runs the handler and stores its outcome; every later
delivery of an event that was processed returns the stored outcome
without touching subscription state. Failed events stay unprocessed, so
Stripe's own redelivery (or the admin reprocess action) retries them.

Usage:
    from payments.webhooks.processor import WebhookProcessor

    result = WebhookProcessor.process_event(event)
    return JsonResponse(result.to_response())
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from core.services import BaseService

from payments.models import WebhookEvent
from payments.state_machines import WebhookEventStatus
from payments.webhooks.handlers import dispatch_webhook


ALREADY_PROCESSED_MESSAGE = "Event already processed"


@dataclass
class WebhookProcessingResult:
    """
    Outcome of processing one webhook delivery.

    Attributes:
        event_id: Stripe event ID (evt_xxx)
        processed: Whether the event has been applied
        message: Handler outcome or failure description
        subscription_id: Subscription the event touched, if any
        organization_id: Organization the event resolved to, if any
    """

    event_id: str
    processed: bool
    message: str
    subscription_id: str | None = None
    organization_id: str | None = None

    def to_response(self) -> dict[str, Any]:
        """Body acknowledged back to Stripe."""
        return {
            "received": True,
            "eventId": self.event_id,
            "processed": self.processed,
            "message": self.message,
        }


class WebhookProcessor(BaseService):
    """
    Records and applies Stripe events exactly once.

    Handlers run outside any enclosing transaction; each handler's own
    writes are atomic and no transaction spans a Stripe call.
    """

    @classmethod
    def process_event(cls, event: dict[str, Any]) -> WebhookProcessingResult:
        """
        Record a verified Stripe event and apply it if it is new.

        Args:
            event: Verified Stripe event dict (id, type, data.object)

        Returns:
            WebhookProcessingResult for the acknowledgement body
        """
        webhook_event, created = WebhookEvent.objects.get_or_create(
            stripe_event_id=event["id"],
            defaults={
                "event_type": event["type"],
                "payload": event,
                "status": WebhookEventStatus.PENDING,
            },
        )

        cls.get_logger().info(
            f"Received Stripe webhook: {webhook_event.event_type}",
            extra={
                "stripe_event_id": webhook_event.stripe_event_id,
                "event_type": webhook_event.event_type,
                "ledger_created": created,
            },
        )

        return cls.process_entry(webhook_event)

    @classmethod
    def process_entry(cls, webhook_event: WebhookEvent) -> WebhookProcessingResult:
        """
        Apply a ledger entry unless it has already been processed.

        Handler exceptions and failed results are recorded on the entry
        and reported in the result; they are not raised.
        """
        log = cls.get_logger()
        log_context = {
            "stripe_event_id": webhook_event.stripe_event_id,
            "event_type": webhook_event.event_type,
        }

        if webhook_event.is_processed:
            log.info("Event already processed, skipping", extra=log_context)
            return WebhookProcessingResult(
                event_id=webhook_event.stripe_event_id,
                processed=True,
                message=ALREADY_PROCESSED_MESSAGE,
                subscription_id=webhook_event.result_subscription_id,
                organization_id=webhook_event.result_organization_id,
            )

        webhook_event.mark_processing()
        webhook_event.save()

        try:
            result = dispatch_webhook(webhook_event)
        except Exception as e:
            log.error(
                f"Error processing webhook event: {type(e).__name__}",
                extra={**log_context, "error": str(e)},
                exc_info=True,
            )
            return cls._record_failure(webhook_event, str(e))

        if not result.success:
            log.warning(
                "Webhook handler returned failure",
                extra={**log_context, "error": result.error},
            )
            return cls._record_failure(webhook_event, result.error or "Handler failed")

        outcome = result.data
        webhook_event.mark_processed(
            outcome.message,
            subscription_id=outcome.subscription_id,
            organization_id=outcome.organization_id,
        )
        webhook_event.save()

        log.info(
            "Webhook processed successfully",
            extra={**log_context, "retry_count": webhook_event.retry_count},
        )
        return WebhookProcessingResult(
            event_id=webhook_event.stripe_event_id,
            processed=True,
            message=outcome.message,
            subscription_id=outcome.subscription_id,
            organization_id=outcome.organization_id,
        )

    @classmethod
    def _record_failure(
        cls,
        webhook_event: WebhookEvent,
        error_message: str,
    ) -> WebhookProcessingResult:
        webhook_event.mark_failed(error_message)
        webhook_event.save()
        return WebhookProcessingResult(
            event_id=webhook_event.stripe_event_id,
            processed=False,
            message=webhook_event.result_message,
        )
