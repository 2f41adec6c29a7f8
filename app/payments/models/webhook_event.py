"""
WebhookEvent model: the event ledger for idempotent webhook processing.

Every Stripe event is recorded here before it is dispatched. The unique
stripe_event_id is the only deduplication key: an entry that reached
PROCESSED is never dispatched again, while a FAILED entry is picked up
again by the next delivery of the same event id.

Usage:
    from payments.models import WebhookEvent

    entry, created = WebhookEvent.objects.get_or_create(
        stripe_event_id="evt_1234567890",
        defaults={
            "event_type": "checkout.session.completed",
            "payload": event,
        },
    )
    if entry.is_processed:
        return entry.result_message
"""

from __future__ import annotations

from django.db import models
from django.utils import timezone

from core.models import BaseModel
from core.model_mixins import UUIDPrimaryKeyMixin

from payments.state_machines import WebhookEventStatus


class WebhookEvent(UUIDPrimaryKeyMixin, BaseModel):
    """
    One row per distinct Stripe event.

    Processing Flow:
        1. Signature verified by the webhook view
        2. get_or_create by stripe_event_id
        3. If PROCESSED -> return the stored outcome, nothing else runs
        4. mark_processing() and dispatch to the registered handler
        5. mark_processed(...) or mark_failed(...)

    A failed entry keeps ``is_processed`` False so it stays eligible for
    the next delivery (or an operator reprocess).

    Fields:
        stripe_event_id: Unique Stripe Event ID (evt_xxx)
        event_type: Type of webhook event
        payload: Full event JSON as verified on receipt
        status: Processing status
        processed_at: When event was successfully processed
        error_message: Error details if processing failed
        retry_count: Number of processing attempts
        result_success: Outcome of the last attempt (None before any)
        result_message: Human-readable outcome of the last attempt
        result_subscription_id: Subscription touched by the handler
        result_organization_id: Organization resolved by the handler
    """

    # ==========================================================================
    # Event Identification
    # ==========================================================================

    stripe_event_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Stripe Event ID (evt_xxx) - unique constraint for idempotency",
    )

    event_type = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Stripe event type (e.g., 'checkout.session.completed')",
    )

    payload = models.JSONField(
        default=dict,
        help_text="Full webhook payload from Stripe (JSON)",
    )

    # ==========================================================================
    # Processing Status
    # ==========================================================================

    status = models.CharField(
        max_length=20,
        choices=WebhookEventStatus.choices,
        default=WebhookEventStatus.PENDING,
        db_index=True,
        help_text="Current processing status",
    )

    processed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When event was successfully processed",
    )

    error_message = models.TextField(
        null=True,
        blank=True,
        help_text="Error message if processing failed",
    )

    retry_count = models.PositiveSmallIntegerField(
        default=0,
        help_text="Number of processing attempts",
    )

    # ==========================================================================
    # Processing Result
    # ==========================================================================

    result_success = models.BooleanField(
        null=True,
        blank=True,
        help_text="Whether the last processing attempt succeeded",
    )

    result_message = models.TextField(
        blank=True,
        default="",
        help_text="Outcome message of the last processing attempt",
    )

    result_subscription_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Stripe subscription id resulting from processing",
    )

    result_organization_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Organization id resulting from processing",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Webhook Event"
        verbose_name_plural = "Webhook Events"
        indexes = [
            models.Index(fields=["status", "created_at"], name="webhook_status_created_idx"),
            models.Index(fields=["event_type", "created_at"], name="webhook_type_created_idx"),
        ]

    def __str__(self) -> str:
        """Return string representation with event ID and type."""
        return f"WebhookEvent({self.stripe_event_id}, {self.event_type})"

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def is_processed(self) -> bool:
        """Check if event has been successfully processed."""
        return self.status == WebhookEventStatus.PROCESSED

    @property
    def is_failed(self) -> bool:
        """Check if event processing failed."""
        return self.status == WebhookEventStatus.FAILED

    # ==========================================================================
    # Helper Methods
    # ==========================================================================

    def mark_processing(self) -> None:
        """
        Mark event as being processed.

        Note: Does not save - caller must save after calling.
        """
        self.status = WebhookEventStatus.PROCESSING
        self.retry_count += 1

    def mark_processed(
        self,
        message: str,
        subscription_id: str | None = None,
        organization_id: str | None = None,
    ) -> None:
        """
        Mark event as successfully processed and record the outcome.

        Note: Does not save - caller must save after calling.
        """
        self.status = WebhookEventStatus.PROCESSED
        self.processed_at = timezone.now()
        self.error_message = None
        self.result_success = True
        self.result_message = message
        self.result_subscription_id = subscription_id
        self.result_organization_id = organization_id

    def mark_failed(self, error_message: str) -> None:
        """
        Mark event as failed with error message.

        Note: Does not save - caller must save after calling.
        """
        self.status = WebhookEventStatus.FAILED
        self.error_message = error_message
        self.result_success = False
        self.result_message = f"Error processing event: {error_message}"
        self.result_subscription_id = None
        self.result_organization_id = None

    def get_object(self) -> dict:
        """Return ``data.object`` from the stored payload, or an empty dict."""
        try:
            return self.payload.get("data", {}).get("object", {}) or {}
        except (AttributeError, TypeError):
            return {}
