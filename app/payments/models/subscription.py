"""
SubscriptionRecord model mirroring a Stripe subscription.

The record is keyed by the Stripe subscription id and always reflects the
latest snapshot fetched from Stripe: every handler re-fetches the
subscription before writing, so the last write wins with fresh data.
Deletion events only retire the record (status canceled); rows are never
removed.

Usage:
    from payments.models import SubscriptionRecord

    record = SubscriptionRecord.objects.get(stripe_subscription_id="sub_123")
    if record.is_active:
        ...
"""

from __future__ import annotations

from django.db import models

from core.models import BaseModel
from core.model_mixins import UUIDPrimaryKeyMixin

from payments.state_machines import BillingInterval, SubscriptionStatus


class SubscriptionRecord(UUIDPrimaryKeyMixin, BaseModel):
    """
    Durable mirror of one Stripe subscription's lifecycle.

    Status is free text mirroring Stripe's vocabulary; ``SubscriptionStatus``
    lists the known values for the admin but unknown values are stored as-is.

    Fields:
        stripe_subscription_id: Stripe Subscription ID (sub_xxx, unique)
        organization_id: Organization that owns the subscription
        stripe_customer_id: Stripe Customer ID (cus_xxx)
        plan_id: Plan identifier, when known
        billing_interval: 'month' or 'year', when known
        status: Latest Stripe status
        current_period_start/end: Current billing period (always present)
        cancel_at_period_end: Whether cancellation is scheduled
        canceled_at: When the subscription was canceled
        metadata: Stripe subscription metadata (string map)
        stripe_data: Full Stripe subscription object from the last sync
    """

    # ==========================================================================
    # Stripe Integration
    # ==========================================================================

    stripe_subscription_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Stripe Subscription ID (sub_xxx)",
    )

    organization_id = models.CharField(
        max_length=255,
        db_index=True,
        help_text="Internal organization identifier",
    )

    stripe_customer_id = models.CharField(
        max_length=255,
        db_index=True,
        help_text="Stripe Customer ID (cus_xxx)",
    )

    # ==========================================================================
    # Plan
    # ==========================================================================

    plan_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Subscription plan identifier",
    )

    billing_interval = models.CharField(
        max_length=10,
        choices=BillingInterval.choices,
        null=True,
        blank=True,
        help_text="Billing frequency: 'month' or 'year'",
    )

    # ==========================================================================
    # Status & Billing Period
    # ==========================================================================

    status = models.CharField(
        max_length=32,
        choices=SubscriptionStatus.choices,
        db_index=True,
        help_text="Latest Stripe subscription status",
    )

    current_period_start = models.DateTimeField(
        help_text="Start of current billing period",
    )

    current_period_end = models.DateTimeField(
        help_text="End of current billing period",
    )

    # ==========================================================================
    # Cancellation
    # ==========================================================================

    cancel_at_period_end = models.BooleanField(
        default=False,
        help_text="Whether subscription will cancel at period end",
    )

    canceled_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When subscription was canceled",
    )

    # ==========================================================================
    # Metadata
    # ==========================================================================

    metadata = models.JSONField(
        default=dict,
        blank=True,
        help_text="Stripe subscription metadata",
    )

    stripe_data = models.JSONField(
        default=dict,
        blank=True,
        help_text="Full Stripe subscription object from the last sync",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Subscription"
        verbose_name_plural = "Subscriptions"
        indexes = [
            models.Index(fields=["organization_id", "status"], name="subscription_org_status_idx"),
        ]

    def __str__(self) -> str:
        return f"SubscriptionRecord({self.stripe_subscription_id}, {self.status})"

    @property
    def is_active(self) -> bool:
        """Check if subscription is currently active or trialing."""
        return self.status in (SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIALING)

    @property
    def is_canceled(self) -> bool:
        """Check if subscription is canceled."""
        return self.status == SubscriptionStatus.CANCELED
