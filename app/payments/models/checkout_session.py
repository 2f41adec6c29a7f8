"""
CheckoutSessionRecord model tracking one hosted checkout attempt.

A record is created as PENDING when the Stripe checkout session is created
and moves to COMPLETED (success redirect or webhook) or EXPIRED (webhook).
Both the success verifier and the webhook reconciler may try to complete
the same record, so completion is safe to apply twice.

Usage:
    from payments.models import CheckoutSessionRecord

    record = CheckoutSessionRecord.objects.get(stripe_session_id="cs_test_123")
    record.mark_completed()
"""

from __future__ import annotations

import logging

from django.db import models

from django_fsm import FSMField, can_proceed, transition

from core.models import BaseModel
from core.model_mixins import UUIDPrimaryKeyMixin

from payments.state_machines import BillingInterval, CheckoutSessionStatus

logger = logging.getLogger(__name__)


class CheckoutSessionRecord(UUIDPrimaryKeyMixin, BaseModel):
    """
    Local mirror of a Stripe checkout session.

    State Flow:
        PENDING -> COMPLETED (payment confirmed)
        PENDING -> EXPIRED (session expired unpaid)

    There is no transition out of COMPLETED or EXPIRED.

    Fields:
        organization_id: Organization that started the checkout
        stripe_session_id: Stripe Checkout Session ID (cs_xxx, unique)
        stripe_customer_id: Stripe Customer ID the session was opened for
        plan_id: Plan the organization chose
        billing_interval: 'month' or 'year'
        metadata: String map sent to Stripe with the session
        status: Current FSM state
    """

    organization_id = models.CharField(
        max_length=255,
        db_index=True,
        help_text="Internal organization identifier",
    )

    stripe_session_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Stripe Checkout Session ID (cs_xxx)",
    )

    stripe_customer_id = models.CharField(
        max_length=255,
        db_index=True,
        help_text="Stripe Customer ID (cus_xxx)",
    )

    plan_id = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Subscription plan identifier",
    )

    billing_interval = models.CharField(
        max_length=10,
        choices=BillingInterval.choices,
        blank=True,
        default="",
        help_text="Billing frequency: 'month' or 'year'",
    )

    metadata = models.JSONField(
        default=dict,
        blank=True,
        help_text="Metadata string map attached to the Stripe session",
    )

    status = FSMField(
        default=CheckoutSessionStatus.PENDING,
        choices=CheckoutSessionStatus.choices,
        db_index=True,
        help_text="Current state of the checkout session (managed by FSM)",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Checkout Session"
        verbose_name_plural = "Checkout Sessions"
        indexes = [
            models.Index(fields=["organization_id", "status"], name="checkout_org_status_idx"),
        ]

    def __str__(self) -> str:
        return f"CheckoutSessionRecord({self.stripe_session_id}, {self.status})"

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=CheckoutSessionStatus.PENDING,
        target=CheckoutSessionStatus.COMPLETED,
    )
    def complete(self):
        """
        Transition: PENDING -> COMPLETED
        """

    @transition(
        field=status,
        source=CheckoutSessionStatus.PENDING,
        target=CheckoutSessionStatus.EXPIRED,
    )
    def expire(self):
        """
        Transition: PENDING -> EXPIRED
        """

    # ==========================================================================
    # Helper Methods
    # ==========================================================================

    def mark_completed(self) -> bool:
        """
        Complete the record if it is still pending, and save.

        Returns:
            True if the record changed, False if it was already completed
            or can no longer be completed (expired).
        """
        if self.status == CheckoutSessionStatus.COMPLETED:
            return False
        if not can_proceed(self.complete):
            logger.warning(
                "Checkout session cannot be completed from its current state",
                extra={"session_id": self.stripe_session_id, "status": self.status},
            )
            return False
        self.complete()
        self.save(update_fields=["status", "updated_at"])
        return True

    def mark_expired(self) -> bool:
        """
        Expire the record if it is still pending, and save.

        Returns:
            True if the record changed, False otherwise.
        """
        if not can_proceed(self.expire):
            return False
        self.expire()
        self.save(update_fields=["status", "updated_at"])
        return True

    @property
    def overages_enabled(self) -> bool:
        """Decode the overage flag stored as a string in metadata."""
        return (self.metadata or {}).get("overages_enabled") == "true"
