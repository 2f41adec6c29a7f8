"""
State enums for payment models.

These are Django TextChoices for database storage and admin integration.

State Machines Overview:

CheckoutSessionRecord Status (django-fsm):
    pending → completed (Success Verifier or checkout.session.completed)
    pending → expired (checkout.session.expired)
    No reverse transitions.

WebhookEvent Status:
    pending → processing → processed (terminal)
    pending → processing → failed → processing (next delivery or reprocess)

SubscriptionRecord Status:
    Free text mirroring Stripe's vocabulary. The values below are the ones
    the code refers to by name; anything Stripe sends is stored as-is.
"""

from django.db import models


class BillingInterval(models.TextChoices):
    """Recurring interval a customer can check out with."""

    MONTH = "month", "Monthly"
    YEAR = "year", "Yearly"


class CheckoutSessionStatus(models.TextChoices):
    """
    Lifecycle of one attempted checkout.

    Terminal states: COMPLETED, EXPIRED
    """

    PENDING = "pending", "Pending"
    COMPLETED = "completed", "Completed"
    EXPIRED = "expired", "Expired"


class SubscriptionStatus(models.TextChoices):
    """Stripe subscription statuses."""

    INCOMPLETE = "incomplete", "Incomplete"
    INCOMPLETE_EXPIRED = "incomplete_expired", "Incomplete Expired"
    TRIALING = "trialing", "Trialing"
    ACTIVE = "active", "Active"
    PAST_DUE = "past_due", "Past Due"
    CANCELED = "canceled", "Canceled"
    UNPAID = "unpaid", "Unpaid"
    PAUSED = "paused", "Paused"


class WebhookEventStatus(models.TextChoices):
    """
    Processing status for WebhookEvent.

    Only PROCESSED is terminal. FAILED and stale PROCESSING entries are
    picked up again by the next delivery of the same Stripe event id.
    """

    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    PROCESSED = "processed", "Processed"
    FAILED = "failed", "Failed"
