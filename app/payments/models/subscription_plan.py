"""
SubscriptionPlan model: the plan catalog read at checkout.

Plans are maintained by operators (Django admin); checkout only reads them
to turn a plan id and billing interval into a Stripe price id.
"""

from __future__ import annotations

from django.db import models

from core.models import BaseModel
from core.model_mixins import UUIDPrimaryKeyMixin


class SubscriptionPlan(UUIDPrimaryKeyMixin, BaseModel):
    """
    A purchasable plan with one Stripe price per billing interval.

    Fields:
        plan_id: Public plan identifier used by checkout requests (unique)
        name: Display name
        stripe_product_id: Stripe Product ID (prod_xxx)
        prices: List of ``{"id": "price_xxx", "interval": "month"}`` entries
        is_active: Whether the plan can be purchased
    """

    plan_id = models.CharField(
        max_length=100,
        unique=True,
        help_text="Public plan identifier (e.g., 'starter')",
    )

    name = models.CharField(
        max_length=255,
        help_text="Plan display name",
    )

    stripe_product_id = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Stripe Product ID (prod_xxx)",
    )

    prices = models.JSONField(
        default=list,
        blank=True,
        help_text='Stripe prices per interval: [{"id": "price_xxx", "interval": "month"}]',
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Whether the plan is offered at checkout",
    )

    class Meta:
        ordering = ["plan_id"]
        verbose_name = "Subscription Plan"
        verbose_name_plural = "Subscription Plans"

    def __str__(self) -> str:
        return f"SubscriptionPlan({self.plan_id})"

    def price_for_interval(self, interval: str) -> str | None:
        """Return the Stripe price id for ``interval``, or None."""
        for price in self.prices or []:
            if isinstance(price, dict) and price.get("interval") == interval:
                return price.get("id") or None
        return None
