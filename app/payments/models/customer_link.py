"""
CustomerLink model binding an organization to its Stripe customer.

Each organization owns exactly one Stripe customer. The link is created
lazily the first time the organization starts a checkout and is never
deleted. The only mutation allowed afterwards is backfilling an email that
was empty on file.

Usage:
    from payments.models import CustomerLink

    link = CustomerLink.objects.filter(organization_id="org_1").first()
    if link is None:
        customer = StripeAdapter.create_customer(email, organization_id="org_1")
        link = CustomerLink.objects.create(
            organization_id="org_1",
            stripe_customer_id=customer["id"],
            email=email,
            stripe_data=customer,
        )
"""

from __future__ import annotations

from django.db import models

from core.models import BaseModel
from core.model_mixins import UUIDPrimaryKeyMixin


class CustomerLink(UUIDPrimaryKeyMixin, BaseModel):
    """
    One-to-one mapping between an organization and a Stripe customer.

    Fields:
        organization_id: Internal organization identity (unique)
        stripe_customer_id: Stripe Customer ID (cus_xxx, unique)
        email: Billing email, empty until known
        name: Optional display name
        stripe_data: Raw Stripe customer object captured at creation

    Note:
        A differing email supplied during checkout is a conflict, never an
        overwrite. See ``payments.services.customer_service``.
    """

    organization_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Internal organization identifier",
    )

    stripe_customer_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Stripe Customer ID (cus_xxx)",
    )

    email = models.EmailField(
        blank=True,
        default="",
        help_text="Billing email on file (backfilled once if empty)",
    )

    name = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Optional customer display name",
    )

    stripe_data = models.JSONField(
        default=dict,
        blank=True,
        help_text="Raw Stripe customer payload for audit",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Customer Link"
        verbose_name_plural = "Customer Links"

    def __str__(self) -> str:
        return f"CustomerLink({self.organization_id} -> {self.stripe_customer_id})"

    @property
    def has_email(self) -> bool:
        """Check if an email is on file."""
        return bool(self.email)
