"""
Customer service: the organization to Stripe customer link.

The first checkout of an organization creates its Stripe customer and the
CustomerLink. Later checkouts reuse it. An email on file is never replaced
by checkout; an empty one is backfilled once.

Usage:
    from payments.services import CustomerService

    link = CustomerService.get_or_create_customer("org_1", "a@example.com")
    customer_id = link.stripe_customer_id
"""

from __future__ import annotations

from django.db import IntegrityError
from django.utils import timezone

from core.services import BaseService

from payments.adapters import StripeAdapter
from payments.exceptions import CustomerEmailConflictError, CustomerEmailRequiredError
from payments.models import CustomerLink


class CustomerService(BaseService):
    """Creates and reads CustomerLink rows."""

    @classmethod
    def get_or_create_customer(
        cls,
        organization_id: str,
        email: str | None,
    ) -> CustomerLink:
        """
        Return the CustomerLink for an organization, creating it if needed.

        Args:
            organization_id: Internal organization id
            email: Email supplied with the checkout request

        Returns:
            The organization's CustomerLink

        Raises:
            CustomerEmailConflictError: A different email is already on file
            CustomerEmailRequiredError: No link exists and no email was given
            StripeError: The Stripe customer could not be created or updated
        """
        log = cls.get_logger()
        email = (email or "").strip()

        link = CustomerLink.objects.filter(organization_id=organization_id).first()
        if link is not None:
            return cls._reconcile_email(link, email)

        if not email:
            raise CustomerEmailRequiredError(
                "Email is required when creating a new customer. "
                "Customer email is needed for checkout, invoices, and receipts.",
                details={"organization_id": organization_id},
            )

        customer = StripeAdapter.create_customer(email, organization_id)

        try:
            with cls.atomic():
                link = CustomerLink.objects.create(
                    organization_id=organization_id,
                    stripe_customer_id=customer["id"],
                    email=email,
                    name=customer.get("name") or "",
                    stripe_data=customer,
                )
        except IntegrityError:
            # A concurrent checkout linked the organization first.
            link = CustomerLink.objects.filter(organization_id=organization_id).first()
            if link is None:
                raise
            log.warning(
                "Customer link created concurrently, Stripe customer left unlinked",
                extra={
                    "organization_id": organization_id,
                    "customer_id": customer["id"],
                    "linked_customer_id": link.stripe_customer_id,
                },
            )
            return cls._reconcile_email(link, email)

        log.info(
            "Created customer link",
            extra={"organization_id": organization_id, "customer_id": link.stripe_customer_id},
        )
        return link

    @classmethod
    def _reconcile_email(cls, link: CustomerLink, email: str) -> CustomerLink:
        """Reject a differing email; backfill an empty one."""
        if not email or email == link.email:
            return link

        if link.email:
            raise CustomerEmailConflictError(
                "Email mismatch between customer and checkout request.",
                details={"organization_id": link.organization_id},
            )

        StripeAdapter.update_customer_email(link.stripe_customer_id, email)
        updated = CustomerLink.objects.filter(pk=link.pk, email="").update(
            email=email,
            updated_at=timezone.now(),
        )
        if updated:
            link.email = email
        else:
            link.refresh_from_db(fields=["email"])
            if link.email != email:
                raise CustomerEmailConflictError(
                    "Email mismatch between customer and checkout request.",
                    details={"organization_id": link.organization_id},
                )

        cls.get_logger().info(
            "Backfilled customer email",
            extra={"organization_id": link.organization_id, "customer_id": link.stripe_customer_id},
        )
        return link
