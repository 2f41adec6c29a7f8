"""
Plan lookup: resolve a plan id and billing interval to a Stripe price id.
"""

from __future__ import annotations

from core.services import BaseService

from payments.exceptions import PlanNotFoundError
from payments.models import SubscriptionPlan


class PlanLookupService(BaseService):
    """Reads the SubscriptionPlan catalog."""

    @classmethod
    def get_price_id(cls, plan_id: str, billing_interval: str) -> str:
        """
        Return the Stripe price id of ``plan_id`` for ``billing_interval``.

        Raises:
            PlanNotFoundError: Unknown or inactive plan, or no price for the interval
        """
        plan = SubscriptionPlan.objects.filter(plan_id=plan_id, is_active=True).first()
        if plan is None:
            raise PlanNotFoundError(
                f"Subscription plan with UID '{plan_id}' not found",
                details={"plan_id": plan_id},
            )

        price_id = plan.price_for_interval(billing_interval)
        if not price_id:
            raise PlanNotFoundError(
                f"No price found for subscription plan '{plan_id}' "
                f"with billing interval '{billing_interval}'",
                details={"plan_id": plan_id, "billing_interval": billing_interval},
            )

        cls.get_logger().debug(
            "Resolved plan price",
            extra={"plan_id": plan_id, "billing_interval": billing_interval, "price_id": price_id},
        )
        return price_id
