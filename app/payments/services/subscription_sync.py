"""
Subscription sync: turn a Stripe subscription object into a SubscriptionRecord.

This module holds the pieces shared by the success verifier and the
webhook handlers:
- resolve_subscription_period: read current period bounds from the
  subscription root, falling back to its first item
- extract_id: accept either a bare Stripe id or an expanded object
- SubscriptionSyncService.upsert_subscription: find-or-create by Stripe
  subscription id, overwriting every mutable field

Newer Stripe API versions moved ``current_period_start`` and
``current_period_end`` from the subscription onto its items, so both
locations are always checked, in the same order, everywhere.

Usage:
    from payments.services import SubscriptionSyncService

    subscription = StripeAdapter.retrieve_subscription("sub_123")
    record = SubscriptionSyncService.upsert_subscription(
        subscription,
        organization_id="org_1",
        stripe_customer_id="cus_123",
        plan_id="starter",
        billing_interval="month",
    )
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone as dt_timezone
from typing import Any

from django.utils import timezone

from core.services import BaseService

from payments.exceptions import SubscriptionPeriodError
from payments.models import SubscriptionRecord
from payments.state_machines import SubscriptionStatus


logger = logging.getLogger(__name__)

PERIOD_START = "current_period_start"
PERIOD_END = "current_period_end"


# =============================================================================
# Payload Helpers
# =============================================================================


def extract_id(value: Any) -> str | None:
    """
    Return the Stripe id from a bare id string or an expanded object.

    Example:
        extract_id("cus_123")            # "cus_123"
        extract_id({"id": "cus_123"})    # "cus_123"
        extract_id(None)                 # None
    """
    if isinstance(value, str):
        return value or None
    if isinstance(value, dict):
        object_id = value.get("id")
        if isinstance(object_id, str) and object_id:
            return object_id
    return None


def coerce_timestamp(value: Any) -> datetime | None:
    """
    Convert a Unix timestamp (seconds) into an aware UTC datetime.

    Returns None for missing, non-numeric or non-positive values.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid timestamp value", extra={"value": repr(value)})
        return None
    if seconds <= 0:
        logger.warning("Invalid timestamp value", extra={"value": repr(value)})
        return None
    return datetime.fromtimestamp(seconds, tz=dt_timezone.utc)


def first_subscription_item(subscription: dict[str, Any]) -> dict[str, Any] | None:
    """Return ``items.data[0]`` of a subscription, or None."""
    items = subscription.get("items") or {}
    data = items.get("data") if isinstance(items, dict) else None
    if data and isinstance(data[0], dict):
        return data[0]
    return None


# =============================================================================
# Period Resolution
# =============================================================================


@dataclass
class SubscriptionPeriod:
    """
    Current billing period of a subscription.

    Attributes:
        start: Period start (UTC)
        end: Period end (UTC)
        used_item_fallback: Whether either bound came from items.data[0]
    """

    start: datetime
    end: datetime
    used_item_fallback: bool = False


def resolve_subscription_period(subscription: dict[str, Any]) -> SubscriptionPeriod:
    """
    Resolve the current period bounds of a Stripe subscription.

    Each bound is read from the subscription root first; when absent or
    not a valid timestamp, it is read from the first subscription item.

    Raises:
        SubscriptionPeriodError: Either bound is still missing
    """
    subscription_id = subscription.get("id")
    item = first_subscription_item(subscription)

    raw_start = subscription.get(PERIOD_START)
    raw_end = subscription.get(PERIOD_END)
    start = coerce_timestamp(raw_start)
    end = coerce_timestamp(raw_end)
    used_item_fallback = False

    if start is None and item is not None and item.get(PERIOD_START) is not None:
        raw_start = item.get(PERIOD_START)
        start = coerce_timestamp(raw_start)
        used_item_fallback = True
        logger.debug(
            "Using current_period_start from subscription item instead of root",
            extra={"subscription_id": subscription_id},
        )

    if end is None and item is not None and item.get(PERIOD_END) is not None:
        raw_end = item.get(PERIOD_END)
        end = coerce_timestamp(raw_end)
        used_item_fallback = True
        logger.debug(
            "Using current_period_end from subscription item instead of root",
            extra={"subscription_id": subscription_id},
        )

    if start is None or end is None:
        missing = [
            name for name, value in ((PERIOD_START, start), (PERIOD_END, end)) if value is None
        ]
        items_data = (subscription.get("items") or {}).get("data") or []
        logger.error(
            "Missing date fields in subscription object",
            extra={
                "subscription_id": subscription_id,
                "missing_fields": missing,
                "item_fallback_tried": item is not None,
                "available_keys": sorted(subscription.keys())[:20],
                "items_length": len(items_data),
            },
        )
        raise SubscriptionPeriodError(
            f"Missing required date fields for subscription {subscription_id}. "
            f"current_period_start: {_describe(raw_start)}, "
            f"current_period_end: {_describe(raw_end)}. "
            "Please ensure the subscription object contains these fields.",
            details={"subscription_id": subscription_id, "missing_fields": missing},
        )

    return SubscriptionPeriod(start=start, end=end, used_item_fallback=used_item_fallback)


def _describe(value: Any) -> str:
    return "undefined" if value is None else str(value)


# =============================================================================
# Subscription Sync Service
# =============================================================================


class SubscriptionSyncService(BaseService):
    """
    Writes Stripe subscription snapshots into SubscriptionRecord.

    Callers fetch the subscription from Stripe first; this service only
    touches the database, so no transaction spans a Stripe call.
    """

    @classmethod
    def upsert_subscription(
        cls,
        subscription: dict[str, Any],
        organization_id: str,
        stripe_customer_id: str,
        plan_id: str | None = None,
        billing_interval: str | None = None,
    ) -> SubscriptionRecord:
        """
        Create or update the SubscriptionRecord for a Stripe subscription.

        Every mutable field is overwritten with the snapshot's values
        (last write wins). ``created_at`` is set on insert only. Plan id
        and billing interval fall back to the subscription's own metadata
        and are left untouched when neither source knows them.

        Args:
            subscription: Stripe subscription dict, freshly retrieved
            organization_id: Owning organization
            stripe_customer_id: Stripe customer the subscription belongs to
            plan_id: Plan id from checkout context, if known
            billing_interval: Billing interval from checkout context, if known

        Returns:
            The saved SubscriptionRecord

        Raises:
            SubscriptionPeriodError: Period bounds missing; nothing is written
        """
        log = cls.get_logger()
        subscription_id = subscription["id"]
        period = resolve_subscription_period(subscription)

        metadata = dict(subscription.get("metadata") or {})
        plan_id = plan_id or metadata.get("plan_id")
        billing_interval = billing_interval or metadata.get("billing_interval")

        defaults: dict[str, Any] = {
            "organization_id": organization_id,
            "stripe_customer_id": stripe_customer_id,
            "status": subscription.get("status") or "",
            "current_period_start": period.start,
            "current_period_end": period.end,
            "cancel_at_period_end": bool(subscription.get("cancel_at_period_end")),
            "canceled_at": coerce_timestamp(subscription.get("canceled_at")),
            "metadata": metadata,
            "stripe_data": subscription,
        }
        if plan_id:
            defaults["plan_id"] = plan_id
        if billing_interval:
            defaults["billing_interval"] = billing_interval

        with cls.atomic():
            record, created = SubscriptionRecord.objects.update_or_create(
                stripe_subscription_id=subscription_id,
                defaults=defaults,
            )

        log.info(
            "Upserted subscription",
            extra={
                "subscription_id": subscription_id,
                "organization_id": organization_id,
                "status": record.status,
                "record_created": created,
                "used_item_fallback": period.used_item_fallback,
            },
        )
        return record

    @classmethod
    def mark_canceled(cls, subscription_id: str) -> SubscriptionRecord | None:
        """
        Retire a subscription locally after Stripe deleted it.

        Returns:
            The updated record, or None when nothing is stored locally
        """
        record = SubscriptionRecord.objects.filter(stripe_subscription_id=subscription_id).first()
        if record is None:
            cls.get_logger().info(
                "No local subscription to cancel",
                extra={"subscription_id": subscription_id},
            )
            return None

        record.status = SubscriptionStatus.CANCELED
        record.canceled_at = timezone.now()
        record.save(update_fields=["status", "canceled_at", "updated_at"])
        return record

    @classmethod
    def refresh_status(
        cls,
        record: SubscriptionRecord,
        subscription: dict[str, Any],
    ) -> SubscriptionRecord:
        """Overwrite only the status of ``record`` from a fresh snapshot."""
        record.status = subscription.get("status") or record.status
        record.save(update_fields=["status", "updated_at"])
        return record
