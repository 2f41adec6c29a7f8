"""
Success verifier: confirm a checkout after the customer is redirected back.

The caller polls with the Stripe session id from the success redirect.
Every outcome is returned as a ServiceResult; an open session, a missing
local record or a Stripe outage are all expected answers here, never
exceptions.

Usage:
    from payments.services import SuccessVerifier

    result = SuccessVerifier.verify("cs_test_123")
    body = {"subscription": result.data, "error": result.error}
"""

from __future__ import annotations

from typing import Any

from core.services import BaseService, ServiceResult

from payments.adapters import StripeAdapter
from payments.exceptions import SubscriptionPeriodError
from payments.models import CheckoutSessionRecord
from payments.services.subscription_sync import (
    coerce_timestamp,
    extract_id,
    first_subscription_item,
    resolve_subscription_period,
)
from payments.state_machines import BillingInterval


SESSION_COMPLETE = "complete"


class SuccessVerifier(BaseService):
    """Verifies a Stripe checkout session and summarizes its subscription."""

    @classmethod
    def verify(cls, session_id: str) -> ServiceResult[dict[str, Any]]:
        """
        Verify a checkout session and build a subscription summary.

        Marks the local CheckoutSessionRecord completed when Stripe reports
        the session complete.

        Args:
            session_id: Stripe Checkout Session ID (cs_xxx)

        Returns:
            ServiceResult with the summary dict, or a failure describing
            why the session cannot be confirmed yet
        """
        log = cls.get_logger()
        log_context = {"session_id": session_id}

        try:
            session = StripeAdapter.retrieve_checkout_session(session_id)
            status = session.get("status")
            log.info("Session retrieved", extra={**log_context, "status": status})

            if status != SESSION_COMPLETE:
                message = f"Session status is '{status}', expected '{SESSION_COMPLETE}'"
                log.warning(
                    f"Checkout session verification failed: {message}",
                    extra=log_context,
                )
                return ServiceResult.failure(message, error_code="SESSION_NOT_COMPLETE")

            record = CheckoutSessionRecord.objects.filter(stripe_session_id=session_id).first()
            if record is None:
                log.warning(
                    "Checkout session verification failed: record not found",
                    extra=log_context,
                )
                return ServiceResult.failure(
                    "Checkout session not found in database",
                    error_code="CHECKOUT_SESSION_NOT_FOUND",
                )

            subscription_id = extract_id(session.get("subscription"))
            if not subscription_id:
                log.warning(
                    "Checkout session verification failed: no subscription on session",
                    extra=log_context,
                )
                return ServiceResult.failure(
                    "No subscription ID found in checkout session",
                    error_code="SUBSCRIPTION_MISSING",
                )

            subscription = StripeAdapter.retrieve_subscription(subscription_id)
            record.mark_completed()

            try:
                period = resolve_subscription_period(subscription)
            except SubscriptionPeriodError as e:
                return ServiceResult.from_exception(e)

            raw_created = subscription.get("created")
            created = coerce_timestamp(raw_created)
            if created is None:
                log.error(
                    "Checkout session verification failed: invalid subscription created",
                    extra={
                        **log_context,
                        "subscription_id": subscription_id,
                        "created_value": repr(raw_created),
                    },
                )
                return ServiceResult.failure(
                    f"Invalid subscription properties: created={raw_created!r}",
                    error_code="SUBSCRIPTION_INVALID",
                )

            summary = cls._build_summary(record, subscription, period.start, period.end, created)

        except Exception as e:
            log.error(
                "Checkout session verification failed: unexpected error",
                extra={**log_context, "error": str(e)},
                exc_info=True,
            )
            return ServiceResult.failure(
                f"Unexpected error during verification: {e}",
                error_code="VERIFICATION_ERROR",
            )

        log.info(
            "Checkout session verified successfully",
            extra={
                **log_context,
                "subscription_id": subscription_id,
                "organization_id": record.organization_id,
            },
        )
        return ServiceResult.success(summary)

    @classmethod
    def _build_summary(
        cls,
        record: CheckoutSessionRecord,
        subscription: dict[str, Any],
        period_start,
        period_end,
        created,
    ) -> dict[str, Any]:
        summary: dict[str, Any] = {
            "id": subscription["id"],
            "organization_id": record.organization_id,
            "plan_id": record.plan_id or "",
            "billing_interval": record.billing_interval or BillingInterval.MONTH.value,
            "status": subscription.get("status"),
            "current_period_start": period_start.isoformat(),
            "current_period_end": period_end.isoformat(),
            "cancel_at_period_end": bool(subscription.get("cancel_at_period_end")),
            "overages_enabled": record.overages_enabled,
            "created_at": created.isoformat(),
        }

        item = first_subscription_item(subscription)
        price = (item or {}).get("price")
        if isinstance(price, dict):
            recurring = price.get("recurring")
            summary["price"] = {
                "id": price.get("id"),
                "unit_amount": price.get("unit_amount"),
                "currency": price.get("currency"),
                "recurring": (
                    {
                        "interval": recurring.get("interval"),
                        "interval_count": recurring.get("interval_count"),
                    }
                    if recurring
                    else None
                ),
                "metadata": price.get("metadata") or {},
            }
            product = price.get("product")
            if isinstance(product, dict):
                summary["product"] = {
                    "id": product.get("id"),
                    "name": product.get("name"),
                    "description": product.get("description"),
                    "images": product.get("images") or [],
                    "metadata": product.get("metadata") or {},
                }

        return summary
