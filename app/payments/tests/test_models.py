"""
Tests for payment domain models.

Tests model constraints, defaults, the checkout session state machine and
the ledger bookkeeping helpers.
"""

import uuid

import pytest
from django.db import IntegrityError

from payments.models import CheckoutSessionRecord, CustomerLink, SubscriptionRecord, WebhookEvent
from payments.state_machines import CheckoutSessionStatus, SubscriptionStatus, WebhookEventStatus
from payments.tests.factories import (
    CheckoutSessionRecordFactory,
    CustomerLinkFactory,
    SubscriptionPlanFactory,
    SubscriptionRecordFactory,
    WebhookEventFactory,
)


# =============================================================================
# CustomerLink Tests
# =============================================================================


class TestCustomerLinkModel:
    """Tests for CustomerLink model."""

    def test_create_with_required_fields(self, db):
        """Should create link with required fields and defaults."""
        link = CustomerLink.objects.create(
            organization_id="org_1",
            stripe_customer_id="cus_123",
        )

        assert isinstance(link.pk, uuid.UUID)
        assert link.email == ""
        assert link.stripe_data == {}
        assert link.has_email is False

    def test_organization_id_unique(self, db):
        """An organization maps to exactly one Stripe customer."""
        CustomerLinkFactory(organization_id="org_1")

        with pytest.raises(IntegrityError):
            CustomerLinkFactory(organization_id="org_1")

    def test_stripe_customer_id_unique(self, db):
        """A Stripe customer belongs to exactly one organization."""
        CustomerLinkFactory(stripe_customer_id="cus_shared")

        with pytest.raises(IntegrityError):
            CustomerLinkFactory(stripe_customer_id="cus_shared")


# =============================================================================
# CheckoutSessionRecord Tests
# =============================================================================


class TestCheckoutSessionRecordModel:
    """Tests for CheckoutSessionRecord model and its transitions."""

    def test_default_status_pending(self, db):
        record = CheckoutSessionRecord.objects.create(
            organization_id="org_1",
            stripe_session_id="cs_test_1",
            stripe_customer_id="cus_1",
        )

        assert record.status == CheckoutSessionStatus.PENDING

    def test_stripe_session_id_unique(self, db):
        CheckoutSessionRecordFactory(stripe_session_id="cs_dup")

        with pytest.raises(IntegrityError):
            CheckoutSessionRecordFactory(stripe_session_id="cs_dup")

    def test_mark_completed_from_pending(self, db):
        record = CheckoutSessionRecordFactory()

        assert record.mark_completed() is True

        record.refresh_from_db()
        assert record.status == CheckoutSessionStatus.COMPLETED

    def test_mark_completed_twice_is_noop(self, db):
        """Both the verifier and the webhook may complete the same record."""
        record = CheckoutSessionRecordFactory()
        record.mark_completed()
        record.refresh_from_db()
        updated_at = record.updated_at

        assert record.mark_completed() is False

        record.refresh_from_db()
        assert record.status == CheckoutSessionStatus.COMPLETED
        assert record.updated_at == updated_at

    def test_expired_record_cannot_complete(self, db):
        record = CheckoutSessionRecordFactory(status=CheckoutSessionStatus.EXPIRED)

        assert record.mark_completed() is False

        record.refresh_from_db()
        assert record.status == CheckoutSessionStatus.EXPIRED

    def test_completed_record_cannot_expire(self, db):
        record = CheckoutSessionRecordFactory(status=CheckoutSessionStatus.COMPLETED)

        assert record.mark_expired() is False
        assert record.status == CheckoutSessionStatus.COMPLETED

    def test_mark_expired_from_pending(self, db):
        record = CheckoutSessionRecordFactory()

        assert record.mark_expired() is True

        record.refresh_from_db()
        assert record.status == CheckoutSessionStatus.EXPIRED

    @pytest.mark.parametrize(
        "metadata,expected",
        [
            ({"overages_enabled": "true"}, True),
            ({"overages_enabled": "false"}, False),
            ({}, False),
        ],
    )
    def test_overages_enabled_decodes_metadata(self, db, metadata, expected):
        record = CheckoutSessionRecordFactory(metadata=metadata)

        assert record.overages_enabled is expected


# =============================================================================
# SubscriptionRecord Tests
# =============================================================================


class TestSubscriptionRecordModel:
    """Tests for SubscriptionRecord model."""

    def test_stripe_subscription_id_unique(self, db):
        SubscriptionRecordFactory(stripe_subscription_id="sub_dup")

        with pytest.raises(IntegrityError):
            SubscriptionRecordFactory(stripe_subscription_id="sub_dup")

    def test_period_bounds_required(self, db):
        with pytest.raises(IntegrityError):
            SubscriptionRecord.objects.create(
                stripe_subscription_id="sub_no_period",
                organization_id="org_1",
                stripe_customer_id="cus_1",
                status=SubscriptionStatus.ACTIVE,
                current_period_start=None,
                current_period_end=None,
            )

    @pytest.mark.parametrize(
        "status,is_active",
        [
            (SubscriptionStatus.ACTIVE, True),
            (SubscriptionStatus.TRIALING, True),
            (SubscriptionStatus.PAST_DUE, False),
            (SubscriptionStatus.CANCELED, False),
        ],
    )
    def test_is_active(self, db, status, is_active):
        record = SubscriptionRecordFactory(status=status)

        assert record.is_active is is_active
        assert record.is_canceled is (status == SubscriptionStatus.CANCELED)

    def test_plan_fields_optional(self, db):
        record = SubscriptionRecordFactory(plan_id=None, billing_interval=None)

        record.refresh_from_db()
        assert record.plan_id is None
        assert record.billing_interval is None


# =============================================================================
# SubscriptionPlan Tests
# =============================================================================


class TestSubscriptionPlanModel:
    """Tests for SubscriptionPlan model."""

    def test_price_for_interval(self, db):
        plan = SubscriptionPlanFactory(plan_id="starter")

        assert plan.price_for_interval("month") == "price_starter_month"
        assert plan.price_for_interval("year") == "price_starter_year"

    def test_price_for_missing_interval(self, db):
        plan = SubscriptionPlanFactory(
            plan_id="monthly_only",
            prices=[{"id": "price_m", "interval": "month"}],
        )

        assert plan.price_for_interval("year") is None


# =============================================================================
# WebhookEvent Tests
# =============================================================================


class TestWebhookEventModel:
    """Tests for WebhookEvent ledger bookkeeping."""

    def test_stripe_event_id_unique(self, db):
        WebhookEventFactory(stripe_event_id="evt_dup")

        with pytest.raises(IntegrityError):
            WebhookEventFactory(stripe_event_id="evt_dup")

    def test_mark_processing_increments_retry_count(self, db):
        event = WebhookEventFactory()

        event.mark_processing()

        assert event.status == WebhookEventStatus.PROCESSING
        assert event.retry_count == 1

    def test_mark_processed_records_result(self, db):
        event = WebhookEventFactory()

        event.mark_processed("Subscription deleted", subscription_id="sub_1", organization_id="org_1")
        event.save()
        event.refresh_from_db()

        assert event.is_processed is True
        assert event.processed_at is not None
        assert event.result_success is True
        assert event.result_message == "Subscription deleted"
        assert event.result_subscription_id == "sub_1"
        assert event.result_organization_id == "org_1"

    def test_mark_failed_keeps_event_unprocessed(self, db):
        event = WebhookEventFactory()

        event.mark_failed("Customer cus_1 not found in database")
        event.save()
        event.refresh_from_db()

        assert event.is_processed is False
        assert event.is_failed is True
        assert event.result_success is False
        assert event.error_message == "Customer cus_1 not found in database"
        assert event.result_message == (
            "Error processing event: Customer cus_1 not found in database"
        )

    def test_get_object(self, db):
        event = WebhookEventFactory(
            payload={"data": {"object": {"id": "sub_1"}}},
        )

        assert event.get_object() == {"id": "sub_1"}

    def test_get_object_missing_payload(self, db):
        event = WebhookEvent(stripe_event_id="evt_x", event_type="x", payload={})

        assert event.get_object() == {}
