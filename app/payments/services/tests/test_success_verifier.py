"""
Tests for SuccessVerifier.

Every outcome is a ServiceResult; these tests assert on the error text
callers see in the response body.
"""

import pytest

from payments.adapters import StripeAdapter
from payments.exceptions import StripeAPIUnavailableError
from payments.services import SuccessVerifier
from payments.state_machines import CheckoutSessionStatus
from payments.tests.factories import (
    PERIOD_END,
    PERIOD_START,
    SUBSCRIPTION_CREATED,
    CheckoutSessionRecordFactory,
    build_stripe_checkout_session,
    build_stripe_subscription,
    utc,
)


@pytest.fixture
def completed_session(stripe_fake, pending_checkout):
    """Stripe reports cs_test_org1 complete with subscription sub_org1."""
    stripe_fake.add_subscription(
        build_stripe_subscription(subscription_id="sub_org1", customer="cus_org1")
    )
    stripe_fake.add_session(
        build_stripe_checkout_session(
            session_id="cs_test_org1",
            customer="cus_org1",
            subscription="sub_org1",
        )
    )
    return pending_checkout


class TestVerifyNegativeOutcomes:
    def test_open_session(self, stripe_fake, pending_checkout):
        stripe_fake.add_session(
            build_stripe_checkout_session(session_id="cs_test_org1", status="open")
        )

        result = SuccessVerifier.verify("cs_test_org1")

        assert not result.success
        assert result.error == "Session status is 'open', expected 'complete'"
        pending_checkout.refresh_from_db()
        assert pending_checkout.status == CheckoutSessionStatus.PENDING

    def test_record_missing(self, stripe_fake, db):
        stripe_fake.add_session(
            build_stripe_checkout_session(session_id="cs_test_unknown", subscription="sub_1")
        )

        result = SuccessVerifier.verify("cs_test_unknown")

        assert not result.success
        assert result.error == "Checkout session not found in database"
        assert stripe_fake.subscription_fetches == []

    def test_session_without_subscription(self, stripe_fake, pending_checkout):
        stripe_fake.add_session(
            build_stripe_checkout_session(session_id="cs_test_org1", subscription=None)
        )

        result = SuccessVerifier.verify("cs_test_org1")

        assert not result.success
        assert result.error == "No subscription ID found in checkout session"

    def test_subscription_without_period(self, stripe_fake, pending_checkout):
        stripe_fake.add_subscription(
            build_stripe_subscription(subscription_id="sub_org1", include_period=False)
        )
        stripe_fake.add_session(
            build_stripe_checkout_session(session_id="cs_test_org1", subscription="sub_org1")
        )

        result = SuccessVerifier.verify("cs_test_org1")

        assert not result.success
        assert result.error.startswith("Missing required date fields for subscription sub_org1")

    def test_subscription_without_created(self, stripe_fake, pending_checkout, payments_log):
        stripe_fake.add_subscription(
            build_stripe_subscription(subscription_id="sub_org1", created=None)
        )
        stripe_fake.add_session(
            build_stripe_checkout_session(session_id="cs_test_org1", subscription="sub_org1")
        )

        result = SuccessVerifier.verify("cs_test_org1")

        assert not result.success
        assert result.error_code == "SUBSCRIPTION_INVALID"
        assert result.error == "Invalid subscription properties: created=None"
        errors = [r for r in payments_log.records if r.levelname == "ERROR"]
        assert [r.created_value for r in errors] == ["None"]
        pending_checkout.refresh_from_db()
        assert pending_checkout.status == CheckoutSessionStatus.COMPLETED

    def test_unknown_session_is_unexpected_error(self, stripe_fake, db):
        result = SuccessVerifier.verify("cs_test_missing")

        assert not result.success
        assert result.error_code == "VERIFICATION_ERROR"
        assert result.error.startswith("Unexpected error during verification:")

    def test_stripe_outage_is_unexpected_error(self, db, monkeypatch):
        def unavailable(session_id, expand=None):
            raise StripeAPIUnavailableError("Stripe API unavailable")

        monkeypatch.setattr(StripeAdapter, "retrieve_checkout_session", unavailable)

        result = SuccessVerifier.verify("cs_test_org1")

        assert not result.success
        assert result.error == "Unexpected error during verification: Stripe API unavailable"


class TestVerifySuccess:
    def test_summary(self, completed_session):
        result = SuccessVerifier.verify("cs_test_org1")

        assert result.success, result.error
        summary = result.data
        assert summary["id"] == "sub_org1"
        assert summary["organization_id"] == "org_1"
        assert summary["plan_id"] == "starter"
        assert summary["billing_interval"] == "month"
        assert summary["status"] == "active"
        assert summary["current_period_start"] == utc(PERIOD_START).isoformat()
        assert summary["current_period_end"] == utc(PERIOD_END).isoformat()
        assert summary["cancel_at_period_end"] is False
        assert summary["overages_enabled"] is False
        assert summary["created_at"] == utc(SUBSCRIPTION_CREATED).isoformat()

    def test_summary_includes_price_and_product(self, completed_session):
        summary = SuccessVerifier.verify("cs_test_org1").data

        assert summary["price"]["id"] == "price_starter_month"
        assert summary["price"]["unit_amount"] == 2900
        assert summary["price"]["recurring"] == {"interval": "month", "interval_count": 1}
        assert summary["product"]["id"] == "prod_starter"
        assert summary["product"]["name"] == "Starter"

    def test_marks_record_completed(self, completed_session):
        SuccessVerifier.verify("cs_test_org1")

        completed_session.refresh_from_db()
        assert completed_session.status == CheckoutSessionStatus.COMPLETED

    def test_repeat_verification_is_stable(self, completed_session):
        first = SuccessVerifier.verify("cs_test_org1")
        completed_session.refresh_from_db()
        updated_at = completed_session.updated_at

        second = SuccessVerifier.verify("cs_test_org1")

        assert second.data == first.data
        completed_session.refresh_from_db()
        assert completed_session.updated_at == updated_at

    def test_period_from_subscription_item(self, stripe_fake, pending_checkout):
        stripe_fake.add_subscription(
            build_stripe_subscription(subscription_id="sub_org1", period_on_item=True)
        )
        stripe_fake.add_session(
            build_stripe_checkout_session(session_id="cs_test_org1", subscription="sub_org1")
        )

        result = SuccessVerifier.verify("cs_test_org1")

        assert result.success
        assert result.data["current_period_end"] == utc(PERIOD_END).isoformat()

    def test_overages_flag_decoded(self, stripe_fake, customer_link):
        CheckoutSessionRecordFactory(
            organization_id="org_1",
            stripe_session_id="cs_test_overage",
            metadata={"overages_enabled": "true"},
        )
        stripe_fake.add_subscription(build_stripe_subscription(subscription_id="sub_overage"))
        stripe_fake.add_session(
            build_stripe_checkout_session(session_id="cs_test_overage", subscription="sub_overage")
        )

        result = SuccessVerifier.verify("cs_test_overage")

        assert result.data["overages_enabled"] is True
