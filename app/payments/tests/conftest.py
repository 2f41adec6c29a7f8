"""
Pytest fixtures for payment tests.

This module provides fixtures for creating payment-related test data.
Fixtures provide records in the states the services and handlers expect,
and an in-memory Stripe (see fakes.py) so no test reaches the network.

Usage:
    def test_checkout_completes(stripe_fake, customer_link, pending_checkout):
        stripe_fake.add_subscription(build_stripe_subscription(...))
        ...
"""

import logging

import pytest

from payments.tests.factories import (
    CheckoutSessionRecordFactory,
    CustomerLinkFactory,
    SubscriptionPlanFactory,
)
from payments.tests.fakes import patched_stripe_adapter


@pytest.fixture
def stripe_fake():
    """Patch StripeAdapter with an in-memory Stripe."""
    with patched_stripe_adapter() as fake:
        yield fake


@pytest.fixture
def starter_plan(db):
    """Plan "starter" with monthly and yearly prices."""
    return SubscriptionPlanFactory(plan_id="starter")


@pytest.fixture
def customer_link(db):
    """CustomerLink for org_1 with an email on file."""
    return CustomerLinkFactory(
        organization_id="org_1",
        stripe_customer_id="cus_org1",
        email="a@example.com",
    )


@pytest.fixture
def pending_checkout(db, customer_link):
    """Pending monthly starter checkout for org_1."""
    return CheckoutSessionRecordFactory(
        organization_id=customer_link.organization_id,
        stripe_customer_id=customer_link.stripe_customer_id,
        stripe_session_id="cs_test_org1",
    )


@pytest.fixture
def payments_log(caplog):
    """
    Capture "payments" logger records at INFO.

    The logger does not propagate to root, so caplog's handler is attached
    to it directly.
    """
    logger = logging.getLogger("payments")
    previous_level = logger.level
    logger.addHandler(caplog.handler)
    logger.setLevel(logging.INFO)
    try:
        yield caplog
    finally:
        logger.removeHandler(caplog.handler)
        logger.setLevel(previous_level)
