"""
Pytest fixtures for webhook tests.

Shared payment fixtures are re-exported here; ``deliver`` posts a Stripe
event through the webhook endpoint with signature verification patched to
accept the raw body as-is.
"""

import json
from unittest.mock import patch

import pytest

from payments.adapters import StripeAdapter
from payments.tests.conftest import (  # noqa: F401
    customer_link,
    payments_log,
    pending_checkout,
    starter_plan,
    stripe_fake,
)

WEBHOOK_URL = "/payments/webhook"


def _parse_body(payload, signature, webhook_secret=None):
    return json.loads(payload)


@pytest.fixture
def verified_signature():
    """Accept any signature and parse the body as the event."""
    with patch.object(
        StripeAdapter, "verify_webhook_signature", side_effect=_parse_body
    ) as mock_verify:
        yield mock_verify


@pytest.fixture
def deliver(client, verified_signature):
    """POST a Stripe event to the webhook endpoint and return the response."""

    def _deliver(event, url=WEBHOOK_URL):
        return client.post(
            url,
            data=json.dumps(event),
            content_type="application/json",
            HTTP_STRIPE_SIGNATURE="t=1700000000,v1=test",
        )

    return _deliver
