"""
Pytest fixtures for payment service tests.

Shares the record fixtures and the in-memory Stripe from payments.tests.
"""

from payments.tests.conftest import (  # noqa: F401
    customer_link,
    payments_log,
    pending_checkout,
    starter_plan,
    stripe_fake,
)
