"""
In-memory stand-in for the StripeAdapter used across payment tests.

``FakeStripe`` keeps Stripe objects in dicts and exposes the same
classmethod names as ``StripeAdapter``; ``patched_stripe_adapter`` swaps
them in with ``unittest.mock.patch.object`` so services, handlers and
views run unchanged.

Usage:
    with patched_stripe_adapter() as stripe_fake:
        stripe_fake.add_subscription(build_stripe_subscription(...))
        CheckoutService.create_checkout_session(request)
"""

import copy
import itertools
from contextlib import ExitStack, contextmanager
from typing import Any, Iterator
from unittest.mock import patch

from payments.adapters import CheckoutSessionResult, CreateCheckoutSessionParams, StripeAdapter
from payments.exceptions import StripeResourceNotFoundError
from payments.tests.factories import build_stripe_checkout_session

PATCHED_OPERATIONS = (
    "create_customer",
    "update_customer_email",
    "retrieve_customer",
    "retrieve_price",
    "retrieve_product",
    "create_checkout_session",
    "retrieve_checkout_session",
    "retrieve_subscription",
)


class FakeStripe:
    """Stripe objects by id, with call recording for assertions."""

    def __init__(self) -> None:
        self.customers: dict[str, dict[str, Any]] = {}
        self.prices: dict[str, dict[str, Any]] = {}
        self.products: dict[str, dict[str, Any]] = {}
        self.sessions: dict[str, dict[str, Any]] = {}
        self.subscriptions: dict[str, dict[str, Any]] = {}
        self.created_sessions: list[CreateCheckoutSessionParams] = []
        self.subscription_fetches: list[str] = []
        self._ids = itertools.count(1)

    # -------------------------------------------------------------------------
    # Seeding
    # -------------------------------------------------------------------------

    def add_price(
        self,
        price_id: str,
        interval: str | None = "month",
        active: bool = True,
    ) -> dict[str, Any]:
        price = {
            "id": price_id,
            "object": "price",
            "active": active,
            "currency": "usd",
            "unit_amount": 2900,
            "recurring": {"interval": interval, "interval_count": 1} if interval else None,
        }
        self.prices[price_id] = price
        return price

    def add_subscription(self, subscription: dict[str, Any]) -> dict[str, Any]:
        self.subscriptions[subscription["id"]] = subscription
        return subscription

    def add_session(self, session: dict[str, Any]) -> dict[str, Any]:
        self.sessions[session["id"]] = session
        return session

    def complete_session(self, session_id: str, subscription_id: str) -> dict[str, Any]:
        """Simulate the customer paying: the session completes with a subscription."""
        session = self.sessions[session_id]
        session.update({"status": "complete", "subscription": subscription_id, "url": None})
        return session

    # -------------------------------------------------------------------------
    # StripeAdapter surface
    # -------------------------------------------------------------------------

    def create_customer(
        self,
        email: str,
        organization_id: str,
        name: str | None = None,
    ) -> dict[str, Any]:
        customer_id = f"cus_fake_{next(self._ids)}"
        customer = {
            "id": customer_id,
            "object": "customer",
            "email": email,
            "name": name,
            "metadata": {"organization_id": organization_id},
        }
        self.customers[customer_id] = customer
        return copy.deepcopy(customer)

    def update_customer_email(self, customer_id: str, email: str) -> dict[str, Any]:
        customer = self.customers.setdefault(customer_id, {"id": customer_id, "object": "customer"})
        customer["email"] = email
        return copy.deepcopy(customer)

    def retrieve_customer(self, customer_id: str) -> dict[str, Any]:
        return self._get(self.customers, customer_id, "customer")

    def retrieve_price(self, price_id: str) -> dict[str, Any]:
        return self._get(self.prices, price_id, "price")

    def retrieve_product(self, product_id: str) -> dict[str, Any]:
        return self._get(self.products, product_id, "product")

    def create_checkout_session(self, params: CreateCheckoutSessionParams) -> CheckoutSessionResult:
        self.created_sessions.append(params)
        session = build_stripe_checkout_session(
            session_id=f"cs_test_fake_{next(self._ids)}",
            customer=params.customer_id,
            status="open",
            metadata=dict(params.metadata),
        )
        session["url"] = f"https://checkout.stripe.com/c/pay/{session['id']}"
        self.sessions[session["id"]] = session
        return CheckoutSessionResult(
            id=session["id"],
            url=session["url"],
            status=session["status"],
            customer_id=params.customer_id,
            metadata=dict(params.metadata),
            raw_response=copy.deepcopy(session),
        )

    def retrieve_checkout_session(
        self,
        session_id: str,
        expand: list[str] | None = None,
    ) -> dict[str, Any]:
        return self._get(self.sessions, session_id, "checkout session")

    def retrieve_subscription(self, subscription_id: str) -> dict[str, Any]:
        self.subscription_fetches.append(subscription_id)
        return self._get(self.subscriptions, subscription_id, "subscription")

    @staticmethod
    def _get(store: dict[str, dict[str, Any]], object_id: str, kind: str) -> dict[str, Any]:
        if object_id not in store:
            raise StripeResourceNotFoundError(
                f"No such {kind}: '{object_id}'",
                stripe_code="resource_missing",
            )
        return copy.deepcopy(store[object_id])


@contextmanager
def patched_stripe_adapter(fake: FakeStripe | None = None) -> Iterator[FakeStripe]:
    """Route every StripeAdapter call used by the services to ``fake``."""
    fake = fake or FakeStripe()
    with ExitStack() as stack:
        for operation in PATCHED_OPERATIONS:
            stack.enter_context(
                patch.object(StripeAdapter, operation, side_effect=getattr(fake, operation))
            )
        yield fake
