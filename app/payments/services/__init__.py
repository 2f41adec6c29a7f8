"""
Payment services for checkout and subscription reconciliation.

This module provides:
- CheckoutService: Starts a hosted Stripe checkout for a plan
- CustomerService: Organization to Stripe customer link
- PlanLookupService: Plan id and interval to Stripe price id
- SuccessVerifier: Confirms a checkout after the success redirect
- SubscriptionSyncService: Writes Stripe subscription snapshots locally

Usage:
    from payments.services import CheckoutRequest, CheckoutService

    result = CheckoutService.create_checkout_session(
        CheckoutRequest(
            organization_id="org_1",
            customer_email="a@example.com",
            plan_id="starter",
            billing_interval="month",
        )
    )

    from payments.services import SuccessVerifier

    result = SuccessVerifier.verify(session_id)
"""

from payments.services.checkout_service import (
    CheckoutRequest,
    CheckoutResult,
    CheckoutService,
)
from payments.services.customer_service import CustomerService
from payments.services.plan_lookup import PlanLookupService
from payments.services.subscription_sync import (
    SubscriptionPeriod,
    SubscriptionSyncService,
    coerce_timestamp,
    extract_id,
    resolve_subscription_period,
)
from payments.services.success_verifier import SuccessVerifier

__all__ = [
    "CheckoutRequest",
    "CheckoutResult",
    "CheckoutService",
    "CustomerService",
    "PlanLookupService",
    "SubscriptionPeriod",
    "SubscriptionSyncService",
    "SuccessVerifier",
    "coerce_timestamp",
    "extract_id",
    "resolve_subscription_period",
]
