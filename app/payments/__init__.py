"""
Payments app for Stripe subscription checkout.

This app handles:
- Stripe customer management (one customer per organization)
- Hosted checkout sessions for subscription plans
- Checkout success verification
- Webhook event handling and subscription reconciliation

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
"""
