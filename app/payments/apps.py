"""
Payments app configuration.

This app provides the subscription checkout flow:
- Stripe customer linking per organization
- Hosted checkout sessions and their verification
- Webhook reconciliation of subscription state
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"

    def ready(self) -> None:
        from payments.adapters import configure_stripe_client

        configure_stripe_client()
