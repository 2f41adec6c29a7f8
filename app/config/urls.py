"""
URL configuration for the Django application.

The `urlpatterns` list routes URLs to views. This is the root URL configuration
that includes all app-specific routes.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /payments/                     - Payment endpoints
        checkout                   - Create checkout session (POST)
        checkout/success           - Verify checkout success (POST)
        webhook                    - Stripe webhook endpoint (POST)
        customers/{id}             - Stripe customer (GET)
        products/{id}              - Stripe product (GET)
        prices/{id}                - Stripe price (GET)
        subscriptions/{id}         - Stripe subscription (GET)
        checkout-sessions/{id}     - Stripe checkout session (GET)
    /webhooks/stripe               - Stripe webhook endpoint (POST, alternate path)

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check
from payments.webhooks.views import stripe_webhook

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # Payments
    path("payments/", include("payments.urls")),
    path("webhooks/stripe", stripe_webhook, name="stripe_webhook"),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Payments Admin"
admin.site.site_title = "Payments Admin Portal"
admin.site.index_title = "Subscriptions and Webhooks"
