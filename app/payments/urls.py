"""
URL configuration for the payments app.

Routes:
    - POST checkout - Create checkout session
    - POST checkout/success - Verify checkout success
    - POST webhook - Stripe webhook endpoint
    - GET customers/<id>, products/<id>, prices/<id>,
      subscriptions/<id>, checkout-sessions/<id> - Stripe pass-through reads

All routes are prefixed with /payments/ when included in the main URLconf.

Usage:
    # In config/urls.py
    urlpatterns = [
        path("payments/", include("payments.urls")),
    ]
"""

from django.urls import path

from payments import views
from payments.webhooks.views import stripe_webhook

app_name = "payments"

urlpatterns = [
    # Checkout
    path("checkout", views.CheckoutView.as_view(), name="checkout"),
    path("checkout/success", views.CheckoutSuccessView.as_view(), name="checkout_success"),
    # Webhook endpoints
    path("webhook", stripe_webhook, name="stripe_webhook"),
    # Stripe pass-through reads
    path("customers/<str:object_id>", views.StripeCustomerView.as_view(), name="stripe_customer"),
    path("products/<str:object_id>", views.StripeProductView.as_view(), name="stripe_product"),
    path("prices/<str:object_id>", views.StripePriceView.as_view(), name="stripe_price"),
    path(
        "subscriptions/<str:object_id>",
        views.StripeSubscriptionView.as_view(),
        name="stripe_subscription",
    ),
    path(
        "checkout-sessions/<str:object_id>",
        views.StripeCheckoutSessionView.as_view(),
        name="stripe_checkout_session",
    ),
]
