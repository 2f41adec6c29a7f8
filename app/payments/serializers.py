"""
DRF serializers for payments app.

This module provides serializers for:
- Checkout request headers (organization and billing email)
- Checkout request body and response
- Checkout success verification request and response

Related files:
    - views.py: Payment API views
    - services/checkout_service.py: CheckoutRequest

Usage:
    serializer = CheckoutSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
"""

from __future__ import annotations

from rest_framework import serializers

from payments.state_machines import BillingInterval


ORGANIZATION_HEADER = "X-Organization-Id"
CUSTOMER_EMAIL_HEADER = "X-Customer-Email"


class CheckoutHeadersSerializer(serializers.Serializer):
    """
    Trusted identity headers for a checkout request.

    Usage:
        serializer = CheckoutHeadersSerializer.from_request(request)
        serializer.is_valid(raise_exception=True)
    """

    organization_id = serializers.CharField(
        trim_whitespace=True,
        error_messages={
            "required": f"{ORGANIZATION_HEADER} header is required",
            "blank": f"{ORGANIZATION_HEADER} header is required",
        },
    )
    customer_email = serializers.EmailField(
        error_messages={
            "required": f"{CUSTOMER_EMAIL_HEADER} header is required",
            "blank": f"{CUSTOMER_EMAIL_HEADER} header is required",
            "invalid": f"{CUSTOMER_EMAIL_HEADER} must be a valid email address",
        },
    )

    @classmethod
    def from_request(cls, request) -> CheckoutHeadersSerializer:
        """Build the serializer from the request's headers."""
        data = {}
        organization_id = request.headers.get(ORGANIZATION_HEADER)
        customer_email = request.headers.get(CUSTOMER_EMAIL_HEADER)
        if organization_id is not None:
            data["organization_id"] = organization_id
        if customer_email is not None:
            data["customer_email"] = customer_email.strip()
        return cls(data=data)


class CheckoutSerializer(serializers.Serializer):
    """Request body for POST /payments/checkout."""

    plan_id = serializers.CharField(max_length=100)
    billing_interval = serializers.ChoiceField(choices=BillingInterval.choices)
    overages_enabled = serializers.BooleanField(required=False, default=False)
    overage_bandwidth = serializers.BooleanField(required=False, default=False)
    overage_api = serializers.BooleanField(required=False, default=False)
    metadata = serializers.DictField(
        child=serializers.CharField(allow_blank=True),
        required=False,
        default=dict,
    )


class CheckoutResponseSerializer(serializers.Serializer):
    """Response body for POST /payments/checkout."""

    checkout_url = serializers.URLField()


class CheckoutSuccessSerializer(serializers.Serializer):
    """Request body for POST /payments/checkout/success."""

    session_id = serializers.CharField(
        error_messages={
            "required": "session_id is required",
            "blank": "session_id is required",
        },
    )


class CheckoutSuccessResponseSerializer(serializers.Serializer):
    """
    Response body for POST /payments/checkout/success.

    Exactly one of ``subscription`` and ``error`` is set.
    """

    subscription = serializers.DictField(allow_null=True)
    error = serializers.CharField(allow_null=True, required=False)
