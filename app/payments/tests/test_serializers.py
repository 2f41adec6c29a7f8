"""
Tests for payment request serializers.
"""

from django.test import RequestFactory

from payments.serializers import (
    CheckoutHeadersSerializer,
    CheckoutSerializer,
    CheckoutSuccessSerializer,
)


def headers_from(**headers):
    request = RequestFactory().post("/payments/checkout", **headers)
    return CheckoutHeadersSerializer.from_request(request)


class TestCheckoutHeadersSerializer:
    def test_valid(self):
        serializer = headers_from(
            HTTP_X_ORGANIZATION_ID="org_1", HTTP_X_CUSTOMER_EMAIL=" a@example.com "
        )

        assert serializer.is_valid(), serializer.errors
        assert serializer.validated_data == {
            "organization_id": "org_1",
            "customer_email": "a@example.com",
        }

    def test_missing_headers(self):
        serializer = headers_from()

        assert not serializer.is_valid()
        assert serializer.errors["organization_id"] == ["X-Organization-Id header is required"]
        assert serializer.errors["customer_email"] == ["X-Customer-Email header is required"]

    def test_invalid_email(self):
        serializer = headers_from(HTTP_X_ORGANIZATION_ID="org_1", HTTP_X_CUSTOMER_EMAIL="nope")

        assert not serializer.is_valid()
        assert serializer.errors["customer_email"] == [
            "X-Customer-Email must be a valid email address"
        ]


class TestCheckoutSerializer:
    def test_defaults(self):
        serializer = CheckoutSerializer(data={"plan_id": "starter", "billing_interval": "year"})

        assert serializer.is_valid(), serializer.errors
        assert serializer.validated_data == {
            "plan_id": "starter",
            "billing_interval": "year",
            "overages_enabled": False,
            "overage_bandwidth": False,
            "overage_api": False,
            "metadata": {},
        }

    def test_unknown_interval(self):
        serializer = CheckoutSerializer(data={"plan_id": "starter", "billing_interval": "week"})

        assert not serializer.is_valid()
        assert "billing_interval" in serializer.errors

    def test_plan_required(self):
        serializer = CheckoutSerializer(data={"billing_interval": "month"})

        assert not serializer.is_valid()
        assert "plan_id" in serializer.errors


class TestCheckoutSuccessSerializer:
    def test_session_id_required(self):
        serializer = CheckoutSuccessSerializer(data={})

        assert not serializer.is_valid()
        assert serializer.errors["session_id"] == ["session_id is required"]
