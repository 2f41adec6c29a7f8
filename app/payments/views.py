"""
DRF views for payments app.

This module provides API views for:
- Checkout session creation
- Checkout success verification
- Read-only pass-through lookups of Stripe objects

Related files:
    - services/: CheckoutService, SuccessVerifier
    - serializers.py: Request/response serializers
    - webhooks/views.py: Stripe webhook endpoint (plain Django view)
    - urls.py: URL routing

Endpoints:
    POST /payments/checkout - Create checkout session
    POST /payments/checkout/success - Verify a completed checkout
    GET /payments/customers/<id> - Stripe customer
    GET /payments/products/<id> - Stripe product
    GET /payments/prices/<id> - Stripe price
    GET /payments/subscriptions/<id> - Stripe subscription
    GET /payments/checkout-sessions/<id> - Stripe checkout session

Security:
    - Organization and billing email arrive in headers set by the trusted
      gateway in front of this service; there is no end-user auth here
"""

from __future__ import annotations

import logging
from typing import Any

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import (
    BaseApplicationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)

from payments.adapters import StripeAdapter
from payments.exceptions import StripeError
from payments.serializers import (
    CUSTOMER_EMAIL_HEADER,
    ORGANIZATION_HEADER,
    CheckoutHeadersSerializer,
    CheckoutResponseSerializer,
    CheckoutSerializer,
    CheckoutSuccessResponseSerializer,
    CheckoutSuccessSerializer,
)
from payments.services import CheckoutRequest, CheckoutService, SuccessVerifier

logger = logging.getLogger(__name__)


def error_status(error: BaseApplicationError) -> int:
    """Map an application error category to an HTTP status."""
    if isinstance(error, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, ConflictError):
        return status.HTTP_409_CONFLICT
    if isinstance(error, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, ExternalServiceError):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_400_BAD_REQUEST


def _flatten_errors(errors: dict[str, Any]) -> str:
    return "; ".join(
        ", ".join(str(message) for message in messages) for messages in errors.values()
    )


class CheckoutView(APIView):
    """
    Start a hosted Stripe checkout for a subscription plan.

    POST /payments/checkout

    Headers:
        X-Organization-Id: Organization buying the plan
        X-Customer-Email: Billing email

    Request body:
        {
            "plan_id": "starter",
            "billing_interval": "month",
            "overages_enabled": false
        }

    Returns:
        {"checkout_url": "https://checkout.stripe.com/..."}
    """

    authentication_classes: list = []
    permission_classes = [AllowAny]

    @extend_schema(
        operation_id="create_checkout",
        summary="Create checkout session",
        description=(
            "Resolve the plan's price for the billing interval, validate it with "
            "Stripe, get or create the organization's Stripe customer and start a "
            "hosted checkout. Nothing is persisted unless every check passes."
        ),
        parameters=[
            OpenApiParameter(
                name=ORGANIZATION_HEADER,
                type=OpenApiTypes.STR,
                location=OpenApiParameter.HEADER,
                required=True,
            ),
            OpenApiParameter(
                name=CUSTOMER_EMAIL_HEADER,
                type=OpenApiTypes.EMAIL,
                location=OpenApiParameter.HEADER,
                required=True,
            ),
        ],
        request=CheckoutSerializer,
        responses={
            200: OpenApiResponse(
                response=CheckoutResponseSerializer,
                description="Checkout session created",
            ),
            400: OpenApiResponse(description="Invalid headers, body or price"),
            404: OpenApiResponse(description="Plan or price for interval not found"),
            409: OpenApiResponse(description="Email differs from the one on file"),
            502: OpenApiResponse(description="Stripe request failed"),
        },
        tags=["Payments - Checkout"],
    )
    def post(self, request):
        """Create checkout session."""
        headers = CheckoutHeadersSerializer.from_request(request)
        if not headers.is_valid():
            return Response(
                {
                    "error": f"Invalid headers: {_flatten_errors(headers.errors)}",
                    "error_code": "INVALID_HEADERS",
                    "details": headers.errors,
                },
                status=status.HTTP_400_BAD_REQUEST,
            )

        body = CheckoutSerializer(data=request.data)
        if not body.is_valid():
            return Response(
                {
                    "error": _flatten_errors(body.errors),
                    "error_code": "VALIDATION_ERROR",
                    "details": body.errors,
                },
                status=status.HTTP_400_BAD_REQUEST,
            )

        checkout_request = CheckoutRequest(
            organization_id=headers.validated_data["organization_id"],
            customer_email=headers.validated_data["customer_email"],
            **body.validated_data,
        )

        try:
            result = CheckoutService.create_checkout_session(checkout_request)
        except BaseApplicationError as e:
            logger.warning(
                "Checkout failed",
                extra={
                    "organization_id": checkout_request.organization_id,
                    "plan_id": checkout_request.plan_id,
                    "error_code": e.error_code,
                    "error": e.message,
                },
            )
            return Response(e.to_dict(), status=error_status(e))

        return Response(
            {"checkout_url": result.checkout_url},
            status=status.HTTP_200_OK,
        )


class CheckoutSuccessView(APIView):
    """
    Verify a checkout after the customer is redirected back.

    POST /payments/checkout/success

    Request body:
        {"session_id": "cs_test_..."}

    Returns:
        {"subscription": {...}, "error": null} or
        {"subscription": null, "error": "..."}, always with 200
    """

    authentication_classes: list = []
    permission_classes = [AllowAny]

    @extend_schema(
        operation_id="verify_checkout_success",
        summary="Verify checkout success",
        description=(
            "Confirm a Stripe checkout session is complete and return a summary of "
            "the resulting subscription. Verification failures (session still open, "
            "record not stored yet) are returned in the body with 200 so callers can "
            "poll."
        ),
        request=CheckoutSuccessSerializer,
        responses={
            200: OpenApiResponse(
                response=CheckoutSuccessResponseSerializer,
                description="Verification outcome",
            ),
            400: OpenApiResponse(description="session_id missing"),
        },
        tags=["Payments - Checkout"],
    )
    def post(self, request):
        """Verify checkout session."""
        serializer = CheckoutSuccessSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"subscription": None, "error": _flatten_errors(serializer.errors)},
                status=status.HTTP_400_BAD_REQUEST,
            )

        result = SuccessVerifier.verify(serializer.validated_data["session_id"])
        return Response(
            {
                "subscription": result.data if result.success else None,
                "error": result.error,
            },
            status=status.HTTP_200_OK,
        )


# =============================================================================
# Stripe Pass-Through Views
# =============================================================================


class StripeObjectView(APIView):
    """
    Base view returning a Stripe object by id as Stripe's JSON.

    Subclasses set ``operation`` to a StripeAdapter retrieve method name.
    """

    authentication_classes: list = []
    permission_classes = [AllowAny]
    operation: str

    def get(self, request, object_id: str):
        """Retrieve the Stripe object."""
        try:
            data = getattr(StripeAdapter, self.operation)(object_id)
        except StripeError as e:
            return Response(e.to_dict(), status=error_status(e))
        return Response(data)


def _pass_through_schema(operation_id: str, summary: str):
    return extend_schema(
        operation_id=operation_id,
        summary=summary,
        responses={
            200: OpenApiResponse(response=OpenApiTypes.OBJECT, description="Stripe object"),
            404: OpenApiResponse(description="No such object in Stripe"),
            502: OpenApiResponse(description="Stripe request failed"),
        },
        tags=["Payments - Stripe"],
    )


class StripeCustomerView(StripeObjectView):
    """GET /payments/customers/<id>"""

    operation = "retrieve_customer"

    @_pass_through_schema("get_stripe_customer", "Get Stripe customer")
    def get(self, request, object_id: str):
        return super().get(request, object_id)


class StripeProductView(StripeObjectView):
    """GET /payments/products/<id>"""

    operation = "retrieve_product"

    @_pass_through_schema("get_stripe_product", "Get Stripe product")
    def get(self, request, object_id: str):
        return super().get(request, object_id)


class StripePriceView(StripeObjectView):
    """GET /payments/prices/<id>"""

    operation = "retrieve_price"

    @_pass_through_schema("get_stripe_price", "Get Stripe price")
    def get(self, request, object_id: str):
        return super().get(request, object_id)


class StripeSubscriptionView(StripeObjectView):
    """GET /payments/subscriptions/<id>"""

    operation = "retrieve_subscription"

    @_pass_through_schema("get_stripe_subscription", "Get Stripe subscription")
    def get(self, request, object_id: str):
        return super().get(request, object_id)


class StripeCheckoutSessionView(StripeObjectView):
    """GET /payments/checkout-sessions/<id>"""

    operation = "retrieve_checkout_session"

    @_pass_through_schema("get_stripe_checkout_session", "Get Stripe checkout session")
    def get(self, request, object_id: str):
        return super().get(request, object_id)
