"""
Webhook event handlers for Stripe events.

This module provides a handler registry and implementations for
reconciling subscription state from Stripe events.

Handlers receive the ledger entry, raise a payment exception when the
event cannot be applied, and otherwise return
``ServiceResult.success(WebhookOutcome(...))``. Every handler that writes
a SubscriptionRecord re-fetches the subscription from Stripe first, so the
record converges whatever order the events arrive in.

Usage:
    from payments.webhooks.handlers import dispatch_webhook, register_handler

    @register_handler("custom.event")
    def handle_custom_event(webhook_event: WebhookEvent) -> ServiceResult:
        ...

    result = dispatch_webhook(webhook_event)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from core.services import ServiceResult

from payments.adapters import StripeAdapter
from payments.exceptions import CustomerLinkNotFoundError, WebhookPayloadError
from payments.models import CheckoutSessionRecord, CustomerLink, SubscriptionRecord, WebhookEvent
from payments.services.subscription_sync import SubscriptionSyncService, extract_id


logger = logging.getLogger(__name__)


@dataclass
class WebhookOutcome:
    """
    What a handler did with an event.

    Attributes:
        message: Human-readable outcome stored on the ledger entry
        subscription_id: Stripe subscription the event touched, if any
        organization_id: Organization the event resolved to, if any
    """

    message: str
    subscription_id: str | None = None
    organization_id: str | None = None


# =============================================================================
# Handler Registry
# =============================================================================


# Maps event type strings to handler functions
WEBHOOK_HANDLERS: dict[str, Callable[[WebhookEvent], ServiceResult[WebhookOutcome]]] = {}


def register_handler(event_type: str) -> Callable:
    """
    Decorator to register a webhook event handler.

    Usage:
        @register_handler("customer.subscription.updated")
        def handle_subscription_updated(webhook_event: WebhookEvent) -> ServiceResult:
            ...

    Args:
        event_type: The Stripe event type

    Returns:
        Decorator function that registers the handler
    """

    def decorator(func: Callable[[WebhookEvent], ServiceResult[WebhookOutcome]]) -> Callable:
        WEBHOOK_HANDLERS[event_type] = func
        logger.debug(f"Registered webhook handler for {event_type}")
        return func

    return decorator


def dispatch_webhook(webhook_event: WebhookEvent) -> ServiceResult[WebhookOutcome]:
    """
    Dispatch a webhook event to the appropriate handler.

    Unknown event types succeed with an "acknowledged" outcome; they must
    never fail processing.

    Args:
        webhook_event: The WebhookEvent to process

    Returns:
        ServiceResult from the handler

    Raises:
        Whatever the handler raises; the processor records it.
    """
    handler = WEBHOOK_HANDLERS.get(webhook_event.event_type)

    if not handler:
        logger.info(
            f"No handler registered for event type: {webhook_event.event_type}",
            extra={"stripe_event_id": webhook_event.stripe_event_id},
        )
        return ServiceResult.success(
            WebhookOutcome(
                f"Event type {webhook_event.event_type} not handled, but acknowledged"
            )
        )

    logger.info(
        f"Dispatching {webhook_event.event_type} to handler",
        extra={"stripe_event_id": webhook_event.stripe_event_id},
    )

    return handler(webhook_event)


# =============================================================================
# Helpers
# =============================================================================


def _require_customer_link(customer_id: str, error_message: str) -> CustomerLink:
    link = CustomerLink.objects.filter(stripe_customer_id=customer_id).first()
    if link is None:
        raise CustomerLinkNotFoundError(error_message, details={"customer_id": customer_id})
    return link


def invoice_subscription_id(invoice: dict[str, Any]) -> str | None:
    """
    Extract the subscription id referenced by an invoice.

    Older API versions carry it at ``invoice.subscription`` (id or object),
    newer ones at ``invoice.parent.subscription_details.subscription``.
    """
    subscription_id = extract_id(invoice.get("subscription"))
    if subscription_id:
        return subscription_id

    parent = invoice.get("parent") or {}
    details = parent.get("subscription_details") or {} if isinstance(parent, dict) else {}
    return extract_id(details.get("subscription")) if isinstance(details, dict) else None


# =============================================================================
# Checkout Session Handlers
# =============================================================================


@register_handler("checkout.session.completed")
def handle_checkout_session_completed(webhook_event: WebhookEvent) -> ServiceResult[WebhookOutcome]:
    """
    Handle a completed checkout session.

    The CustomerLink must exist. The local CheckoutSessionRecord may not
    exist yet (the webhook can beat the checkout request's own write), in
    which case organization, plan and interval come from the link and the
    session metadata.
    """
    session = webhook_event.get_object()
    session_id = session.get("id")
    log_context = {"stripe_event_id": webhook_event.stripe_event_id, "session_id": session_id}

    customer_id = extract_id(session.get("customer"))
    if not customer_id:
        raise WebhookPayloadError("No customer ID found in checkout session")

    link = _require_customer_link(customer_id, f"Customer {customer_id} not found in database")

    record = CheckoutSessionRecord.objects.filter(stripe_session_id=session_id).first()
    if record is None:
        logger.warning(
            "Checkout session not found in database",
            extra={**log_context, "customer_id": customer_id},
        )

    subscription_id = extract_id(session.get("subscription"))
    if not subscription_id:
        raise WebhookPayloadError("No subscription ID found in checkout session")

    subscription = StripeAdapter.retrieve_subscription(subscription_id)

    metadata = session.get("metadata") or {}
    organization_id = record.organization_id if record else link.organization_id
    plan_id = (record.plan_id if record else None) or metadata.get("plan_id")
    billing_interval = (record.billing_interval if record else None) or metadata.get(
        "billing_interval"
    )

    SubscriptionSyncService.upsert_subscription(
        subscription,
        organization_id=organization_id,
        stripe_customer_id=customer_id,
        plan_id=plan_id,
        billing_interval=billing_interval,
    )

    if record is not None:
        record.mark_completed()

    logger.info(
        "Processed checkout.session.completed",
        extra={
            **log_context,
            "subscription_id": subscription["id"],
            "organization_id": organization_id,
        },
    )
    return ServiceResult.success(
        WebhookOutcome(
            "Checkout session completed and subscription created/updated",
            subscription_id=subscription["id"],
            organization_id=organization_id,
        )
    )


@register_handler("checkout.session.expired")
def handle_checkout_session_expired(webhook_event: WebhookEvent) -> ServiceResult[WebhookOutcome]:
    """Move a pending CheckoutSessionRecord to expired, if there is one."""
    session = webhook_event.get_object()
    session_id = session.get("id")

    record = CheckoutSessionRecord.objects.filter(stripe_session_id=session_id).first()
    organization_id = None
    if record is not None:
        record.mark_expired()
        organization_id = record.organization_id

    return ServiceResult.success(
        WebhookOutcome("Checkout session expired", organization_id=organization_id)
    )


# =============================================================================
# Subscription Handlers
# =============================================================================


@register_handler("customer.subscription.created")
@register_handler("customer.subscription.updated")
def handle_subscription_changed(webhook_event: WebhookEvent) -> ServiceResult[WebhookOutcome]:
    """
    Handle subscription created/updated events.

    The payload snapshot is only used for its ids; the subscription is
    re-fetched from Stripe before it is written.
    """
    payload_subscription = webhook_event.get_object()
    subscription_id = payload_subscription.get("id")

    customer_id = extract_id(payload_subscription.get("customer"))
    if not customer_id:
        raise WebhookPayloadError(f"No customer ID found for subscription {subscription_id}")

    link = _require_customer_link(
        customer_id,
        f"Customer {customer_id} not found for subscription {subscription_id}",
    )

    subscription = StripeAdapter.retrieve_subscription(subscription_id)
    SubscriptionSyncService.upsert_subscription(
        subscription,
        organization_id=link.organization_id,
        stripe_customer_id=customer_id,
    )

    return ServiceResult.success(
        WebhookOutcome(
            f"Subscription {webhook_event.event_type} processed",
            subscription_id=subscription["id"],
            organization_id=link.organization_id,
        )
    )


@register_handler("customer.subscription.deleted")
def handle_subscription_deleted(webhook_event: WebhookEvent) -> ServiceResult[WebhookOutcome]:
    """Retire the local record; a subscription unknown locally is a no-op."""
    subscription_id = webhook_event.get_object().get("id")

    record = SubscriptionSyncService.mark_canceled(subscription_id)

    return ServiceResult.success(
        WebhookOutcome(
            "Subscription deleted",
            subscription_id=subscription_id,
            organization_id=record.organization_id if record else None,
        )
    )


# =============================================================================
# Invoice Handlers
# =============================================================================


@register_handler("invoice.payment_succeeded")
def handle_invoice_payment_succeeded(webhook_event: WebhookEvent) -> ServiceResult[WebhookOutcome]:
    """
    Sync the invoice's subscription after a successful payment.

    Invoices without a subscription succeed trivially. A subscription
    whose customer has no CustomerLink is skipped.
    """
    invoice = webhook_event.get_object()
    subscription_id = invoice_subscription_id(invoice)
    organization_id = None

    if subscription_id:
        subscription = StripeAdapter.retrieve_subscription(subscription_id)
        customer_id = extract_id(subscription.get("customer"))
        link = (
            CustomerLink.objects.filter(stripe_customer_id=customer_id).first()
            if customer_id
            else None
        )

        if link is not None:
            SubscriptionSyncService.upsert_subscription(
                subscription,
                organization_id=link.organization_id,
                stripe_customer_id=customer_id,
            )
            organization_id = link.organization_id
        else:
            logger.warning(
                "No customer link for invoice subscription, skipping sync",
                extra={
                    "stripe_event_id": webhook_event.stripe_event_id,
                    "subscription_id": subscription_id,
                    "customer_id": customer_id,
                },
            )

    return ServiceResult.success(
        WebhookOutcome(
            "Invoice payment succeeded",
            subscription_id=subscription_id,
            organization_id=organization_id,
        )
    )


@register_handler("invoice.payment_failed")
def handle_invoice_payment_failed(webhook_event: WebhookEvent) -> ServiceResult[WebhookOutcome]:
    """Refresh only the status of a locally known subscription."""
    invoice = webhook_event.get_object()
    subscription_id = invoice_subscription_id(invoice)
    organization_id = None

    if subscription_id:
        record = SubscriptionRecord.objects.filter(stripe_subscription_id=subscription_id).first()
        if record is not None:
            subscription = StripeAdapter.retrieve_subscription(subscription_id)
            SubscriptionSyncService.refresh_status(record, subscription)
            organization_id = record.organization_id

    return ServiceResult.success(
        WebhookOutcome(
            "Invoice payment failed processed",
            subscription_id=subscription_id,
            organization_id=organization_id,
        )
    )
