"""
Payment admin configuration.

Registers the checkout and subscription models with the Django admin.
Records mirrored from Stripe are read-only here; changes flow through
the service layer and webhooks.
"""

from django.contrib import admin

from payments.models import (
    CheckoutSessionRecord,
    CustomerLink,
    SubscriptionPlan,
    SubscriptionRecord,
    WebhookEvent,
)

__all__ = [
    "CheckoutSessionRecordAdmin",
    "CustomerLinkAdmin",
    "SubscriptionPlanAdmin",
    "SubscriptionRecordAdmin",
    "WebhookEventAdmin",
]


@admin.register(CustomerLink)
class CustomerLinkAdmin(admin.ModelAdmin):
    """
    Admin configuration for CustomerLink.

    Provides visibility into which Stripe customer each organization uses.
    """

    list_display = ["id", "organization_id", "stripe_customer_id", "email", "created_at"]
    search_fields = ["id", "organization_id", "stripe_customer_id", "email"]
    readonly_fields = ["id", "organization_id", "stripe_customer_id", "created_at", "updated_at"]
    ordering = ["-created_at"]

    fieldsets = (
        (
            None,
            {
                "fields": ("id", "organization_id", "stripe_customer_id"),
            },
        ),
        (
            "Customer",
            {
                "fields": ("email", "name"),
            },
        ),
        (
            "Stripe Data",
            {
                "fields": ("stripe_data",),
                "classes": ("collapse",),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )

    def has_delete_permission(self, request, obj=None) -> bool:
        """Disable delete for customer links (never removed)."""
        return False


@admin.register(CheckoutSessionRecord)
class CheckoutSessionRecordAdmin(admin.ModelAdmin):
    """
    Admin configuration for CheckoutSessionRecord.

    Status changes come from the success verifier and webhooks only.
    """

    list_display = [
        "id",
        "organization_id",
        "stripe_session_id",
        "plan_id",
        "billing_interval",
        "status",
        "created_at",
    ]
    list_filter = ["status", "billing_interval", "created_at"]
    search_fields = ["id", "organization_id", "stripe_session_id", "stripe_customer_id"]
    readonly_fields = [
        "id",
        "organization_id",
        "stripe_session_id",
        "stripe_customer_id",
        "plan_id",
        "billing_interval",
        "status",
        "metadata",
        "created_at",
        "updated_at",
    ]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]

    def has_delete_permission(self, request, obj=None) -> bool:
        """Disable delete for checkout sessions (audit trail)."""
        return False

    def has_add_permission(self, request) -> bool:
        """Disable adding checkout sessions through admin."""
        return False


@admin.register(SubscriptionRecord)
class SubscriptionRecordAdmin(admin.ModelAdmin):
    """
    Admin configuration for SubscriptionRecord.

    Mirrors Stripe; every field is overwritten by the next webhook.
    """

    list_display = [
        "id",
        "organization_id",
        "stripe_subscription_id",
        "plan_id",
        "status",
        "current_period_end",
        "cancel_at_period_end",
    ]
    list_filter = ["status", "billing_interval", "cancel_at_period_end"]
    search_fields = ["id", "organization_id", "stripe_subscription_id", "stripe_customer_id"]
    readonly_fields = [
        "id",
        "stripe_subscription_id",
        "organization_id",
        "stripe_customer_id",
        "plan_id",
        "billing_interval",
        "status",
        "current_period_start",
        "current_period_end",
        "cancel_at_period_end",
        "canceled_at",
        "metadata",
        "stripe_data",
        "created_at",
        "updated_at",
    ]
    ordering = ["-created_at"]

    fieldsets = (
        (
            None,
            {
                "fields": ("id", "stripe_subscription_id", "organization_id", "stripe_customer_id"),
            },
        ),
        (
            "Plan",
            {
                "fields": ("plan_id", "billing_interval"),
            },
        ),
        (
            "Status",
            {
                "fields": (
                    "status",
                    "current_period_start",
                    "current_period_end",
                    "cancel_at_period_end",
                    "canceled_at",
                ),
            },
        ),
        (
            "Stripe Data",
            {
                "fields": ("metadata", "stripe_data"),
                "classes": ("collapse",),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )

    def has_delete_permission(self, request, obj=None) -> bool:
        """Disable delete for subscriptions (retired, never removed)."""
        return False

    def has_add_permission(self, request) -> bool:
        """Disable adding subscriptions through admin."""
        return False


@admin.register(SubscriptionPlan)
class SubscriptionPlanAdmin(admin.ModelAdmin):
    """Admin configuration for the plan catalog."""

    list_display = ["plan_id", "name", "stripe_product_id", "is_active"]
    list_filter = ["is_active"]
    search_fields = ["plan_id", "name", "stripe_product_id"]
    readonly_fields = ["id", "created_at", "updated_at"]
    ordering = ["plan_id"]


@admin.register(WebhookEvent)
class WebhookEventAdmin(admin.ModelAdmin):
    """
    Admin configuration for WebhookEvent.

    Provides visibility into webhook processing status.
    Webhook events are immutable once received; failed events can be
    queued for reprocessing.
    """

    list_display = [
        "id",
        "stripe_event_id",
        "event_type",
        "status",
        "result_success",
        "retry_count",
        "processed_at",
        "created_at",
    ]
    list_filter = ["status", "event_type", "result_success", "created_at"]
    search_fields = [
        "id",
        "stripe_event_id",
        "event_type",
        "result_subscription_id",
        "result_organization_id",
    ]
    readonly_fields = [
        "id",
        "created_at",
        "updated_at",
        "stripe_event_id",
        "event_type",
        "payload",
        "status",
        "processed_at",
        "retry_count",
        "error_message",
        "result_success",
        "result_message",
        "result_subscription_id",
        "result_organization_id",
    ]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]
    actions = ["reprocess_events"]

    fieldsets = (
        (
            None,
            {
                "fields": ("id", "stripe_event_id", "event_type", "status"),
            },
        ),
        (
            "Processing",
            {
                "fields": ("processed_at", "retry_count"),
            },
        ),
        (
            "Result",
            {
                "fields": (
                    "result_success",
                    "result_message",
                    "result_subscription_id",
                    "result_organization_id",
                ),
            },
        ),
        (
            "Error Info",
            {
                "fields": ("error_message",),
                "classes": ("collapse",),
            },
        ),
        (
            "Payload",
            {
                "fields": ("payload",),
                "classes": ("collapse",),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )

    @admin.action(description="Reprocess selected unprocessed events")
    def reprocess_events(self, request, queryset):
        """Queue unprocessed events for another handler run."""
        from payments.state_machines import WebhookEventStatus
        from payments.tasks import reprocess_webhook_event

        count = 0
        for webhook_event in queryset.exclude(status=WebhookEventStatus.PROCESSED):
            reprocess_webhook_event.delay(str(webhook_event.id))
            count += 1
        self.message_user(request, f"Queued {count} events for reprocessing.")

    def has_delete_permission(self, request, obj=None) -> bool:
        """Disable delete for webhook events (audit trail)."""
        return False

    def has_add_permission(self, request) -> bool:
        """Disable adding webhook events through admin."""
        return False
