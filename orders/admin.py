from django.contrib import admin, messages
from django.utils.html import format_html

from common.exceptions import StorefrontError
from . import services
from .models import Order, OrderStatusChange
from .transitions import OrderStatus


class OrderStatusChangeInline(admin.TabularInline):
    model = OrderStatusChange
    extra = 0
    can_delete = False
    readonly_fields = ("status", "timestamp", "updated_by", "notes")

    def has_add_permission(self, request, obj=None):
        return False


def _transition_action(new_status):
    def action(modeladmin, request, queryset):
        moved = 0
        for order in queryset:
            try:
                services.transition_status(order.pk, new_status, actor=request.user, notes="Changed in admin")
                moved += 1
            except StorefrontError as exc:
                modeladmin.message_user(request, f"Order {order.pk}: {exc.detail}", messages.WARNING)
        if moved:
            modeladmin.message_user(request, f"{moved} order(s) marked {new_status}.", messages.SUCCESS)

    action.__name__ = f"mark_{new_status}"
    action.short_description = f"Mark selected orders as {new_status}"
    return action


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Order management:
    - List: ID, drone, quantity, status (badge), payment, customer, total, order date
    - Filter: status, payment status, order date (date hierarchy)
    - Search: customer username/email, drone name, payment intent
    - Everything is readonly; status changes run through the admin actions so
      history and stock stay consistent
    """
    list_display = (
        "id",
        "drone",
        "quantity",
        "status_badge",
        "payment_status",
        "customer_username",
        "total_amount",
        "order_date",
    )
    list_select_related = ("user", "drone")
    list_filter = ("status", "payment_status", "order_date")
    date_hierarchy = "order_date"
    ordering = ("-order_date", "-id")
    search_fields = ("user__username", "user__email", "drone__name", "payment_intent_id", "tracking_number")
    inlines = [OrderStatusChangeInline]
    actions = [
        _transition_action(OrderStatus.CONFIRMED),
        _transition_action(OrderStatus.PROCESSING),
        _transition_action(OrderStatus.SHIPPED),
        _transition_action(OrderStatus.DELIVERED),
        _transition_action(OrderStatus.CANCELLED),
    ]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def status_badge(self, obj):
        color = {
            "pending": "#9ca3af",
            "confirmed": "#6366f1",
            "processing": "#0ea5e9",
            "shipped": "#f59e0b",
            "delivered": "#22c55e",
            "cancelled": "#ef4444",
        }.get(obj.status, "#9ca3af")
        return format_html(
            '<span style="display:inline-block;padding:2px 8px;border-radius:999px;'
            'font-size:12px;font-weight:600;color:#fff;background:{};">{}</span>',
            color,
            obj.status,
        )
    status_badge.short_description = "status"
    status_badge.admin_order_field = "status"

    def customer_username(self, obj):
        return obj.user.username if obj.user_id else ""
    customer_username.short_description = "customer"
