from django.contrib import admin
from django.utils.html import format_html

from .models import PaymentIntent


@admin.register(PaymentIntent)
class PaymentIntentAdmin(admin.ModelAdmin):
    """
    Read-only view of gateway attempts:
    - List: intent id, order, amount, status (badge), card, created
    - Filter: status, currency
    - Search: intent id, order id
    """
    list_display = ("id", "order", "amount", "currency", "status_badge", "card_display", "created_at")
    list_select_related = ("order",)
    list_filter = ("status", "currency")
    search_fields = ("id", "order__id")
    ordering = ("-created_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def status_badge(self, obj):
        color = {
            "requires_payment_method": "#9ca3af",
            "succeeded": "#22c55e",
            "failed": "#ef4444",
        }.get(obj.status, "#9ca3af")
        return format_html(
            '<span style="display:inline-block;padding:2px 8px;border-radius:999px;'
            'font-size:12px;font-weight:600;color:#fff;background:{};">{}</span>',
            color,
            obj.status,
        )
    status_badge.short_description = "status"
    status_badge.admin_order_field = "status"

    def card_display(self, obj):
        return f"{obj.card_brand} ****{obj.card_last4}" if obj.card_last4 else ""
    card_display.short_description = "card"
