from django.contrib import admin
from django.utils.html import format_html
from .models import Drone


@admin.register(Drone)
class DroneAdmin(admin.ModelAdmin):
    """
    Catalogue management:
    - List: ID, name, category, price, stock badge, featured, updated
    - Filter: category, in_stock, featured
    - Search: name, model
    - stock_quantity is readonly; it is changed by orders and the restock endpoint
    """
    list_display = (
        "id",
        "name",
        "model",
        "category",
        "price",
        "stock_badge",
        "featured",
        "updated_at",
    )
    list_filter = ("category", "in_stock", "featured")
    search_fields = ("name", "model")
    ordering = ("-updated_at", "-id")
    readonly_fields = ("stock_quantity", "created_at", "updated_at")

    def stock_badge(self, obj):
        color = {
            "In Stock": "#22c55e",
            "Low Stock": "#f59e0b",
            "Out of Stock": "#ef4444",
        }.get(obj.availability_status, "#9ca3af")
        return format_html(
            '<span style="display:inline-block;padding:2px 8px;border-radius:999px;'
            'font-size:12px;font-weight:600;color:#fff;background:{};">{} ({})</span>',
            color,
            obj.availability_status,
            obj.stock_quantity,
        )
    stock_badge.short_description = "stock"
    stock_badge.admin_order_field = "stock_quantity"
