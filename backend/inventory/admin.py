# inventory/admin.py

from django.contrib import admin

from accounting.admin import ReadOnlyModelAdmin
from .models import InventoryItem, StockMovement


@admin.register(InventoryItem)
class InventoryItemAdmin(ReadOnlyModelAdmin):
    list_display = ["code", "name", "unit", "current_stock", "minimum_stock", "cost_price", "selling_price", "is_active"]
    list_filter = ["is_active", "unit"]
    search_fields = ["code", "name"]


@admin.register(StockMovement)
class StockMovementAdmin(ReadOnlyModelAdmin):
    list_display = ["date", "item", "movement_type", "quantity", "delta", "reference", "created_by"]
    list_filter = ["movement_type"]
    search_fields = ["item__code", "reference"]
    list_select_related = ["item", "created_by"]
    date_hierarchy = "date"
