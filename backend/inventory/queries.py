# inventory/queries.py
"""Read-side inventory views: low stock and valuation."""

from decimal import Decimal

from django.db.models import DecimalField, ExpressionWrapper, F

from accounting.validation import MONEY_Q
from .models import InventoryItem


def low_stock_items():
    """Active items at or below their minimum, most deficient first."""
    return (
        InventoryItem.objects.filter(is_active=True, current_stock__lte=F("minimum_stock"))
        .annotate(
            shortfall=ExpressionWrapper(
                F("current_stock") - F("minimum_stock"),
                output_field=DecimalField(max_digits=15, decimal_places=3),
            )
        )
        .order_by("shortfall", "code")
    )


def valuation() -> dict:
    """
    Stock value at cost and at selling price for active items in stock.

    Values are rounded per item; totals are sums of the rounded values.
    """
    items = []
    total_cost = Decimal("0.00")
    total_selling = Decimal("0.00")

    for item in InventoryItem.objects.filter(is_active=True, current_stock__gt=0):
        cost_value = (item.current_stock * item.cost_price).quantize(MONEY_Q)
        selling_value = (item.current_stock * item.selling_price).quantize(MONEY_Q)
        total_cost += cost_value
        total_selling += selling_value
        items.append({
            "id": item.pk,
            "code": item.code,
            "name": item.name,
            "unit": item.unit,
            "current_stock": str(item.current_stock),
            "cost_price": str(item.cost_price),
            "selling_price": str(item.selling_price),
            "cost_value": str(cost_value),
            "selling_value": str(selling_value),
        })

    items.sort(key=lambda row: (-Decimal(row["cost_value"]), row["code"]))

    return {
        "items": items,
        "totals": {
            "total_cost_value": str(total_cost),
            "total_selling_value": str(total_selling),
            "total_items": len(items),
        },
    }
