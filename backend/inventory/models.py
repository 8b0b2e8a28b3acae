# inventory/models.py
"""
Inventory stock ledger.

Mirrors the posting engine for quantities: every StockMovement changes
InventoryItem.current_stock by a computed delta, and current_stock is
always the net effect of the item's movements in application order.
All writes go through inventory/commands.py.
"""

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q


class InventoryItem(models.Model):
    code = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    unit = models.CharField(max_length=20, default="pcs")

    cost_price = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))
    selling_price = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))

    # Running quantity; only changed by record_movement().
    current_stock = models.DecimalField(max_digits=15, decimal_places=3, default=Decimal("0.000"))
    minimum_stock = models.DecimalField(max_digits=15, decimal_places=3, default=Decimal("0.000"))

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["code"]
        constraints = [
            models.CheckConstraint(
                condition=Q(current_stock__gte=0),
                name="inventory_stock_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"

    @property
    def is_low_stock(self) -> bool:
        return self.current_stock <= self.minimum_stock


class StockMovement(models.Model):
    """
    One change to an item's stock.

    ``quantity`` is what the caller submitted: an increment for ``in``,
    a decrement for ``out``, and the new absolute level for
    ``adjustment``. ``delta`` is the signed change actually applied.
    """

    class MovementType(models.TextChoices):
        IN = "in", "Stock In"
        OUT = "out", "Stock Out"
        ADJUSTMENT = "adjustment", "Adjustment"

    item = models.ForeignKey(
        InventoryItem,
        on_delete=models.PROTECT,
        related_name="movements",
    )
    movement_type = models.CharField(max_length=20, choices=MovementType.choices)
    quantity = models.DecimalField(max_digits=15, decimal_places=3)
    delta = models.DecimalField(max_digits=15, decimal_places=3)
    unit_cost = models.DecimalField(max_digits=15, decimal_places=2, null=True, blank=True)
    reference = models.CharField(max_length=100, blank=True, default="")
    date = models.DateField()

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-id"]
        indexes = [
            models.Index(fields=["item", "date"], name="stock_movement_item_date_idx"),
        ]

    def __str__(self):
        return f"{self.item_id} {self.movement_type} {self.quantity}"
