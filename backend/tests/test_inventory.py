# tests/test_inventory.py
"""
Tests for the inventory stock ledger.

Tests cover:
- Item create / update / deactivate
- Movements: in, out, adjustment (absolute target)
- Stock never goes negative
- Low stock and valuation queries
"""

import pytest
from decimal import Decimal

from inventory.commands import create_item, deactivate_item, record_movement, update_item
from inventory.models import InventoryItem, StockMovement
from inventory.queries import low_stock_items, valuation
from accounting.exceptions import (
    DuplicateCodeError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)


@pytest.fixture
def widget(actor):
    return create_item(
        actor, code="W-1", name="Widget", cost_price="2.50", selling_price="4.00",
        minimum_stock=5, opening_stock=10,
    ).unwrap()


@pytest.mark.django_db
class TestItems:

    def test_opening_stock_recorded_as_movement(self, widget):
        assert widget.current_stock == Decimal("10.000")
        movement = StockMovement.objects.get(item=widget)
        assert movement.movement_type == StockMovement.MovementType.IN
        assert movement.delta == Decimal("10.000")
        assert movement.reference == "Opening stock"

    def test_item_without_opening_stock(self, actor):
        item = create_item(actor, code="G-1", name="Gadget").unwrap()

        assert item.current_stock == Decimal("0.000")
        assert item.unit == "pcs"
        assert not StockMovement.objects.filter(item=item).exists()

    def test_duplicate_code(self, actor, widget):
        result = create_item(actor, code="W-1", name="Copy")

        assert isinstance(result.error, DuplicateCodeError)

    def test_negative_price_rejected(self, actor):
        result = create_item(actor, code="N-1", name="Negative", cost_price="-1")

        assert isinstance(result.error, ValidationError)

    def test_oversized_price_rejected(self, actor):
        result = create_item(actor, code="B-1", name="Big", selling_price="1e30")

        assert isinstance(result.error, ValidationError)
        assert not InventoryItem.objects.filter(code="B-1").exists()

    def test_bad_opening_date_rejected_before_insert(self, actor):
        result = create_item(actor, code="D-1", name="Dated", opening_stock=3, date="31/12/2024")

        assert isinstance(result.error, ValidationError)
        assert not InventoryItem.objects.filter(code="D-1").exists()
        assert StockMovement.objects.count() == 0

    def test_update_does_not_touch_stock(self, actor, widget):
        result = update_item(
            actor, widget.pk, code="W-1", name="Widget Pro", unit="box",
            cost_price="3.00", selling_price="5.00", minimum_stock=2,
        )

        assert result.success
        widget.refresh_from_db()
        assert widget.name == "Widget Pro"
        assert widget.unit == "box"
        assert widget.current_stock == Decimal("10.000")

    def test_deactivated_item_rejects_movements(self, actor, widget):
        deactivate_item(actor, widget.pk).unwrap()

        result = record_movement(actor, widget.pk, "in", 1)

        assert isinstance(result.error, NotFoundError)


@pytest.mark.django_db
class TestMovements:

    def test_in_increases_stock(self, actor, widget):
        result = record_movement(actor, widget.pk, "in", "2.5", unit_cost="2.40", reference="PO-7")

        assert result.success
        widget.refresh_from_db()
        assert widget.current_stock == Decimal("12.500")
        assert result.data.unit_cost == Decimal("2.40")

    def test_out_decreases_stock_by_exactly_quantity(self, actor, widget):
        record_movement(actor, widget.pk, "out", 4).unwrap()

        widget.refresh_from_db()
        assert widget.current_stock == Decimal("6.000")

    def test_out_beyond_stock_rejected(self, actor, widget):
        result = record_movement(actor, widget.pk, "out", 11)

        assert isinstance(result.error, InsufficientStockError)
        widget.refresh_from_db()
        assert widget.current_stock == Decimal("10.000")
        assert StockMovement.objects.filter(item=widget).count() == 1

    def test_out_of_entire_stock(self, actor, widget):
        record_movement(actor, widget.pk, "out", 10).unwrap()

        widget.refresh_from_db()
        assert widget.current_stock == Decimal("0.000")

    def test_adjustment_sets_absolute_level(self, actor, widget):
        movement = record_movement(actor, widget.pk, "adjustment", 7).unwrap()

        widget.refresh_from_db()
        assert widget.current_stock == Decimal("7.000")
        assert movement.delta == Decimal("-3.000")

    def test_adjustment_to_zero(self, actor, widget):
        record_movement(actor, widget.pk, "adjustment", 0).unwrap()

        widget.refresh_from_db()
        assert widget.current_stock == Decimal("0.000")

    @pytest.mark.parametrize("movement_type,quantity", [
        ("in", 0), ("out", -1), ("adjustment", -1), ("in", "1e30"), ("in", "1000000000000"),
    ])
    def test_invalid_quantities(self, actor, widget, movement_type, quantity):
        result = record_movement(actor, widget.pk, movement_type, quantity)

        assert isinstance(result.error, ValidationError)

    def test_invalid_type(self, actor, widget):
        result = record_movement(actor, widget.pk, "transfer", 1)

        assert isinstance(result.error, ValidationError)

    def test_stock_equals_net_of_movements(self, actor, widget):
        record_movement(actor, widget.pk, "in", 5).unwrap()
        record_movement(actor, widget.pk, "out", 3).unwrap()
        record_movement(actor, widget.pk, "adjustment", 20).unwrap()
        record_movement(actor, widget.pk, "out", "1.25").unwrap()

        widget.refresh_from_db()
        net = sum(StockMovement.objects.filter(item=widget).values_list("delta", flat=True), Decimal("0"))
        assert widget.current_stock == net == Decimal("18.750")


@pytest.mark.django_db
class TestQueries:

    def test_low_stock(self, actor, widget):
        gadget = create_item(actor, code="G-1", name="Gadget", minimum_stock=3, opening_stock=1).unwrap()
        create_item(actor, code="S-1", name="Spare", minimum_stock=1, opening_stock=50).unwrap()

        assert [item.code for item in low_stock_items()] == ["G-1"]

        record_movement(actor, widget.pk, "out", 6).unwrap()
        items = list(low_stock_items())
        assert [item.code for item in items] == ["G-1", "W-1"]
        assert items[0].shortfall == Decimal("-2.000")
        assert gadget.pk == items[0].pk

    def test_valuation(self, actor, widget):
        create_item(actor, code="G-1", name="Gadget", cost_price="10", selling_price="12", opening_stock=3).unwrap()
        create_item(actor, code="E-1", name="Empty", cost_price="99").unwrap()

        report = valuation()

        assert report["totals"] == {
            "total_cost_value": "55.00",
            "total_selling_value": "76.00",
            "total_items": 2,
        }
        assert [row["code"] for row in report["items"]] == ["G-1", "W-1"]
        assert InventoryItem.objects.count() == 3
