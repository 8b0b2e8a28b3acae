# inventory/commands.py
"""
Command layer for the inventory stock ledger.

Same pattern as accounting/commands.py:
1. require() the permission
2. validate input, check current state
3. lock the item row (select_for_update)
4. write the movement and apply its delta in one atomic unit
5. return CommandResult

InventoryItem.current_stock is only changed by record_movement().
"""

import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from accounts.authz import ActorContext, require
from accounting.commands import CommandResult
from accounting.exceptions import (
    DuplicateCodeError,
    InsufficientStockError,
    LedgerError,
    NotFoundError,
    ValidationError,
)
from accounting.validation import to_date, to_money
from .models import InventoryItem, StockMovement

logger = logging.getLogger(__name__)


QUANTITY_Q = Decimal("0.001")

# Quantity columns are max_digits=15, decimal_places=3.
QUANTITY_LIMIT = Decimal(10) ** 12


def to_quantity(value, field_name: str = "quantity") -> Decimal:
    """Parse a stock quantity (three decimal places). Blank means zero."""
    if value is None or value == "":
        return Decimal("0.000")
    if isinstance(value, float):
        value = repr(value)
    try:
        quantity = Decimal(str(value))
        if not quantity.is_finite():
            raise ValidationError(f"Invalid {field_name}: {value!r}.")
        quantity = quantity.quantize(QUANTITY_Q, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"Invalid {field_name}: {value!r}.")
    if abs(quantity) >= QUANTITY_LIMIT:
        raise ValidationError(f"{field_name} is too large: {value!r}.")
    return quantity


def _item_fields(code, name, unit, cost_price, selling_price, minimum_stock) -> dict:
    code = (code or "").strip()
    name = (name or "").strip()
    if not code or not name:
        raise ValidationError("Item code and name are required.")

    fields = {
        "code": code,
        "name": name,
        "unit": (unit or "").strip() or "pcs",
        "cost_price": to_money(cost_price, "cost_price"),
        "selling_price": to_money(selling_price, "selling_price"),
        "minimum_stock": to_quantity(minimum_stock, "minimum_stock"),
    }
    for key in ("cost_price", "selling_price", "minimum_stock"):
        if fields[key] < 0:
            raise ValidationError(f"{key} cannot be negative.")
    return fields


# =============================================================================
# Item Commands
# =============================================================================

@transaction.atomic
def create_item(
    actor: ActorContext,
    code: str,
    name: str,
    description: str = "",
    unit: str = "pcs",
    cost_price=0,
    selling_price=0,
    minimum_stock=0,
    opening_stock=0,
    date=None,
) -> CommandResult:
    """
    Create an inventory item.

    A positive ``opening_stock`` is recorded as an ``in`` movement so
    that current_stock stays equal to the net of the item's movements.
    """
    require(actor, "inventory.manage")

    try:
        fields = _item_fields(code, name, unit, cost_price, selling_price, minimum_stock)
        opening = to_quantity(opening_stock, "opening_stock")
        if opening < 0:
            raise ValidationError("opening_stock cannot be negative.")
        opening_date = to_date(date) if date else timezone.localdate()
    except LedgerError as exc:
        return CommandResult.fail(exc)

    if InventoryItem.objects.filter(code=fields["code"]).exists():
        return CommandResult.fail(DuplicateCodeError(f"Item code '{fields['code']}' already exists."))

    item = InventoryItem.objects.create(description=description or "", **fields)

    if opening > 0:
        record_movement(
            actor,
            item.pk,
            StockMovement.MovementType.IN,
            opening,
            unit_cost=fields["cost_price"],
            reference="Opening stock",
            date=opening_date,
        ).unwrap()
        item.refresh_from_db()

    logger.info("Inventory item created", extra={"item_id": item.id, "code": item.code})
    return CommandResult.ok(item)


@transaction.atomic
def update_item(
    actor: ActorContext,
    item_id: int,
    code: str,
    name: str,
    description: str = "",
    unit: str = "pcs",
    cost_price=0,
    selling_price=0,
    minimum_stock=0,
) -> CommandResult:
    """Replace an item's descriptive fields. Stock is never touched here."""
    require(actor, "inventory.manage")

    try:
        item = InventoryItem.objects.select_for_update().get(pk=item_id)
    except InventoryItem.DoesNotExist:
        return CommandResult.fail(NotFoundError("Item not found.", item_id=item_id))

    try:
        fields = _item_fields(code, name, unit, cost_price, selling_price, minimum_stock)
    except LedgerError as exc:
        return CommandResult.fail(exc)

    if InventoryItem.objects.filter(code=fields["code"]).exclude(pk=item.pk).exists():
        return CommandResult.fail(DuplicateCodeError(f"Item code '{fields['code']}' already exists."))

    for key, value in fields.items():
        setattr(item, key, value)
    item.description = description or ""
    item.save(update_fields=[*fields.keys(), "description", "updated_at"])

    logger.info("Inventory item updated", extra={"item_id": item.id})
    return CommandResult.ok(item)


@transaction.atomic
def deactivate_item(actor: ActorContext, item_id: int) -> CommandResult:
    """Soft-delete an item. Its movements stay."""
    require(actor, "inventory.manage")

    try:
        item = InventoryItem.objects.select_for_update().get(pk=item_id)
    except InventoryItem.DoesNotExist:
        return CommandResult.fail(NotFoundError("Item not found.", item_id=item_id))

    item.is_active = False
    item.save(update_fields=["is_active", "updated_at"])

    logger.info("Inventory item deactivated", extra={"item_id": item.id, "code": item.code})
    return CommandResult.ok(item)


# =============================================================================
# Stock Movement Commands
# =============================================================================

def movement_delta(movement_type: str, quantity: Decimal, current_stock: Decimal) -> Decimal:
    """
    Signed stock change for a movement.

    - in: +quantity
    - out: -quantity
    - adjustment: quantity is the new absolute level, so quantity - current
    """
    if movement_type == StockMovement.MovementType.IN:
        return quantity
    if movement_type == StockMovement.MovementType.OUT:
        return -quantity
    return quantity - current_stock


@transaction.atomic
def record_movement(
    actor: ActorContext,
    item_id: int,
    movement_type: str,
    quantity,
    unit_cost=None,
    reference: str = "",
    date=None,
) -> CommandResult:
    """
    Record a stock movement and apply it to the item's current_stock.

    Returns:
        CommandResult with the StockMovement or error
        (NotFoundError, ValidationError, InsufficientStockError)
    """
    require(actor, "inventory.manage")

    if movement_type not in StockMovement.MovementType.values:
        return CommandResult.fail(ValidationError(
            f"Invalid movement type '{movement_type}'. "
            f"Must be one of: {', '.join(StockMovement.MovementType.values)}.",
        ))

    try:
        qty = to_quantity(quantity)
        cost = to_money(unit_cost, "unit_cost") if unit_cost not in (None, "") else None
        movement_date = to_date(date) if date else timezone.localdate()
    except LedgerError as exc:
        return CommandResult.fail(exc)

    if movement_type == StockMovement.MovementType.ADJUSTMENT:
        if qty < 0:
            return CommandResult.fail(ValidationError("Adjustment target cannot be negative."))
    elif qty <= 0:
        return CommandResult.fail(ValidationError("Quantity must be greater than zero."))
    if cost is not None and cost < 0:
        return CommandResult.fail(ValidationError("unit_cost cannot be negative."))

    try:
        item = InventoryItem.objects.select_for_update().get(pk=item_id, is_active=True)
    except InventoryItem.DoesNotExist:
        return CommandResult.fail(NotFoundError("Item not found.", item_id=item_id))

    delta = movement_delta(movement_type, qty, item.current_stock)
    if item.current_stock + delta < 0:
        logger.warning(
            "Stock movement rejected",
            extra={"item_id": item.id, "requested": str(qty), "available": str(item.current_stock)},
        )
        return CommandResult.fail(InsufficientStockError(
            f"Insufficient stock for {item.code}: {item.current_stock} available, {qty} requested.",
            available=str(item.current_stock),
            requested=str(qty),
        ))

    movement = StockMovement.objects.create(
        item=item,
        movement_type=movement_type,
        quantity=qty,
        delta=delta,
        unit_cost=cost,
        reference=(reference or "").strip(),
        date=movement_date,
        created_by=actor.user,
    )
    InventoryItem.objects.filter(pk=item.pk).update(
        current_stock=F("current_stock") + delta,
        updated_at=timezone.now(),
    )

    logger.info(
        "Stock movement recorded",
        extra={
            "item_id": item.id,
            "movement_id": movement.id,
            "movement_type": movement_type,
            "delta": str(delta),
        },
    )
    return CommandResult.ok(movement)
