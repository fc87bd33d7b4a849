# Overview: Service-layer operations for recipe-driven inventory depletion; encapsulates business logic and database work.

"""
Inventory Depletion Resolver

WHY: Selling a menu item consumes its recipe components. Depletion runs
inside the settlement transaction so payment and stock effects commit or
roll back together.

DESIGN PRINCIPLES:
- Each decrement is a single UPDATE ... SET quantity_on_hand = quantity_on_hand - x,
  so concurrent settlements never lose updates.
- Every decrement appends an immutable InventoryMovement row (negative delta).
- Stock may go negative. That is reported as a warning, never blocked.
- A missing stock row for a recipe component is a configuration error and
  aborts the settlement.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP

from flask import current_app
from sqlalchemy import update

from ..extensions import db
from ..models import InventoryItem, InventoryStock, InventoryMovement
from ledgerpos.time_utils import utcnow
from .exceptions import StockRecordMissingError


MOVEMENT_TYPE_SALE_DEPLETION = "SALE_DEPLETION"


@dataclass(frozen=True)
class StockWarning:
    inventory_item_id: int
    sku: str | None
    location_id: int
    resulting_quantity: Decimal

    def to_dict(self) -> dict:
        return {
            "inventory_item_id": self.inventory_item_id,
            "sku": self.sku,
            "location_id": self.location_id,
            "resulting_quantity": str(self.resulting_quantity),
        }


@dataclass
class DepletionResult:
    movements: list = field(default_factory=list)
    warnings: list = field(default_factory=list)
    # order_item_id -> COGS valuation in cents
    line_cogs_cents: dict = field(default_factory=dict)

    @property
    def total_cogs_cents(self) -> int:
        total = 0
        for cents in self.line_cogs_cents.values():
            total += cents
        return total


def _to_cents(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _find_stock(inventory_item_id: int, location_id: int) -> InventoryStock | None:
    return (
        db.session.query(InventoryStock)
        .filter_by(inventory_item_id=inventory_item_id, location_id=location_id)
        .first()
    )


def _decrement_stock(stock: InventoryStock, quantity: Decimal) -> Decimal:
    """Atomically subtract quantity and return the resulting on-hand value."""
    stmt = (
        update(InventoryStock)
        .where(InventoryStock.id == stock.id)
        .values(quantity_on_hand=InventoryStock.quantity_on_hand - quantity)
        .execution_options(synchronize_session=False)
    )
    db.session.execute(stmt)
    db.session.expire(stock, ["quantity_on_hand", "updated_at"])
    return Decimal(str(stock.quantity_on_hand))


def deplete_order_inventory(
    order,
    *,
    actor_user_id: int | None,
    default_location_id: int | None,
) -> DepletionResult:
    """
    Deplete recipe components for every line of an order.

    Must be called inside the caller's transaction; nothing is committed here.

    For each order line with a recipe, each component is depleted by
    quantity_used * line quantity at the recipe binding's location (or the
    business unit default). Lines without a recipe contribute nothing.

    Returns:
        DepletionResult with the movements written, negative-stock warnings
        and the per-line COGS valuation (standard cost, half-up to cents).

    Raises:
        StockRecordMissingError: no location resolvable or no stock row for
        (component, location)
    """
    result = DepletionResult()
    now = utcnow()

    for item in order.items:
        recipe = item.menu_item.recipe if item.menu_item else None
        if recipe is None:
            continue

        line_cost = Decimal("0")
        for component in recipe.recipe_items:
            location_id = component.location_id or default_location_id
            if location_id is None:
                raise StockRecordMissingError(
                    f"No stock location configured for inventory item {component.inventory_item_id}",
                    details={
                        "order_id": order.id,
                        "inventory_item_id": component.inventory_item_id,
                    },
                )

            stock = _find_stock(component.inventory_item_id, location_id)
            if stock is None:
                raise StockRecordMissingError(
                    f"No stock record for inventory item {component.inventory_item_id} "
                    f"at location {location_id}",
                    details={
                        "order_id": order.id,
                        "inventory_item_id": component.inventory_item_id,
                        "location_id": location_id,
                    },
                )

            deplete = Decimal(str(component.quantity_used)) * item.quantity
            resulting = _decrement_stock(stock, deplete)

            movement = InventoryMovement(
                inventory_stock_id=stock.id,
                type=MOVEMENT_TYPE_SALE_DEPLETION,
                quantity=-deplete,
                reason=f"Sale - Order {order.id}",
                order_id=order.id,
                created_by_user_id=actor_user_id,
                created_at=now,
            )
            db.session.add(movement)
            result.movements.append(movement)

            inventory_item = component.inventory_item
            if inventory_item is not None and inventory_item.standard_cost_cents:
                line_cost += deplete * inventory_item.standard_cost_cents

            if resulting < 0:
                warning = StockWarning(
                    inventory_item_id=component.inventory_item_id,
                    sku=inventory_item.sku if inventory_item is not None else None,
                    location_id=location_id,
                    resulting_quantity=resulting,
                )
                result.warnings.append(warning)
                current_app.logger.warning(
                    "Negative stock after sale: order_id=%s inventory_item_id=%s location_id=%s quantity_on_hand=%s",
                    order.id,
                    component.inventory_item_id,
                    location_id,
                    resulting,
                )

        result.line_cogs_cents[item.id] = _to_cents(line_cost)

    db.session.flush()
    return result


def list_negative_stock(business_unit_id: int | None = None) -> list[InventoryStock]:
    """Stock rows currently below zero (monitored anomaly)."""
    query = (
        db.session.query(InventoryStock)
        .join(InventoryItem, InventoryItem.id == InventoryStock.inventory_item_id)
        .filter(InventoryStock.quantity_on_hand < 0)
    )
    if business_unit_id is not None:
        query = query.filter(InventoryItem.business_unit_id == business_unit_id)
    return query.order_by(InventoryStock.id).all()
