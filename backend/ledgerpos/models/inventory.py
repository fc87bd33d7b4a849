from __future__ import annotations

from ..extensions import db
from ledgerpos.time_utils import to_utc_z


def _qty(value) -> str | None:
    # Serialize fixed-point quantities as strings to keep their precision
    if value is None:
        return None
    return str(value)


class InventoryItem(db.Model):
    """
    Stock-keeping component consumed by recipes.

    standard_cost_cents is the per-unit cost used for COGS valuation at
    settlement time.
    """
    __tablename__ = "inventory_items"
    __table_args__ = (
        db.UniqueConstraint("business_unit_id", "sku", name="uq_inventory_items_bu_sku"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    business_unit_id = db.Column(db.Integer, db.ForeignKey("business_units.id"), nullable=False, index=True)

    sku = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    uom = db.Column(db.String(16), nullable=False, default="EA")

    standard_cost_cents = db.Column(db.Integer, nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<InventoryItem id={self.id} sku={self.sku!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_unit_id": self.business_unit_id,
            "sku": self.sku,
            "name": self.name,
            "uom": self.uom,
            "standard_cost_cents": self.standard_cost_cents,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }


class InventoryLocation(db.Model):
    __tablename__ = "inventory_locations"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    business_unit_id = db.Column(db.Integer, db.ForeignKey("business_units.id"), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)

    def to_dict(self) -> dict:
        return {"id": self.id, "business_unit_id": self.business_unit_id, "name": self.name}


class InventoryStock(db.Model):
    """
    On-hand quantity of one component at one location.

    Mutated by settlement depletion and by receiving/adjustment flows. All
    decrements are single UPDATE statements so concurrent writers never lose
    updates. quantity_on_hand may go negative; that is reported, not blocked.
    """
    __tablename__ = "inventory_stocks"
    __table_args__ = (
        db.UniqueConstraint("inventory_item_id", "location_id", name="uq_inventory_stocks_item_location"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    inventory_item_id = db.Column(db.Integer, db.ForeignKey("inventory_items.id"), nullable=False, index=True)
    location_id = db.Column(db.Integer, db.ForeignKey("inventory_locations.id"), nullable=False, index=True)

    quantity_on_hand = db.Column(db.Numeric(18, 4), nullable=False, default=0)
    reorder_point = db.Column(db.Numeric(18, 4), nullable=True)

    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    inventory_item = db.relationship("InventoryItem", backref=db.backref("stock_levels", lazy=True))
    location = db.relationship("InventoryLocation")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "inventory_item_id": self.inventory_item_id,
            "location_id": self.location_id,
            "quantity_on_hand": _qty(self.quantity_on_hand),
            "reorder_point": _qty(self.reorder_point),
            "updated_at": to_utc_z(self.updated_at),
        }


class InventoryMovement(db.Model):
    """
    Append-only stock movement log.

    One row per component per settlement; quantity is signed (negative for
    depletion). Rows are never updated or deleted.
    """
    __tablename__ = "inventory_movements"
    __table_args__ = (
        db.Index("ix_inventory_movements_order", "order_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    inventory_stock_id = db.Column(db.Integer, db.ForeignKey("inventory_stocks.id"), nullable=False, index=True)

    type = db.Column(db.String(32), nullable=False, index=True)
    quantity = db.Column(db.Numeric(18, 4), nullable=False)
    reason = db.Column(db.String(255), nullable=True)

    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=True)
    created_by_user_id = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    inventory_stock = db.relationship("InventoryStock", backref=db.backref("movements", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "inventory_stock_id": self.inventory_stock_id,
            "type": self.type,
            "quantity": _qty(self.quantity),
            "reason": self.reason,
            "order_id": self.order_id,
            "created_by_user_id": self.created_by_user_id,
            "created_at": to_utc_z(self.created_at),
        }
