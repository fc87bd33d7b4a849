from __future__ import annotations

from ..extensions import db
from ledgerpos.time_utils import to_utc_z


ORDER_STATUS_OPEN = "OPEN"
ORDER_STATUS_PREPARING = "PREPARING"
ORDER_STATUS_PAID = "PAID"
ORDER_STATUS_CANCELLED = "CANCELLED"

SETTLEABLE_STATUSES = (ORDER_STATUS_OPEN, ORDER_STATUS_PREPARING)

TABLE_STATUS_AVAILABLE = "AVAILABLE"
TABLE_STATUS_OCCUPIED = "OCCUPIED"


class DiningTable(db.Model):
    """Dining table; occupied while an order is open on it."""
    __tablename__ = "pos_tables"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    business_unit_id = db.Column(db.Integer, db.ForeignKey("business_units.id"), nullable=False, index=True)
    name = db.Column(db.String(64), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=TABLE_STATUS_AVAILABLE)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_unit_id": self.business_unit_id,
            "name": self.name,
            "status": self.status,
        }


class Order(db.Model):
    """
    POS order.

    Lifecycle: OPEN -> PREPARING -> PAID | CANCELLED. PAID and CANCELLED are
    terminal. Order entry (external) creates orders; only settlement and
    cancellation change their status.

    All amounts are in cents.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_bu_status", "business_unit_id", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    business_unit_id = db.Column(db.Integer, db.ForeignKey("business_units.id"), nullable=False, index=True)
    table_id = db.Column(db.Integer, db.ForeignKey("pos_tables.id"), nullable=True, index=True)

    status = db.Column(db.String(16), nullable=False, default=ORDER_STATUS_OPEN, index=True)

    subtotal_cents = db.Column(db.Integer, nullable=False, default=0)
    discount_cents = db.Column(db.Integer, nullable=False, default=0)
    tax_cents = db.Column(db.Integer, nullable=False, default=0)
    total_cents = db.Column(db.Integer, nullable=False, default=0)
    amount_paid_cents = db.Column(db.Integer, nullable=False, default=0)
    change_cents = db.Column(db.Integer, nullable=False, default=0)

    is_paid = db.Column(db.Boolean, nullable=False, default=False)
    paid_at = db.Column(db.DateTime(timezone=True), nullable=True)

    discount_id = db.Column(db.Integer, db.ForeignKey("discounts.id"), nullable=True)

    cancelled_at = db.Column(db.DateTime(timezone=True), nullable=True)
    cancel_reason = db.Column(db.String(255), nullable=True)

    created_by_user_id = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    table = db.relationship("DiningTable")
    items = db.relationship("OrderItem", back_populates="order", order_by="OrderItem.id", lazy="selectin")
    discount = db.relationship("Discount")

    def __repr__(self) -> str:
        return f"<Order id={self.id} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_unit_id": self.business_unit_id,
            "table_id": self.table_id,
            "status": self.status,
            "subtotal_cents": self.subtotal_cents,
            "discount_cents": self.discount_cents,
            "tax_cents": self.tax_cents,
            "total_cents": self.total_cents,
            "amount_paid_cents": self.amount_paid_cents,
            "change_cents": self.change_cents,
            "is_paid": self.is_paid,
            "paid_at": to_utc_z(self.paid_at),
            "discount_id": self.discount_id,
            "cancelled_at": to_utc_z(self.cancelled_at),
            "cancel_reason": self.cancel_reason,
            "created_at": to_utc_z(self.created_at),
        }


class OrderItem(db.Model):
    """Order line. price_at_sale_cents is a snapshot taken at order entry."""
    __tablename__ = "order_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    menu_item_id = db.Column(db.Integer, db.ForeignKey("menu_items.id"), nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    price_at_sale_cents = db.Column(db.Integer, nullable=False)
    # Standard-cost valuation of the components depleted for this line, set at settlement
    cogs_cents = db.Column(db.Integer, nullable=True)

    order = db.relationship("Order", back_populates="items")
    menu_item = db.relationship("MenuItem", lazy="joined")
    modifiers = db.relationship("OrderItemModifier", order_by="OrderItemModifier.id", lazy="selectin")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "menu_item_id": self.menu_item_id,
            "quantity": self.quantity,
            "price_at_sale_cents": self.price_at_sale_cents,
            "cogs_cents": self.cogs_cents,
            "modifiers": [m.to_dict() for m in self.modifiers],
        }


class OrderItemModifier(db.Model):
    """Per-unit price delta applied to an order line (extra shot, no cheese...)."""
    __tablename__ = "order_item_modifiers"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    order_item_id = db.Column(db.Integer, db.ForeignKey("order_items.id"), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    price_change_cents = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price_change_cents": self.price_change_cents,
        }


class PaymentMethod(db.Model):
    __tablename__ = "payment_methods"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    business_unit_id = db.Column(db.Integer, db.ForeignKey("business_units.id"), nullable=False, index=True)
    name = db.Column(db.String(64), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_unit_id": self.business_unit_id,
            "name": self.name,
            "is_active": self.is_active,
        }


class Payment(db.Model):
    """
    Immutable payment record.

    amount_cents is what the customer tendered; change_cents what was handed
    back. Exactly one payment exists per settled order.
    """
    __tablename__ = "payments"
    __table_args__ = (
        db.UniqueConstraint("order_id", name="uq_payments_order"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False)
    payment_method_id = db.Column(db.Integer, db.ForeignKey("payment_methods.id"), nullable=False)

    amount_cents = db.Column(db.Integer, nullable=False)
    change_cents = db.Column(db.Integer, nullable=False, default=0)

    processed_by_user_id = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    order = db.relationship("Order", backref=db.backref("payments", lazy=True))
    payment_method = db.relationship("PaymentMethod")

    @property
    def amount_received_cents(self) -> int:
        return self.amount_cents - (self.change_cents or 0)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "payment_method_id": self.payment_method_id,
            "amount_cents": self.amount_cents,
            "change_cents": self.change_cents,
            "processed_by_user_id": self.processed_by_user_id,
            "created_at": to_utc_z(self.created_at),
        }


DISCOUNT_TYPE_PERCENTAGE = "PERCENTAGE"
DISCOUNT_TYPE_FIXED = "FIXED"


class Discount(db.Model):
    """
    Named discount.

    PERCENTAGE: value is basis points of the subtotal.
    FIXED: value is an amount in cents.
    gl_account_id optionally routes the discount to its own contra account.
    """
    __tablename__ = "discounts"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    business_unit_id = db.Column(db.Integer, db.ForeignKey("business_units.id"), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    type = db.Column(db.String(16), nullable=False, default=DISCOUNT_TYPE_FIXED)
    value = db.Column(db.Integer, nullable=False)
    gl_account_id = db.Column(db.Integer, db.ForeignKey("gl_accounts.id"), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_unit_id": self.business_unit_id,
            "name": self.name,
            "type": self.type,
            "value": self.value,
            "gl_account_id": self.gl_account_id,
            "is_active": self.is_active,
        }
