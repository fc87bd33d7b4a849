# Overview: Service-layer operations for order settlement; encapsulates business logic and database work.

"""
Settlement Coordinator

WHY: Settling an order touches payments, order state, tables, inventory and
the general ledger. The first four must apply together or not at all; the
ledger must never block a customer from paying.

DESIGN PRINCIPLES:
- Phase 1 (one transaction): lock the order, validate, compute totals,
  guarded PAID transition, insert the payment, release the table, deplete
  inventory, enqueue the posting request (outbox). Commit.
- Phase 2 (after commit): post_order_to_gl. Its failure is reported on the
  result (requires_manual_posting) and never unwinds phase 1.
- At most one settlement per order: row lock + guarded status UPDATE +
  unique payment per order.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..extensions import db
from ..models import (
    BusinessUnit,
    Discount,
    LedgerPostingRequest,
    Order,
    Payment,
    PaymentMethod,
    PosConfiguration,
)
from ..models.accounting import POSTING_STATUS_FAILED, POSTING_STATUS_PENDING
from ..models.orders import (
    ORDER_STATUS_CANCELLED,
    ORDER_STATUS_PAID,
    SETTLEABLE_STATUSES,
    TABLE_STATUS_AVAILABLE,
)
from ledgerpos.time_utils import utcnow, to_utc_z
from .concurrency import lock_for_update, run_with_retry
from .depletion_service import deplete_order_inventory
from .exceptions import (
    AlreadySettledError,
    InvalidDiscountError,
    InvalidPaymentMethodError,
    LedgerPosError,
    OrderNotFoundError,
    SettlementValidationError,
)
from .gl_posting_service import PostingOutcome, post_order_to_gl, posting_error_payload
from .settlement_calculator import calculate_settlement, compute_discount_cents, lines_from_order


@dataclass
class SettlementResult:
    payment_id: int
    order_id: int
    subtotal_cents: int
    discount_cents: int
    tax_cents: int
    total_amount_cents: int
    amount_paid_cents: int
    change_cents: int
    paid_at: object
    posting: PostingOutcome
    stock_warnings: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "payment_id": self.payment_id,
            "order_id": self.order_id,
            "status": ORDER_STATUS_PAID,
            "subtotal_cents": self.subtotal_cents,
            "discount_cents": self.discount_cents,
            "tax_cents": self.tax_cents,
            "total_amount_cents": self.total_amount_cents,
            "amount_paid_cents": self.amount_paid_cents,
            "change_cents": self.change_cents,
            "paid_at": to_utc_z(self.paid_at),
            "posting": self.posting.to_dict(),
            "stock_warnings": [w.to_dict() for w in self.stock_warnings],
        }


def _load_settleable_order(business_unit_id: int, order_id: int) -> Order:
    order = lock_for_update(db.session.query(Order).filter_by(id=order_id)).first()
    if order is None or order.business_unit_id != business_unit_id:
        raise OrderNotFoundError(f"Order {order_id} not found", details={"order_id": order_id})
    if order.status not in SETTLEABLE_STATUSES:
        raise AlreadySettledError(
            f"Order {order_id} is already {order.status}",
            details={"order_id": order_id, "status": order.status},
        )
    return order


def _resolve_discount(
    business_unit_id: int,
    discount_id: int | None,
    discount_amount_cents: int | None,
    subtotal_cents: int,
) -> tuple[Discount | None, int]:
    discount = None
    if discount_id is not None:
        discount = (
            db.session.query(Discount)
            .filter_by(id=discount_id, business_unit_id=business_unit_id)
            .first()
        )
        if discount is None:
            raise InvalidDiscountError(
                f"Discount {discount_id} not found",
                details={"discount_id": discount_id},
            )
        if not discount.is_active:
            raise InvalidDiscountError(
                f"Discount {discount_id} is not active",
                details={"discount_id": discount_id},
            )

    if discount_amount_cents is not None:
        return discount, discount_amount_cents
    return discount, compute_discount_cents(discount, subtotal_cents)


def _tax_rate_bps(business_unit_id: int) -> int:
    business_unit = db.session.query(BusinessUnit).filter_by(id=business_unit_id).first()
    if business_unit is not None and business_unit.tax_rate_bps is not None:
        return business_unit.tax_rate_bps
    return int(current_app.config.get("POS_DEFAULT_TAX_RATE_BPS", 1200))


def settle_order(
    *,
    business_unit_id: int,
    order_id: int,
    payment_method_id: int,
    amount_tendered_cents: int,
    discount_id: int | None = None,
    discount_amount_cents: int | None = None,
    actor_user_id: int | None,
) -> SettlementResult:
    """
    Settle an order: take payment, mark it PAID, deplete inventory, then
    post it to the general ledger.

    Raises (phase 1 only; nothing is persisted when these are raised):
        OrderNotFoundError, AlreadySettledError, InvalidPaymentMethodError,
        InsufficientPaymentError, InvalidDiscountError, StockRecordMissingError
        SQLAlchemyError: storage failure after retries
    """
    auto_post_enabled = bool(current_app.config.get("LEDGER_AUTO_POST_ENABLED", True))

    def _op():
        order = _load_settleable_order(business_unit_id, order_id)
        if not order.items:
            raise SettlementValidationError(
                f"Order {order_id} has no items",
                details={"order_id": order_id},
            )

        method = (
            db.session.query(PaymentMethod)
            .filter_by(id=payment_method_id, business_unit_id=business_unit_id)
            .first()
        )
        if method is None or not method.is_active:
            raise InvalidPaymentMethodError(
                f"Payment method {payment_method_id} is not available",
                details={"payment_method_id": payment_method_id},
            )

        lines = lines_from_order(order)
        subtotal = 0
        for line in lines:
            subtotal += line.line_total_cents
        discount, discount_cents = _resolve_discount(
            business_unit_id, discount_id, discount_amount_cents, subtotal
        )

        totals = calculate_settlement(
            lines,
            discount_cents=discount_cents,
            tax_rate_bps=_tax_rate_bps(business_unit_id),
            amount_tendered_cents=amount_tendered_cents,
        )

        now = utcnow()
        stmt = (
            update(Order)
            .where(Order.id == order.id, Order.status.in_(SETTLEABLE_STATUSES))
            .values(
                status=ORDER_STATUS_PAID,
                is_paid=True,
                paid_at=now,
                subtotal_cents=totals.subtotal_cents,
                discount_cents=totals.discount_cents,
                tax_cents=totals.tax_cents,
                total_cents=totals.grand_total_cents,
                amount_paid_cents=totals.amount_tendered_cents,
                change_cents=totals.change_cents,
                discount_id=discount.id if discount is not None else None,
            )
            .execution_options(synchronize_session="fetch")
        )
        if db.session.execute(stmt).rowcount != 1:
            raise AlreadySettledError(
                f"Order {order_id} was settled concurrently",
                details={"order_id": order_id},
            )

        payment = Payment(
            order_id=order.id,
            payment_method_id=method.id,
            amount_cents=totals.amount_tendered_cents,
            change_cents=totals.change_cents,
            processed_by_user_id=actor_user_id,
            created_at=now,
        )
        db.session.add(payment)
        try:
            db.session.flush()
        except IntegrityError:
            db.session.rollback()
            raise AlreadySettledError(
                f"Order {order_id} already has a payment",
                details={"order_id": order_id},
            )

        if order.table is not None:
            order.table.status = TABLE_STATUS_AVAILABLE

        configuration = (
            db.session.query(PosConfiguration)
            .filter_by(business_unit_id=business_unit_id)
            .first()
        )
        depletion = deplete_order_inventory(
            order,
            actor_user_id=actor_user_id,
            default_location_id=configuration.default_location_id if configuration else None,
        )
        for item in order.items:
            item.cogs_cents = depletion.line_cogs_cents.get(item.id, 0)

        auto_post = auto_post_enabled and configuration is not None and configuration.auto_post_to_gl
        if auto_post:
            db.session.add(
                LedgerPostingRequest(
                    order_id=order.id,
                    business_unit_id=business_unit_id,
                    status=POSTING_STATUS_PENDING,
                    attempts=0,
                    requested_by_user_id=actor_user_id,
                )
            )

        db.session.commit()
        return payment.id, now, totals, depletion.warnings, auto_post

    try:
        payment_id, paid_at, totals, warnings, auto_post = run_with_retry(_op)
    except (LedgerPosError, SQLAlchemyError):
        db.session.rollback()
        raise

    current_app.logger.info(
        "Settled order: business_unit_id=%s order_id=%s payment_id=%s total_cents=%s change_cents=%s",
        business_unit_id,
        order_id,
        payment_id,
        totals.grand_total_cents,
        totals.change_cents,
    )

    if auto_post:
        try:
            posting = post_order_to_gl(
                order_id,
                business_unit_id=business_unit_id,
                actor_user_id=actor_user_id,
            )
        except Exception as exc:
            # Phase 1 is committed; the caller still gets a settlement result
            db.session.rollback()
            current_app.logger.exception("Failed to post order_id=%s to GL", order_id)
            posting = PostingOutcome(status=POSTING_STATUS_FAILED, error=posting_error_payload(exc))
    else:
        posting = PostingOutcome.skipped()

    return SettlementResult(
        payment_id=payment_id,
        order_id=order_id,
        subtotal_cents=totals.subtotal_cents,
        discount_cents=totals.discount_cents,
        tax_cents=totals.tax_cents,
        total_amount_cents=totals.grand_total_cents,
        amount_paid_cents=totals.amount_tendered_cents,
        change_cents=totals.change_cents,
        paid_at=paid_at,
        posting=posting,
        stock_warnings=warnings,
    )


def cancel_order(
    *,
    business_unit_id: int,
    order_id: int,
    reason: str | None = None,
    actor_user_id: int | None = None,
) -> Order:
    """
    Cancel an open order and release its table.

    Raises:
        OrderNotFoundError: unknown order (or another business unit's)
        AlreadySettledError: order is already PAID or CANCELLED
    """
    def _op():
        order = _load_settleable_order(business_unit_id, order_id)

        stmt = (
            update(Order)
            .where(Order.id == order.id, Order.status.in_(SETTLEABLE_STATUSES))
            .values(
                status=ORDER_STATUS_CANCELLED,
                cancelled_at=utcnow(),
                cancel_reason=reason,
            )
            .execution_options(synchronize_session="fetch")
        )
        if db.session.execute(stmt).rowcount != 1:
            raise AlreadySettledError(
                f"Order {order_id} was settled concurrently",
                details={"order_id": order_id},
            )

        if order.table is not None:
            order.table.status = TABLE_STATUS_AVAILABLE

        db.session.commit()
        return order

    try:
        order = run_with_retry(_op)
    except (LedgerPosError, SQLAlchemyError):
        db.session.rollback()
        raise

    current_app.logger.info(
        "Cancelled order: business_unit_id=%s order_id=%s actor_user_id=%s",
        business_unit_id,
        order_id,
        actor_user_id,
    )
    return order
