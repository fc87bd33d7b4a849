# Overview: Pure settlement arithmetic; totals, tax and change in integer cents.

"""
Settlement Calculator

WHY: Totals are computed in exactly one place so the payment, the order
snapshot and the journal entry can never disagree.

DESIGN PRINCIPLES:
- Integer cents only; no floats anywhere.
- Tax rate in basis points (1200 = 12%), rounded half-up to the cent.
- Pure: no I/O, no session access. Callers pass plain line inputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..models.orders import DISCOUNT_TYPE_PERCENTAGE, DISCOUNT_TYPE_FIXED
from .exceptions import InsufficientPaymentError, InvalidDiscountError, SettlementValidationError


BPS_DENOMINATOR = 10_000


@dataclass(frozen=True)
class SettlementLine:
    """One order line as seen by the calculator."""
    line_id: int | None
    quantity: int
    unit_price_cents: int
    modifier_deltas_cents: tuple[int, ...] = ()

    @property
    def line_total_cents(self) -> int:
        unit = self.unit_price_cents
        for delta in self.modifier_deltas_cents:
            unit += delta
        return unit * self.quantity


@dataclass
class SettlementTotals:
    subtotal_cents: int
    discount_cents: int
    tax_cents: int
    grand_total_cents: int
    amount_tendered_cents: int
    change_cents: int
    line_totals_cents: dict = field(default_factory=dict)

    @property
    def taxable_cents(self) -> int:
        return self.subtotal_cents - self.discount_cents

    def to_dict(self) -> dict:
        return {
            "subtotal_cents": self.subtotal_cents,
            "discount_cents": self.discount_cents,
            "tax_cents": self.tax_cents,
            "total_amount_cents": self.grand_total_cents,
            "amount_paid_cents": self.amount_tendered_cents,
            "change_cents": self.change_cents,
        }


def round_half_up_div(numerator: int, denominator: int) -> int:
    """Integer division rounded half-up (non-negative operands)."""
    return (numerator * 2 + denominator) // (denominator * 2)


def bps_of(amount_cents: int, rate_bps: int) -> int:
    return round_half_up_div(amount_cents * rate_bps, BPS_DENOMINATOR)


def lines_from_order(order) -> list[SettlementLine]:
    """Snapshot an Order's items (and their modifiers) into calculator lines."""
    lines = []
    for item in order.items:
        deltas = tuple(m.price_change_cents or 0 for m in item.modifiers)
        lines.append(
            SettlementLine(
                line_id=item.id,
                quantity=item.quantity,
                unit_price_cents=item.price_at_sale_cents,
                modifier_deltas_cents=deltas,
            )
        )
    return lines


def compute_discount_cents(discount, subtotal_cents: int) -> int:
    """
    Derive the discount amount from a Discount record.

    PERCENTAGE values are basis points of the subtotal (half-up);
    FIXED values are cents.
    """
    if discount is None:
        return 0
    if not discount.is_active:
        raise InvalidDiscountError(
            f"Discount {discount.id} is not active",
            details={"discount_id": discount.id},
        )
    if discount.value is None or discount.value < 0:
        raise InvalidDiscountError(
            f"Discount {discount.id} has an invalid value",
            details={"discount_id": discount.id},
        )
    if discount.type == DISCOUNT_TYPE_PERCENTAGE:
        return bps_of(subtotal_cents, discount.value)
    if discount.type == DISCOUNT_TYPE_FIXED:
        return discount.value
    raise InvalidDiscountError(
        f"Unknown discount type: {discount.type}",
        details={"discount_id": discount.id, "type": discount.type},
    )


def calculate_settlement(
    lines: list[SettlementLine],
    *,
    discount_cents: int,
    tax_rate_bps: int,
    amount_tendered_cents: int,
) -> SettlementTotals:
    """
    Compute settlement totals.

    subtotal = sum of line totals
    tax      = round_half_up((subtotal - discount) * rate_bps / 10000)
    total    = subtotal - discount + tax
    change   = tendered - total

    Raises:
        InvalidDiscountError: discount negative or larger than the subtotal
        InsufficientPaymentError: tendered below the grand total
    """
    subtotal = 0
    line_totals = {}
    for line in lines:
        if line.quantity <= 0:
            raise SettlementValidationError(
                "Order line quantity must be positive",
                details={"line_id": line.line_id, "quantity": line.quantity},
            )
        line_total = line.line_total_cents
        line_totals[line.line_id] = line_total
        subtotal += line_total

    if discount_cents < 0:
        raise InvalidDiscountError(
            "Discount cannot be negative",
            details={"discount_cents": discount_cents},
        )
    if discount_cents > subtotal:
        raise InvalidDiscountError(
            "Discount exceeds order subtotal",
            details={"discount_cents": discount_cents, "subtotal_cents": subtotal},
        )

    taxable = subtotal - discount_cents
    tax = bps_of(taxable, tax_rate_bps)
    grand_total = taxable + tax
    change = amount_tendered_cents - grand_total

    if change < 0:
        raise InsufficientPaymentError(
            "Amount tendered is less than the order total",
            details={
                "amount_tendered_cents": amount_tendered_cents,
                "total_amount_cents": grand_total,
                "shortfall_cents": -change,
            },
        )

    return SettlementTotals(
        subtotal_cents=subtotal,
        discount_cents=discount_cents,
        tax_cents=tax,
        grand_total_cents=grand_total,
        amount_tendered_cents=amount_tendered_cents,
        change_cents=change,
        line_totals_cents=line_totals,
    )
