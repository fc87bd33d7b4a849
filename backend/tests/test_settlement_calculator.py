"""
Settlement calculator tests.

Verifies:
- Subtotal, tax (half-up basis points), total and change in integer cents
- Modifier deltas apply per unit
- Insufficient payment and invalid discounts are rejected
"""

import pytest

from ledgerpos.models import Discount
from ledgerpos.models.orders import DISCOUNT_TYPE_FIXED, DISCOUNT_TYPE_PERCENTAGE
from ledgerpos.services.exceptions import InsufficientPaymentError, InvalidDiscountError
from ledgerpos.services.settlement_calculator import (
    SettlementLine,
    bps_of,
    calculate_settlement,
    compute_discount_cents,
)


def _burgers(quantity=2, price=10000, modifiers=()):
    return [SettlementLine(line_id=1, quantity=quantity, unit_price_cents=price, modifier_deltas_cents=modifiers)]


# =============================================================================
# TOTALS
# =============================================================================


class TestTotals:

    def test_two_items_twelve_percent_tax(self):
        totals = calculate_settlement(
            _burgers(),
            discount_cents=0,
            tax_rate_bps=1200,
            amount_tendered_cents=25000,
        )
        assert totals.subtotal_cents == 20000
        assert totals.tax_cents == 2400
        assert totals.grand_total_cents == 22400
        assert totals.change_cents == 2600

    def test_discount_reduces_taxable_base(self):
        totals = calculate_settlement(
            _burgers(),
            discount_cents=2000,
            tax_rate_bps=1200,
            amount_tendered_cents=25000,
        )
        assert totals.taxable_cents == 18000
        assert totals.tax_cents == 2160
        assert totals.grand_total_cents == 20160
        assert totals.change_cents == 4840

    def test_exact_tender_gives_zero_change(self):
        totals = calculate_settlement(
            _burgers(),
            discount_cents=0,
            tax_rate_bps=1200,
            amount_tendered_cents=22400,
        )
        assert totals.change_cents == 0

    def test_modifiers_apply_per_unit(self):
        totals = calculate_settlement(
            _burgers(quantity=3, price=1000, modifiers=(150, -50)),
            discount_cents=0,
            tax_rate_bps=0,
            amount_tendered_cents=3300,
        )
        assert totals.subtotal_cents == 3300
        assert totals.line_totals_cents == {1: 3300}

    def test_tax_rounds_half_up(self):
        # 1.25 * 12% = 0.15; 0.05 * 10% = 0.005 -> 0.01
        assert bps_of(125, 1200) == 15
        assert bps_of(5, 1000) == 1
        assert bps_of(4, 1000) == 0

    def test_multiple_lines_sum(self):
        lines = [
            SettlementLine(line_id=1, quantity=2, unit_price_cents=450),
            SettlementLine(line_id=2, quantity=1, unit_price_cents=1299),
        ]
        totals = calculate_settlement(lines, discount_cents=0, tax_rate_bps=1200, amount_tendered_cents=5000)
        assert totals.subtotal_cents == 2199
        assert totals.tax_cents == 264
        assert totals.grand_total_cents == 2463


# =============================================================================
# REJECTIONS
# =============================================================================


class TestRejections:

    def test_insufficient_payment(self):
        with pytest.raises(InsufficientPaymentError) as exc_info:
            calculate_settlement(
                _burgers(),
                discount_cents=0,
                tax_rate_bps=1200,
                amount_tendered_cents=20000,
            )
        assert exc_info.value.details["shortfall_cents"] == 2400
        assert exc_info.value.http_status == 400

    def test_one_cent_short_is_rejected(self):
        with pytest.raises(InsufficientPaymentError):
            calculate_settlement(_burgers(), discount_cents=0, tax_rate_bps=1200, amount_tendered_cents=22399)

    def test_negative_discount(self):
        with pytest.raises(InvalidDiscountError):
            calculate_settlement(_burgers(), discount_cents=-1, tax_rate_bps=1200, amount_tendered_cents=30000)

    def test_discount_above_subtotal(self):
        with pytest.raises(InvalidDiscountError):
            calculate_settlement(_burgers(), discount_cents=20001, tax_rate_bps=1200, amount_tendered_cents=30000)


# =============================================================================
# DISCOUNT RECORDS
# =============================================================================


class TestDiscountRecords:

    def test_percentage_discount_in_basis_points(self):
        discount = Discount(id=1, name="10% off", type=DISCOUNT_TYPE_PERCENTAGE, value=1000, is_active=True)
        assert compute_discount_cents(discount, 20000) == 2000

    def test_fixed_discount(self):
        discount = Discount(id=2, name="5 off", type=DISCOUNT_TYPE_FIXED, value=500, is_active=True)
        assert compute_discount_cents(discount, 20000) == 500

    def test_no_discount(self):
        assert compute_discount_cents(None, 20000) == 0

    def test_inactive_discount_rejected(self):
        discount = Discount(id=3, name="Old promo", type=DISCOUNT_TYPE_FIXED, value=500, is_active=False)
        with pytest.raises(InvalidDiscountError):
            compute_discount_cents(discount, 20000)
