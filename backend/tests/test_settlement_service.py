"""
Settlement coordinator tests.

Verifies:
- Payment, order state, table release, depletion and posting on the happy path
- At most one settlement per order
- Failed validation persists nothing
- GL posting failures never undo the settlement
- Cancellation of open orders
"""

from decimal import Decimal

import pytest

from ledgerpos.models import (
    DiningTable,
    Discount,
    GlAccount,
    InventoryMovement,
    InventoryStock,
    JournalEntry,
    LedgerPostingRequest,
    MenuItem,
    MenuItemGlMapping,
    Order,
    Payment,
    PaymentMethod,
)
from ledgerpos.models.accounting import POSTING_STATUS_FAILED, POSTING_STATUS_POSTED
from ledgerpos.models.orders import (
    DISCOUNT_TYPE_PERCENTAGE,
    ORDER_STATUS_CANCELLED,
    ORDER_STATUS_OPEN,
    ORDER_STATUS_PAID,
    ORDER_STATUS_PREPARING,
    TABLE_STATUS_AVAILABLE,
    TABLE_STATUS_OCCUPIED,
)
from ledgerpos.services.exceptions import (
    AlreadySettledError,
    InsufficientPaymentError,
    InvalidDiscountError,
    InvalidPaymentMethodError,
    OrderNotFoundError,
    SettlementValidationError,
    StockRecordMissingError,
)
from ledgerpos.services.gl_posting_service import POSTING_OUTCOME_SKIPPED
from ledgerpos.services.settlement_service import cancel_order, settle_order


def _settle(pos, order, tendered=25000, **kwargs):
    return settle_order(
        business_unit_id=pos.bu.id,
        order_id=order.id,
        payment_method_id=pos.cash_method.id,
        amount_tendered_cents=tendered,
        actor_user_id=7,
        **kwargs,
    )


# =============================================================================
# HAPPY PATH
# =============================================================================


class TestSettleOrder:

    def test_settles_and_posts(self, db_session, pos, make_order):
        order = make_order()

        result = _settle(pos, order)

        assert result.subtotal_cents == 20000
        assert result.tax_cents == 2400
        assert result.total_amount_cents == 22400
        assert result.change_cents == 2600
        assert result.posting.posted is True
        assert result.posting.document_number == "JE000001"
        assert result.posting.requires_manual_posting is False

        saved = db_session.query(Order).filter_by(id=order.id).first()
        assert saved.status == ORDER_STATUS_PAID
        assert saved.is_paid is True
        assert saved.paid_at is not None
        assert saved.items[0].cogs_cents == 600

        payment = db_session.query(Payment).filter_by(order_id=order.id).one()
        assert payment.id == result.payment_id
        assert payment.amount_cents == 25000
        assert payment.change_cents == 2600
        assert payment.processed_by_user_id == 7

        table = db_session.query(DiningTable).filter_by(id=pos.table.id).first()
        assert table.status == TABLE_STATUS_AVAILABLE

        stock = db_session.query(InventoryStock).filter_by(id=pos.stock.id).first()
        assert stock.quantity_on_hand == Decimal("1")

        entry = db_session.query(JournalEntry).filter_by(order_id=order.id).one()
        assert entry.total_debit_cents == entry.total_credit_cents == 23000
        assert entry.remarks == f"POS Order {order.id}"
        assert entry.accounting_period_id == pos.period.id

        request = db_session.query(LedgerPostingRequest).filter_by(order_id=order.id).one()
        assert request.status == POSTING_STATUS_POSTED
        assert request.journal_entry_id == entry.id
        assert request.attempts == 1

    def test_result_payload_shape(self, db_session, pos, make_order):
        order = make_order()

        payload = _settle(pos, order).to_dict()

        assert payload["status"] == ORDER_STATUS_PAID
        assert payload["total_amount_cents"] == 22400
        assert payload["posting"]["status"] == POSTING_STATUS_POSTED
        assert payload["paid_at"].endswith("Z")
        assert payload["stock_warnings"] == []

    def test_preparing_order_is_settleable(self, db_session, pos, make_order):
        order = make_order(status=ORDER_STATUS_PREPARING)

        result = _settle(pos, order)

        assert result.posting.posted is True

    def test_discount_record_applied(self, db_session, pos, make_order):
        promo = Discount(business_unit_id=pos.bu.id, name="10%", type=DISCOUNT_TYPE_PERCENTAGE, value=1000)
        db_session.add(promo)
        db_session.commit()
        order = make_order()

        result = _settle(pos, order, discount_id=promo.id)

        assert result.discount_cents == 2000
        assert result.tax_cents == 2160
        assert result.total_amount_cents == 20160
        saved = db_session.query(Order).filter_by(id=order.id).first()
        assert saved.discount_id == promo.id

    def test_discount_amount_overrides_record(self, db_session, pos, make_order):
        order = make_order()

        result = _settle(pos, order, discount_amount_cents=500)

        assert result.discount_cents == 500
        assert result.tax_cents == 2340

    def test_negative_stock_reported_not_blocked(self, db_session, pos, make_order):
        order = make_order([(pos.burger, 3)])

        result = _settle(pos, order, tendered=40000)

        assert len(result.stock_warnings) == 1
        warning = result.to_dict()["stock_warnings"][0]
        assert warning["inventory_item_id"] == pos.beef.id
        assert Decimal(warning["resulting_quantity"]) == Decimal("-1")

    def test_modifiers_are_charged(self, db_session, pos, make_order):
        order = make_order([(pos.burger, 1)], modifiers=[("Extra cheese", 250)])

        result = _settle(pos, order, tendered=20000)

        assert result.subtotal_cents == 10250
        assert result.tax_cents == 1230


# =============================================================================
# REJECTIONS
# =============================================================================


class TestSettleRejections:

    def test_second_settlement_is_rejected(self, db_session, pos, make_order):
        order = make_order()
        _settle(pos, order)

        with pytest.raises(AlreadySettledError):
            _settle(pos, order)

        assert db_session.query(Payment).filter_by(order_id=order.id).count() == 1
        assert db_session.query(JournalEntry).filter_by(order_id=order.id).count() == 1

    def test_cancelled_order_cannot_be_settled(self, db_session, pos, make_order):
        order = make_order(status=ORDER_STATUS_CANCELLED)

        with pytest.raises(AlreadySettledError):
            _settle(pos, order)

    def test_insufficient_payment_persists_nothing(self, db_session, pos, make_order):
        order = make_order()

        with pytest.raises(InsufficientPaymentError):
            _settle(pos, order, tendered=22399)

        saved = db_session.query(Order).filter_by(id=order.id).first()
        assert saved.status != ORDER_STATUS_PAID
        assert db_session.query(Payment).count() == 0
        assert db_session.query(InventoryMovement).count() == 0
        assert db_session.query(InventoryStock).filter_by(id=pos.stock.id).first().quantity_on_hand == Decimal("5")

    def test_unknown_order(self, db_session, pos):
        with pytest.raises(OrderNotFoundError):
            settle_order(
                business_unit_id=pos.bu.id,
                order_id=9999,
                payment_method_id=pos.cash_method.id,
                amount_tendered_cents=100,
                actor_user_id=7,
            )

    def test_inactive_payment_method(self, db_session, pos, make_order):
        card = PaymentMethod(business_unit_id=pos.bu.id, name="Card", is_active=False)
        db_session.add(card)
        db_session.commit()
        order = make_order()

        with pytest.raises(InvalidPaymentMethodError):
            settle_order(
                business_unit_id=pos.bu.id,
                order_id=order.id,
                payment_method_id=card.id,
                amount_tendered_cents=25000,
                actor_user_id=7,
            )

    def test_unknown_discount(self, db_session, pos, make_order):
        order = make_order()

        with pytest.raises(InvalidDiscountError):
            _settle(pos, order, discount_id=4242)

    def test_empty_order(self, db_session, pos, make_order):
        order = make_order(lines=[])

        with pytest.raises(SettlementValidationError):
            _settle(pos, order)

    def test_inactive_discount_rejected_with_amount_override(self, db_session, pos, make_order):
        retired = Discount(
            business_unit_id=pos.bu.id,
            name="Old promo",
            type=DISCOUNT_TYPE_PERCENTAGE,
            value=1000,
            gl_account_id=pos.accounts.discounts.id,
            is_active=False,
        )
        db_session.add(retired)
        db_session.commit()
        order = make_order()

        with pytest.raises(InvalidDiscountError):
            _settle(pos, order, discount_id=retired.id, discount_amount_cents=2000)

        assert db_session.query(Payment).count() == 0
        assert db_session.query(Order).filter_by(id=order.id).first().discount_id is None

    def test_missing_stock_row_rolls_back_payment_and_status(self, db_session, pos, make_order):
        db_session.query(InventoryStock).delete()
        db_session.commit()
        order = make_order()

        with pytest.raises(StockRecordMissingError):
            _settle(pos, order)

        saved = db_session.query(Order).filter_by(id=order.id).first()
        assert saved.status == ORDER_STATUS_OPEN
        assert saved.is_paid is False
        assert db_session.query(Payment).count() == 0
        assert db_session.query(InventoryMovement).count() == 0
        assert db_session.query(LedgerPostingRequest).count() == 0
        table = db_session.query(DiningTable).filter_by(id=pos.table.id).first()
        assert table.status == TABLE_STATUS_OCCUPIED


# =============================================================================
# POSTING FAILURES
# =============================================================================


class TestPostingDoesNotBlockSettlement:

    def test_unresolved_sales_account_requires_manual_posting(self, db_session, pos, make_order):
        pos.config.default_sales_account_id = None
        db_session.commit()
        order = make_order()

        result = _settle(pos, order)

        assert result.posting.status == POSTING_STATUS_FAILED
        assert result.posting.requires_manual_posting is True
        assert result.posting.error["code"] == "UNRESOLVED_ACCOUNT"

        saved = db_session.query(Order).filter_by(id=order.id).first()
        assert saved.status == ORDER_STATUS_PAID
        assert db_session.query(Payment).filter_by(order_id=order.id).count() == 1
        assert db_session.query(JournalEntry).count() == 0

        request = db_session.query(LedgerPostingRequest).filter_by(order_id=order.id).one()
        assert request.status == POSTING_STATUS_FAILED
        assert request.attempts == 1
        assert "sales" in request.last_error

    def test_unresolved_cash_account_requires_manual_posting(self, db_session, pos, make_order):
        pos.config.default_cash_account_id = None
        db_session.commit()
        order = make_order()

        result = _settle(pos, order)

        assert result.payment_id is not None
        assert result.posting.requires_manual_posting is True
        assert result.posting.error["code"] == "UNRESOLVED_ACCOUNT"
        assert result.posting.error["details"]["role"] == "cash"
        assert db_session.query(Payment).filter_by(id=result.payment_id).count() == 1
        assert db_session.query(JournalEntry).count() == 0

    def test_near_full_discount_netted_across_sales_accounts_posts(self, db_session, pos, make_order):
        items = []
        for code, name in (("4201", "Fries"), ("4202", "Salad"), ("4203", "Soup")):
            account = GlAccount(business_unit_id=pos.bu.id, account_code=code, name=name, account_type="REVENUE")
            item = MenuItem(business_unit_id=pos.bu.id, name=name, price_cents=333)
            db_session.add_all([account, item])
            db_session.flush()
            db_session.add(MenuItemGlMapping(menu_item_id=item.id, business_unit_id=pos.bu.id, sales_account_id=account.id))
            items.append(item)
        db_session.commit()
        order = make_order([(item, 1) for item in items])

        result = _settle(pos, order, tendered=1, discount_amount_cents=998)

        assert result.total_amount_cents == 1
        assert result.posting.posted is True
        entry = db_session.query(JournalEntry).filter_by(order_id=order.id).one()
        assert entry.total_debit_cents == entry.total_credit_cents == 1

    def test_unexpected_posting_error_still_returns_settlement(self, db_session, pos, make_order, monkeypatch):
        def _explode(*args, **kwargs):
            raise RuntimeError("ledger unreachable")

        monkeypatch.setattr("ledgerpos.services.settlement_service.post_order_to_gl", _explode)
        order = make_order()

        result = _settle(pos, order)

        assert result.posting.status == POSTING_STATUS_FAILED
        assert result.posting.requires_manual_posting is True
        assert result.posting.error["code"] == "INTERNAL_ERROR"
        saved = db_session.query(Order).filter_by(id=order.id).first()
        assert saved.status == ORDER_STATUS_PAID

    def test_auto_post_disabled_in_configuration(self, db_session, pos, make_order):
        pos.config.auto_post_to_gl = False
        db_session.commit()
        order = make_order()

        result = _settle(pos, order)

        assert result.posting.status == POSTING_OUTCOME_SKIPPED
        assert result.posting.requires_manual_posting is False
        assert db_session.query(LedgerPostingRequest).count() == 0
        assert db_session.query(JournalEntry).count() == 0

    def test_auto_post_disabled_by_app_config(self, app, db_session, pos, make_order):
        app.config["LEDGER_AUTO_POST_ENABLED"] = False
        try:
            order = make_order()
            result = _settle(pos, order)
        finally:
            app.config["LEDGER_AUTO_POST_ENABLED"] = True

        assert result.posting.status == POSTING_OUTCOME_SKIPPED
        assert db_session.query(JournalEntry).count() == 0


# =============================================================================
# CANCELLATION
# =============================================================================


class TestCancelOrder:

    def test_cancel_releases_table(self, db_session, pos, make_order):
        order = make_order()

        cancelled = cancel_order(business_unit_id=pos.bu.id, order_id=order.id, reason="Walked out", actor_user_id=7)

        assert cancelled.status == ORDER_STATUS_CANCELLED
        assert cancelled.cancel_reason == "Walked out"
        table = db_session.query(DiningTable).filter_by(id=pos.table.id).first()
        assert table.status == TABLE_STATUS_AVAILABLE
        assert db_session.query(InventoryMovement).count() == 0

    def test_paid_order_cannot_be_cancelled(self, db_session, pos, make_order):
        order = make_order()
        _settle(pos, order)

        with pytest.raises(AlreadySettledError):
            cancel_order(business_unit_id=pos.bu.id, order_id=order.id)

    def test_other_business_unit_order_not_found(self, db_session, pos, make_order):
        order = make_order()

        with pytest.raises(OrderNotFoundError):
            cancel_order(business_unit_id=pos.bu.id + 1, order_id=order.id)
