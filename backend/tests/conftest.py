"""
Pytest fixtures for LedgerPOS backend tests.

Provides test database setup, a fully configured business unit (accounts,
POS configuration, open period, numbering series, recipe and stock) and an
order factory.
"""

from datetime import timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest
from ledgerpos import create_app
from ledgerpos.extensions import db
from ledgerpos.models import (
    AccountingPeriod,
    BusinessUnit,
    DiningTable,
    GlAccount,
    InventoryItem,
    InventoryLocation,
    InventoryStock,
    MenuItem,
    MenuItemGlMapping,
    NumberingSeries,
    Order,
    OrderItem,
    OrderItemModifier,
    PaymentMethod,
    PosConfiguration,
    Recipe,
    RecipeItem,
)
from ledgerpos.models.accounting import DOCUMENT_TYPE_JOURNAL_ENTRY
from ledgerpos.models.orders import ORDER_STATUS_OPEN, TABLE_STATUS_OCCUPIED
from ledgerpos.time_utils import utctoday


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'LEDGER_AUTO_POST_ENABLED': True,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def _account(db_session, bu, code, name, account_type):
    account = GlAccount(business_unit_id=bu.id, account_code=code, name=name, account_type=account_type)
    db_session.add(account)
    db_session.flush()
    return account


@pytest.fixture(scope='function')
def pos(db_session):
    """
    Business unit ready to settle and post:

    - 12% tax, auto-post on, default cash/sales/tax accounts (no default
      discount account)
    - open period around today, JE numbering series
    - "Burger" (100.00) whose recipe uses 2 BEEF per unit from the default
      location; BEEF stock 5, standard cost 1.50
    - Burger mapped to COGS/inventory accounts; sales comes from the default
    """
    bu = BusinessUnit(name="Harbor Grill", code="HG", tax_rate_bps=1200)
    db_session.add(bu)
    db_session.flush()

    cash = _account(db_session, bu, "1000", "Cash on Hand", "ASSET")
    inventory_asset = _account(db_session, bu, "1200", "Inventory", "ASSET")
    tax_payable = _account(db_session, bu, "2100", "Sales Tax Payable", "LIABILITY")
    sales = _account(db_session, bu, "4000", "Food Sales", "REVENUE")
    discounts = _account(db_session, bu, "4100", "Sales Discounts", "REVENUE")
    cogs = _account(db_session, bu, "5000", "Cost of Goods Sold", "EXPENSE")

    location = InventoryLocation(business_unit_id=bu.id, name="Kitchen")
    db_session.add(location)

    series = NumberingSeries(
        business_unit_id=bu.id,
        document_type=DOCUMENT_TYPE_JOURNAL_ENTRY,
        name="Journal Entries",
        prefix="JE",
        next_number=1,
        pad=6,
    )
    db_session.add(series)
    db_session.flush()

    config = PosConfiguration(
        business_unit_id=bu.id,
        auto_post_to_gl=True,
        default_cash_account_id=cash.id,
        default_sales_account_id=sales.id,
        default_tax_account_id=tax_payable.id,
        journal_entry_series_id=series.id,
        default_location_id=location.id,
    )
    db_session.add(config)

    today = utctoday()
    period = AccountingPeriod(
        business_unit_id=bu.id,
        name="Current",
        start_date=today - timedelta(days=15),
        end_date=today + timedelta(days=15),
        status="OPEN",
    )
    db_session.add(period)

    beef = InventoryItem(business_unit_id=bu.id, sku="BEEF", name="Beef patty", uom="EA", standard_cost_cents=150)
    db_session.add(beef)
    db_session.flush()

    stock = InventoryStock(inventory_item_id=beef.id, location_id=location.id, quantity_on_hand=Decimal("5"))
    db_session.add(stock)

    burger = MenuItem(business_unit_id=bu.id, name="Burger", price_cents=10000)
    db_session.add(burger)
    db_session.flush()

    recipe = Recipe(menu_item_id=burger.id, name="Burger")
    db_session.add(recipe)
    db_session.flush()
    db_session.add(RecipeItem(recipe_id=recipe.id, inventory_item_id=beef.id, quantity_used=Decimal("2")))

    db_session.add(
        MenuItemGlMapping(
            menu_item_id=burger.id,
            business_unit_id=bu.id,
            cogs_account_id=cogs.id,
            inventory_account_id=inventory_asset.id,
        )
    )

    cash_method = PaymentMethod(business_unit_id=bu.id, name="Cash", is_active=True)
    db_session.add(cash_method)

    table = DiningTable(business_unit_id=bu.id, name="T1", status=TABLE_STATUS_OCCUPIED)
    db_session.add(table)

    db_session.commit()

    return SimpleNamespace(
        bu=bu,
        config=config,
        period=period,
        series=series,
        location=location,
        beef=beef,
        stock=stock,
        burger=burger,
        recipe=recipe,
        cash_method=cash_method,
        table=table,
        accounts=SimpleNamespace(
            cash=cash,
            inventory=inventory_asset,
            tax=tax_payable,
            sales=sales,
            discounts=discounts,
            cogs=cogs,
        ),
    )


@pytest.fixture(scope='function')
def make_order(db_session, pos):
    """Factory: create an OPEN order on table T1 with one line per (menu_item, qty)."""
    def _make(lines=None, *, status=ORDER_STATUS_OPEN, modifiers=None, table=True):
        if lines is None:
            lines = [(pos.burger, 2)]
        order = Order(
            business_unit_id=pos.bu.id,
            table_id=pos.table.id if table else None,
            status=status,
            created_by_user_id=7,
        )
        db_session.add(order)
        db_session.flush()

        for menu_item, quantity in lines:
            item = OrderItem(
                order_id=order.id,
                menu_item_id=menu_item.id,
                quantity=quantity,
                price_at_sale_cents=menu_item.price_cents,
            )
            db_session.add(item)
            db_session.flush()
            for name, delta in (modifiers or []):
                db_session.add(OrderItemModifier(order_item_id=item.id, name=name, price_change_cents=delta))

        db_session.commit()
        return order

    return _make


@pytest.fixture(scope='function')
def headers(pos):
    """Actor and business-unit headers for API calls."""
    return {'X-User-Id': '7', 'X-Business-Unit-Id': str(pos.bu.id)}
