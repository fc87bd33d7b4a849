"""Initial POS settlement, inventory and general ledger schema

Revision ID: 20261001_initial
Revises:
Create Date: 2026-10-01
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamp(name, nullable=False):
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=nullable)


def upgrade():
    # ------------------------------------------------------------------
    # Tenancy and chart of accounts
    # ------------------------------------------------------------------
    op.create_table(
        "business_units",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("code", sa.String(32), nullable=True),
        sa.Column("tax_rate_bps", sa.Integer(), nullable=True, server_default=sa.text("1200")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("business_units", schema=None) as batch_op:
        batch_op.create_index("ix_business_units_code", ["code"], unique=True)
        batch_op.create_index("ix_business_units_is_active", ["is_active"], unique=False)

    op.create_table(
        "gl_accounts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("business_unit_id", sa.Integer(), nullable=False),
        sa.Column("account_code", sa.String(32), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("account_type", sa.String(16), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.ForeignKeyConstraint(["business_unit_id"], ["business_units.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("business_unit_id", "account_code", name="uq_gl_accounts_bu_code"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("gl_accounts", schema=None) as batch_op:
        batch_op.create_index("ix_gl_accounts_business_unit_id", ["business_unit_id"], unique=False)

    op.create_table(
        "numbering_series",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("business_unit_id", sa.Integer(), nullable=False),
        sa.Column("document_type", sa.String(32), nullable=False),
        sa.Column("name", sa.String(64), nullable=True),
        sa.Column("prefix", sa.String(16), nullable=False),
        sa.Column("next_number", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("pad", sa.Integer(), nullable=False, server_default=sa.text("6")),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["business_unit_id"], ["business_units.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("business_unit_id", "document_type", "prefix", name="uq_numbering_series_bu_type_prefix"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("numbering_series", schema=None) as batch_op:
        batch_op.create_index("ix_numbering_series_business_unit_id", ["business_unit_id"], unique=False)
        batch_op.create_index("ix_numbering_series_document_type", ["document_type"], unique=False)

    op.create_table(
        "accounting_periods",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("business_unit_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(64), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="OPEN"),
        sa.ForeignKeyConstraint(["business_unit_id"], ["business_units.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("accounting_periods", schema=None) as batch_op:
        batch_op.create_index("ix_accounting_periods_business_unit_id", ["business_unit_id"], unique=False)
        batch_op.create_index("ix_accounting_periods_bu_dates", ["business_unit_id", "start_date", "end_date"], unique=False)

    # ------------------------------------------------------------------
    # Inventory
    # ------------------------------------------------------------------
    op.create_table(
        "inventory_locations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("business_unit_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.ForeignKeyConstraint(["business_unit_id"], ["business_units.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("inventory_locations", schema=None) as batch_op:
        batch_op.create_index("ix_inventory_locations_business_unit_id", ["business_unit_id"], unique=False)

    op.create_table(
        "inventory_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("business_unit_id", sa.Integer(), nullable=False),
        sa.Column("sku", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("uom", sa.String(16), nullable=False, server_default="EA"),
        sa.Column("standard_cost_cents", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["business_unit_id"], ["business_units.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("business_unit_id", "sku", name="uq_inventory_items_bu_sku"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("inventory_items", schema=None) as batch_op:
        batch_op.create_index("ix_inventory_items_business_unit_id", ["business_unit_id"], unique=False)

    op.create_table(
        "inventory_stocks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("inventory_item_id", sa.Integer(), nullable=False),
        sa.Column("location_id", sa.Integer(), nullable=False),
        sa.Column("quantity_on_hand", sa.Numeric(18, 4), nullable=False, server_default=sa.text("0")),
        sa.Column("reorder_point", sa.Numeric(18, 4), nullable=True),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["inventory_item_id"], ["inventory_items.id"]),
        sa.ForeignKeyConstraint(["location_id"], ["inventory_locations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("inventory_item_id", "location_id", name="uq_inventory_stocks_item_location"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("inventory_stocks", schema=None) as batch_op:
        batch_op.create_index("ix_inventory_stocks_inventory_item_id", ["inventory_item_id"], unique=False)
        batch_op.create_index("ix_inventory_stocks_location_id", ["location_id"], unique=False)

    op.create_table(
        "pos_configurations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("business_unit_id", sa.Integer(), nullable=False),
        sa.Column("auto_post_to_gl", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("default_cash_account_id", sa.Integer(), nullable=True),
        sa.Column("default_sales_account_id", sa.Integer(), nullable=True),
        sa.Column("default_tax_account_id", sa.Integer(), nullable=True),
        sa.Column("default_discount_account_id", sa.Integer(), nullable=True),
        sa.Column("journal_entry_series_id", sa.Integer(), nullable=True),
        sa.Column("default_location_id", sa.Integer(), nullable=True),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["business_unit_id"], ["business_units.id"]),
        sa.ForeignKeyConstraint(["default_cash_account_id"], ["gl_accounts.id"]),
        sa.ForeignKeyConstraint(["default_sales_account_id"], ["gl_accounts.id"]),
        sa.ForeignKeyConstraint(["default_tax_account_id"], ["gl_accounts.id"]),
        sa.ForeignKeyConstraint(["default_discount_account_id"], ["gl_accounts.id"]),
        sa.ForeignKeyConstraint(["journal_entry_series_id"], ["numbering_series.id"]),
        sa.ForeignKeyConstraint(["default_location_id"], ["inventory_locations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("pos_configurations", schema=None) as batch_op:
        batch_op.create_index("ix_pos_configurations_business_unit_id", ["business_unit_id"], unique=True)

    # ------------------------------------------------------------------
    # Menu and recipes
    # ------------------------------------------------------------------
    op.create_table(
        "menu_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("business_unit_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("price_cents", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["business_unit_id"], ["business_units.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("menu_items", schema=None) as batch_op:
        batch_op.create_index("ix_menu_items_business_unit_id", ["business_unit_id"], unique=False)
        batch_op.create_index("ix_menu_items_bu_active", ["business_unit_id", "is_active"], unique=False)

    op.create_table(
        "recipes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("menu_item_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.ForeignKeyConstraint(["menu_item_id"], ["menu_items.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("menu_item_id"),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "recipe_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("recipe_id", sa.Integer(), nullable=False),
        sa.Column("inventory_item_id", sa.Integer(), nullable=False),
        sa.Column("location_id", sa.Integer(), nullable=True),
        sa.Column("quantity_used", sa.Numeric(18, 4), nullable=False),
        sa.ForeignKeyConstraint(["recipe_id"], ["recipes.id"]),
        sa.ForeignKeyConstraint(["inventory_item_id"], ["inventory_items.id"]),
        sa.ForeignKeyConstraint(["location_id"], ["inventory_locations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("recipe_id", "inventory_item_id", name="uq_recipe_items_recipe_item"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("recipe_items", schema=None) as batch_op:
        batch_op.create_index("ix_recipe_items_recipe_id", ["recipe_id"], unique=False)

    # ------------------------------------------------------------------
    # Orders and payments
    # ------------------------------------------------------------------
    op.create_table(
        "pos_tables",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("business_unit_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(64), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="AVAILABLE"),
        sa.Column("version_id", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.ForeignKeyConstraint(["business_unit_id"], ["business_units.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("pos_tables", schema=None) as batch_op:
        batch_op.create_index("ix_pos_tables_business_unit_id", ["business_unit_id"], unique=False)

    op.create_table(
        "payment_methods",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("business_unit_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(64), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.ForeignKeyConstraint(["business_unit_id"], ["business_units.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("payment_methods", schema=None) as batch_op:
        batch_op.create_index("ix_payment_methods_business_unit_id", ["business_unit_id"], unique=False)
        batch_op.create_index("ix_payment_methods_is_active", ["is_active"], unique=False)

    op.create_table(
        "discounts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("business_unit_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("type", sa.String(16), nullable=False, server_default="FIXED"),
        sa.Column("value", sa.Integer(), nullable=False),
        sa.Column("gl_account_id", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.ForeignKeyConstraint(["business_unit_id"], ["business_units.id"]),
        sa.ForeignKeyConstraint(["gl_account_id"], ["gl_accounts.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("discounts", schema=None) as batch_op:
        batch_op.create_index("ix_discounts_business_unit_id", ["business_unit_id"], unique=False)

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("business_unit_id", sa.Integer(), nullable=False),
        sa.Column("table_id", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="OPEN"),
        sa.Column("subtotal_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("discount_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("tax_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("amount_paid_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("change_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_paid", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("discount_id", sa.Integer(), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancel_reason", sa.String(255), nullable=True),
        sa.Column("created_by_user_id", sa.Integer(), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["business_unit_id"], ["business_units.id"]),
        sa.ForeignKeyConstraint(["table_id"], ["pos_tables.id"]),
        sa.ForeignKeyConstraint(["discount_id"], ["discounts.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("orders", schema=None) as batch_op:
        batch_op.create_index("ix_orders_business_unit_id", ["business_unit_id"], unique=False)
        batch_op.create_index("ix_orders_table_id", ["table_id"], unique=False)
        batch_op.create_index("ix_orders_status", ["status"], unique=False)
        batch_op.create_index("ix_orders_bu_status", ["business_unit_id", "status"], unique=False)

    op.create_table(
        "order_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("order_id", sa.Integer(), nullable=False),
        sa.Column("menu_item_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price_at_sale_cents", sa.Integer(), nullable=False),
        sa.Column("cogs_cents", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"]),
        sa.ForeignKeyConstraint(["menu_item_id"], ["menu_items.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("order_items", schema=None) as batch_op:
        batch_op.create_index("ix_order_items_order_id", ["order_id"], unique=False)

    op.create_table(
        "order_item_modifiers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("order_item_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("price_change_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.ForeignKeyConstraint(["order_item_id"], ["order_items.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("order_item_modifiers", schema=None) as batch_op:
        batch_op.create_index("ix_order_item_modifiers_order_item_id", ["order_item_id"], unique=False)

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("order_id", sa.Integer(), nullable=False),
        sa.Column("payment_method_id", sa.Integer(), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("change_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("processed_by_user_id", sa.Integer(), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"]),
        sa.ForeignKeyConstraint(["payment_method_id"], ["payment_methods.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("order_id", name="uq_payments_order"),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "inventory_movements",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("inventory_stock_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("quantity", sa.Numeric(18, 4), nullable=False),
        sa.Column("reason", sa.String(255), nullable=True),
        sa.Column("order_id", sa.Integer(), nullable=True),
        sa.Column("created_by_user_id", sa.Integer(), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["inventory_stock_id"], ["inventory_stocks.id"]),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("inventory_movements", schema=None) as batch_op:
        batch_op.create_index("ix_inventory_movements_inventory_stock_id", ["inventory_stock_id"], unique=False)
        batch_op.create_index("ix_inventory_movements_type", ["type"], unique=False)
        batch_op.create_index("ix_inventory_movements_order", ["order_id"], unique=False)

    # ------------------------------------------------------------------
    # Account mappings and journal
    # ------------------------------------------------------------------
    op.create_table(
        "menu_item_gl_mappings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("menu_item_id", sa.Integer(), nullable=False),
        sa.Column("business_unit_id", sa.Integer(), nullable=False),
        sa.Column("sales_account_id", sa.Integer(), nullable=True),
        sa.Column("cogs_account_id", sa.Integer(), nullable=True),
        sa.Column("inventory_account_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["menu_item_id"], ["menu_items.id"]),
        sa.ForeignKeyConstraint(["business_unit_id"], ["business_units.id"]),
        sa.ForeignKeyConstraint(["sales_account_id"], ["gl_accounts.id"]),
        sa.ForeignKeyConstraint(["cogs_account_id"], ["gl_accounts.id"]),
        sa.ForeignKeyConstraint(["inventory_account_id"], ["gl_accounts.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("menu_item_id", "business_unit_id", name="uq_menu_item_gl_mappings_item_bu"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("menu_item_gl_mappings", schema=None) as batch_op:
        batch_op.create_index("ix_menu_item_gl_mappings_menu_item_id", ["menu_item_id"], unique=False)
        batch_op.create_index("ix_menu_item_gl_mappings_business_unit_id", ["business_unit_id"], unique=False)

    op.create_table(
        "payment_method_gl_mappings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("payment_method_id", sa.Integer(), nullable=False),
        sa.Column("business_unit_id", sa.Integer(), nullable=False),
        sa.Column("gl_account_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["payment_method_id"], ["payment_methods.id"]),
        sa.ForeignKeyConstraint(["business_unit_id"], ["business_units.id"]),
        sa.ForeignKeyConstraint(["gl_account_id"], ["gl_accounts.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("payment_method_id", "business_unit_id", name="uq_payment_method_gl_mappings_pm_bu"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("payment_method_gl_mappings", schema=None) as batch_op:
        batch_op.create_index("ix_payment_method_gl_mappings_payment_method_id", ["payment_method_id"], unique=False)
        batch_op.create_index("ix_payment_method_gl_mappings_business_unit_id", ["business_unit_id"], unique=False)

    op.create_table(
        "journal_entries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("business_unit_id", sa.Integer(), nullable=False),
        sa.Column("document_number", sa.String(64), nullable=False),
        sa.Column("document_date", sa.Date(), nullable=False),
        sa.Column("posting_date", sa.Date(), nullable=False),
        sa.Column("accounting_period_id", sa.Integer(), nullable=False),
        sa.Column("order_id", sa.Integer(), nullable=True),
        sa.Column("remarks", sa.String(255), nullable=True),
        sa.Column("is_posted", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("posted_by_user_id", sa.Integer(), nullable=True),
        sa.Column("posted_at", sa.DateTime(timezone=True), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["business_unit_id"], ["business_units.id"]),
        sa.ForeignKeyConstraint(["accounting_period_id"], ["accounting_periods.id"]),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("business_unit_id", "document_number", name="uq_journal_entries_bu_docnum"),
        sa.UniqueConstraint("order_id", name="uq_journal_entries_order"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("journal_entries", schema=None) as batch_op:
        batch_op.create_index("ix_journal_entries_business_unit_id", ["business_unit_id"], unique=False)
        batch_op.create_index("ix_journal_entries_posting_date", ["posting_date"], unique=False)

    op.create_table(
        "journal_entry_lines",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("journal_entry_id", sa.Integer(), nullable=False),
        sa.Column("gl_account_id", sa.Integer(), nullable=False),
        sa.Column("debit_cents", sa.Integer(), nullable=True),
        sa.Column("credit_cents", sa.Integer(), nullable=True),
        sa.Column("description", sa.String(255), nullable=True),
        sa.ForeignKeyConstraint(["journal_entry_id"], ["journal_entries.id"]),
        sa.ForeignKeyConstraint(["gl_account_id"], ["gl_accounts.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "(debit_cents IS NULL AND credit_cents IS NOT NULL) OR (debit_cents IS NOT NULL AND credit_cents IS NULL)",
            name="ck_journal_entry_lines_one_side",
        ),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("journal_entry_lines", schema=None) as batch_op:
        batch_op.create_index("ix_journal_entry_lines_journal_entry_id", ["journal_entry_id"], unique=False)
        batch_op.create_index("ix_journal_entry_lines_gl_account_id", ["gl_account_id"], unique=False)


def downgrade():
    for table in [
        "journal_entry_lines",
        "journal_entries",
        "payment_method_gl_mappings",
        "menu_item_gl_mappings",
        "inventory_movements",
        "payments",
        "order_item_modifiers",
        "order_items",
        "orders",
        "discounts",
        "payment_methods",
        "pos_tables",
        "recipe_items",
        "recipes",
        "menu_items",
        "pos_configurations",
        "inventory_stocks",
        "inventory_items",
        "inventory_locations",
        "accounting_periods",
        "numbering_series",
        "gl_accounts",
        "business_units",
    ]:
        op.drop_table(table)
