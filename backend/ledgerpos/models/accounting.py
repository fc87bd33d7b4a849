from __future__ import annotations

from ..extensions import db
from ledgerpos.time_utils import to_utc_z, to_iso_date


class GlAccount(db.Model):
    """General ledger account (chart of accounts entry) for one business unit."""
    __tablename__ = "gl_accounts"
    __table_args__ = (
        db.UniqueConstraint("business_unit_id", "account_code", name="uq_gl_accounts_bu_code"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    business_unit_id = db.Column(db.Integer, db.ForeignKey("business_units.id"), nullable=False, index=True)

    account_code = db.Column(db.String(32), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    # ASSET, LIABILITY, EQUITY, REVENUE, EXPENSE
    account_type = db.Column(db.String(16), nullable=False)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<GlAccount id={self.id} code={self.account_code!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_unit_id": self.business_unit_id,
            "account_code": self.account_code,
            "name": self.name,
            "account_type": self.account_type,
            "is_active": self.is_active,
        }


class MenuItemGlMapping(db.Model):
    """
    Item-specific accounts. Each role is optional; missing roles fall back to
    the POS configuration defaults (sales) or are omitted (COGS/inventory).
    """
    __tablename__ = "menu_item_gl_mappings"
    __table_args__ = (
        db.UniqueConstraint("menu_item_id", "business_unit_id", name="uq_menu_item_gl_mappings_item_bu"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    menu_item_id = db.Column(db.Integer, db.ForeignKey("menu_items.id"), nullable=False, index=True)
    business_unit_id = db.Column(db.Integer, db.ForeignKey("business_units.id"), nullable=False, index=True)

    sales_account_id = db.Column(db.Integer, db.ForeignKey("gl_accounts.id"), nullable=True)
    cogs_account_id = db.Column(db.Integer, db.ForeignKey("gl_accounts.id"), nullable=True)
    inventory_account_id = db.Column(db.Integer, db.ForeignKey("gl_accounts.id"), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "menu_item_id": self.menu_item_id,
            "business_unit_id": self.business_unit_id,
            "sales_account_id": self.sales_account_id,
            "cogs_account_id": self.cogs_account_id,
            "inventory_account_id": self.inventory_account_id,
        }


class PaymentMethodGlMapping(db.Model):
    """Cash/bank account receiving a payment method's takings."""
    __tablename__ = "payment_method_gl_mappings"
    __table_args__ = (
        db.UniqueConstraint("payment_method_id", "business_unit_id", name="uq_payment_method_gl_mappings_pm_bu"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    payment_method_id = db.Column(db.Integer, db.ForeignKey("payment_methods.id"), nullable=False, index=True)
    business_unit_id = db.Column(db.Integer, db.ForeignKey("business_units.id"), nullable=False, index=True)
    gl_account_id = db.Column(db.Integer, db.ForeignKey("gl_accounts.id"), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "payment_method_id": self.payment_method_id,
            "business_unit_id": self.business_unit_id,
            "gl_account_id": self.gl_account_id,
        }


PERIOD_STATUS_OPEN = "OPEN"
PERIOD_STATUS_CLOSED = "CLOSED"


class AccountingPeriod(db.Model):
    """Date range in which postings are permitted while status is OPEN."""
    __tablename__ = "accounting_periods"
    __table_args__ = (
        db.Index("ix_accounting_periods_bu_dates", "business_unit_id", "start_date", "end_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    business_unit_id = db.Column(db.Integer, db.ForeignKey("business_units.id"), nullable=False, index=True)
    name = db.Column(db.String(64), nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    status = db.Column(db.String(16), nullable=False, default=PERIOD_STATUS_OPEN)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_unit_id": self.business_unit_id,
            "name": self.name,
            "start_date": to_iso_date(self.start_date),
            "end_date": to_iso_date(self.end_date),
            "status": self.status,
        }


DOCUMENT_TYPE_JOURNAL_ENTRY = "JOURNAL_ENTRY"


class NumberingSeries(db.Model):
    """
    Per-document-type counter.

    WHY: Document numbers must be sequential and collision-free under
    concurrent postings. next_number is only ever advanced by a single
    UPDATE ... SET next_number = next_number + 1 statement.
    """
    __tablename__ = "numbering_series"
    __table_args__ = (
        db.UniqueConstraint("business_unit_id", "document_type", "prefix", name="uq_numbering_series_bu_type_prefix"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    business_unit_id = db.Column(db.Integer, db.ForeignKey("business_units.id"), nullable=False, index=True)
    document_type = db.Column(db.String(32), nullable=False, index=True)
    name = db.Column(db.String(64), nullable=True)
    prefix = db.Column(db.String(16), nullable=False)
    next_number = db.Column(db.Integer, nullable=False, default=1)
    pad = db.Column(db.Integer, nullable=False, default=6)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_unit_id": self.business_unit_id,
            "document_type": self.document_type,
            "name": self.name,
            "prefix": self.prefix,
            "next_number": self.next_number,
            "pad": self.pad,
            "updated_at": to_utc_z(self.updated_at),
        }


class JournalEntry(db.Model):
    """
    Journal header.

    Created once per posted order; never mutated afterwards except to set
    is_posted and the posting actor.
    """
    __tablename__ = "journal_entries"
    __table_args__ = (
        db.UniqueConstraint("business_unit_id", "document_number", name="uq_journal_entries_bu_docnum"),
        db.UniqueConstraint("order_id", name="uq_journal_entries_order"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    business_unit_id = db.Column(db.Integer, db.ForeignKey("business_units.id"), nullable=False, index=True)

    document_number = db.Column(db.String(64), nullable=False)
    document_date = db.Column(db.Date, nullable=False)
    posting_date = db.Column(db.Date, nullable=False, index=True)
    accounting_period_id = db.Column(db.Integer, db.ForeignKey("accounting_periods.id"), nullable=False)

    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=True)
    remarks = db.Column(db.String(255), nullable=True)

    is_posted = db.Column(db.Boolean, nullable=False, default=False)
    posted_by_user_id = db.Column(db.Integer, nullable=True)
    posted_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    lines = db.relationship("JournalEntryLine", back_populates="journal_entry", order_by="JournalEntryLine.id", lazy="selectin")
    accounting_period = db.relationship("AccountingPeriod")
    order = db.relationship("Order", backref=db.backref("journal_entry", uselist=False, lazy=True))

    @property
    def total_debit_cents(self) -> int:
        total = 0
        for line in self.lines:
            total += line.debit_cents or 0
        return total

    @property
    def total_credit_cents(self) -> int:
        total = 0
        for line in self.lines:
            total += line.credit_cents or 0
        return total

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_unit_id": self.business_unit_id,
            "document_number": self.document_number,
            "document_date": to_iso_date(self.document_date),
            "posting_date": to_iso_date(self.posting_date),
            "accounting_period_id": self.accounting_period_id,
            "order_id": self.order_id,
            "remarks": self.remarks,
            "is_posted": self.is_posted,
            "posted_by_user_id": self.posted_by_user_id,
            "posted_at": to_utc_z(self.posted_at),
            "total_debit_cents": self.total_debit_cents,
            "total_credit_cents": self.total_credit_cents,
            "lines": [line.to_dict() for line in self.lines],
        }


class JournalEntryLine(db.Model):
    """One side of a journal entry: exactly one of debit_cents / credit_cents is set."""
    __tablename__ = "journal_entry_lines"
    __table_args__ = (
        db.CheckConstraint(
            "(debit_cents IS NULL AND credit_cents IS NOT NULL) OR (debit_cents IS NOT NULL AND credit_cents IS NULL)",
            name="ck_journal_entry_lines_one_side",
        ),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    journal_entry_id = db.Column(db.Integer, db.ForeignKey("journal_entries.id"), nullable=False, index=True)
    gl_account_id = db.Column(db.Integer, db.ForeignKey("gl_accounts.id"), nullable=False, index=True)

    debit_cents = db.Column(db.Integer, nullable=True)
    credit_cents = db.Column(db.Integer, nullable=True)
    description = db.Column(db.String(255), nullable=True)

    journal_entry = db.relationship("JournalEntry", back_populates="lines")
    gl_account = db.relationship("GlAccount", lazy="joined")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "gl_account_id": self.gl_account_id,
            "account_code": self.gl_account.account_code if self.gl_account else None,
            "account_name": self.gl_account.name if self.gl_account else None,
            "debit_cents": self.debit_cents or 0,
            "credit_cents": self.credit_cents or 0,
            "description": self.description,
        }


POSTING_STATUS_PENDING = "PENDING"
POSTING_STATUS_POSTED = "POSTED"
POSTING_STATUS_FAILED = "FAILED"


class LedgerPostingRequest(db.Model):
    """
    Outbox row: GL posting owed for a settled order.

    Written in the same transaction as the payment; consumed by the posting
    command after commit. One row per order, retried until POSTED.
    """
    __tablename__ = "ledger_posting_requests"
    __table_args__ = (
        db.UniqueConstraint("order_id", name="uq_ledger_posting_requests_order"),
        db.Index("ix_ledger_posting_requests_status", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False)
    business_unit_id = db.Column(db.Integer, db.ForeignKey("business_units.id"), nullable=False, index=True)

    status = db.Column(db.String(16), nullable=False, default=POSTING_STATUS_PENDING)
    attempts = db.Column(db.Integer, nullable=False, default=0)
    last_error = db.Column(db.String(500), nullable=True)
    journal_entry_id = db.Column(db.Integer, db.ForeignKey("journal_entries.id"), nullable=True)

    requested_by_user_id = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)

    order = db.relationship("Order", backref=db.backref("posting_request", uselist=False, lazy=True))

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def requires_manual_posting(self) -> bool:
        return self.status == POSTING_STATUS_FAILED

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "business_unit_id": self.business_unit_id,
            "status": self.status,
            "attempts": self.attempts,
            "last_error": self.last_error,
            "journal_entry_id": self.journal_entry_id,
            "requires_manual_posting": self.requires_manual_posting,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
