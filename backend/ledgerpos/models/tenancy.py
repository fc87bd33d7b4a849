from __future__ import annotations

from ..extensions import db
from ledgerpos.time_utils import to_utc_z


class BusinessUnit(db.Model):
    """
    Business scope for every POS, inventory and accounting record.

    WHY: A single deployment serves several outlets; mappings, defaults,
    periods and numbering series are all resolved per business unit.
    """
    __tablename__ = "business_units"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    code = db.Column(db.String(32), nullable=True, unique=True, index=True)

    # Sales tax rate in basis points (1200 = 12%)
    tax_rate_bps = db.Column(db.Integer, nullable=True, default=1200)

    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<BusinessUnit id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "tax_rate_bps": self.tax_rate_bps,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }


class PosConfiguration(db.Model):
    """
    Per-business-unit POS accounting configuration.

    Holds the role-level default accounts used when an item or payment method
    has no mapping of its own, and the auto-posting switch.
    """
    __tablename__ = "pos_configurations"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    business_unit_id = db.Column(
        db.Integer, db.ForeignKey("business_units.id"), nullable=False, unique=True, index=True
    )

    auto_post_to_gl = db.Column(db.Boolean, nullable=False, default=False)

    default_cash_account_id = db.Column(db.Integer, db.ForeignKey("gl_accounts.id"), nullable=True)
    default_sales_account_id = db.Column(db.Integer, db.ForeignKey("gl_accounts.id"), nullable=True)
    default_tax_account_id = db.Column(db.Integer, db.ForeignKey("gl_accounts.id"), nullable=True)
    default_discount_account_id = db.Column(db.Integer, db.ForeignKey("gl_accounts.id"), nullable=True)

    journal_entry_series_id = db.Column(db.Integer, db.ForeignKey("numbering_series.id"), nullable=True)

    # Stock location used for recipe components without a location of their own
    default_location_id = db.Column(db.Integer, db.ForeignKey("inventory_locations.id"), nullable=True)

    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    business_unit = db.relationship(
        "BusinessUnit", backref=db.backref("pos_configuration", uselist=False, lazy=True)
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_unit_id": self.business_unit_id,
            "auto_post_to_gl": self.auto_post_to_gl,
            "default_cash_account_id": self.default_cash_account_id,
            "default_sales_account_id": self.default_sales_account_id,
            "default_tax_account_id": self.default_tax_account_id,
            "default_discount_account_id": self.default_discount_account_id,
            "journal_entry_series_id": self.journal_entry_series_id,
            "default_location_id": self.default_location_id,
            "updated_at": to_utc_z(self.updated_at),
        }
