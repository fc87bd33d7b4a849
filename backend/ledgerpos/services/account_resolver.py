# Overview: Service-layer operations for GL account mapping resolution; encapsulates business logic and database work.

"""
Account Mapping Resolver

WHY: A journal entry needs a concrete account for every role it touches
(sales, cash, tax, discount, COGS, inventory). Mappings are partial by
nature, so each lookup returns a tagged AccountResolution instead of a
nullable id and the caller decides what an UNRESOLVED role means.

Resolution order per role:
1. Specific mapping (menu item, payment method or discount) for the business
   unit. The account must exist, belong to the unit and be active.
2. Business-unit default from PosConfiguration (cash, sales, tax, discount).
3. UNRESOLVED.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..extensions import db
from ..models import GlAccount, MenuItemGlMapping, PaymentMethodGlMapping, PosConfiguration
from .exceptions import UnresolvedAccountError


RESOLVED = "RESOLVED"
USING_DEFAULT = "USING_DEFAULT"
UNRESOLVED = "UNRESOLVED"

ROLE_SALES = "sales"
ROLE_CASH = "cash"
ROLE_TAX = "tax"
ROLE_DISCOUNT = "discount"
ROLE_COGS = "cogs"
ROLE_INVENTORY = "inventory"


@dataclass(frozen=True)
class AccountResolution:
    kind: str
    account_id: int | None
    role: str

    @property
    def is_resolved(self) -> bool:
        return self.kind != UNRESOLVED

    def to_dict(self) -> dict:
        return {"kind": self.kind, "account_id": self.account_id, "role": self.role}


class AccountResolver:
    """
    Resolves accounts for one business unit.

    Account and mapping rows are cached for the resolver's lifetime; create
    one per posting.
    """

    def __init__(self, business_unit_id: int, configuration: PosConfiguration | None = None):
        self.business_unit_id = business_unit_id
        if configuration is None:
            configuration = (
                db.session.query(PosConfiguration)
                .filter_by(business_unit_id=business_unit_id)
                .first()
            )
        self.configuration = configuration
        self._accounts: dict[int, GlAccount | None] = {}
        self._menu_item_mappings: dict[int, MenuItemGlMapping | None] = {}

    # -------------------------------------------------------------------------
    # helpers
    # -------------------------------------------------------------------------

    def _usable(self, account_id: int | None) -> bool:
        if not account_id:
            return False
        if account_id not in self._accounts:
            self._accounts[account_id] = db.session.query(GlAccount).filter_by(id=account_id).first()
        account = self._accounts[account_id]
        return (
            account is not None
            and account.business_unit_id == self.business_unit_id
            and account.is_active
        )

    def _pick(self, role: str, specific_id: int | None, default_id: int | None) -> AccountResolution:
        if self._usable(specific_id):
            return AccountResolution(RESOLVED, specific_id, role)
        if self._usable(default_id):
            return AccountResolution(USING_DEFAULT, default_id, role)
        return AccountResolution(UNRESOLVED, None, role)

    def _default(self, attr: str) -> int | None:
        if self.configuration is None:
            return None
        return getattr(self.configuration, attr)

    def _menu_item_mapping(self, menu_item_id: int) -> MenuItemGlMapping | None:
        if menu_item_id not in self._menu_item_mappings:
            self._menu_item_mappings[menu_item_id] = (
                db.session.query(MenuItemGlMapping)
                .filter_by(menu_item_id=menu_item_id, business_unit_id=self.business_unit_id)
                .first()
            )
        return self._menu_item_mappings[menu_item_id]

    # -------------------------------------------------------------------------
    # roles
    # -------------------------------------------------------------------------

    def sales(self, menu_item_id: int) -> AccountResolution:
        mapping = self._menu_item_mapping(menu_item_id)
        specific = mapping.sales_account_id if mapping else None
        return self._pick(ROLE_SALES, specific, self._default("default_sales_account_id"))

    def cogs(self, menu_item_id: int) -> AccountResolution:
        mapping = self._menu_item_mapping(menu_item_id)
        return self._pick(ROLE_COGS, mapping.cogs_account_id if mapping else None, None)

    def inventory(self, menu_item_id: int) -> AccountResolution:
        mapping = self._menu_item_mapping(menu_item_id)
        return self._pick(ROLE_INVENTORY, mapping.inventory_account_id if mapping else None, None)

    def cash(self, payment_method_id: int) -> AccountResolution:
        mapping = (
            db.session.query(PaymentMethodGlMapping)
            .filter_by(payment_method_id=payment_method_id, business_unit_id=self.business_unit_id)
            .first()
        )
        specific = mapping.gl_account_id if mapping else None
        return self._pick(ROLE_CASH, specific, self._default("default_cash_account_id"))

    def tax(self) -> AccountResolution:
        return self._pick(ROLE_TAX, None, self._default("default_tax_account_id"))

    def discount(self, discount=None) -> AccountResolution:
        specific = discount.gl_account_id if discount is not None else None
        return self._pick(ROLE_DISCOUNT, specific, self._default("default_discount_account_id"))


def require_account(resolution: AccountResolution, **context) -> int:
    """Return the account id of a required role or raise UnresolvedAccountError."""
    if resolution.is_resolved:
        return resolution.account_id
    details = {"role": resolution.role}
    details.update(context)
    raise UnresolvedAccountError(
        f"No GL account configured for role '{resolution.role}'",
        details=details,
    )
