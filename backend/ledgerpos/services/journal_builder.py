# Overview: Service-layer operations for building order journal lines; encapsulates the double-entry posting rules.

"""
Ledger Entry Builder

WHY: A settled order becomes one balanced journal entry. This module decides
which accounts are debited and credited and for how much; it does not save
anything.

Posting rules for a paid order:
- Debit  cash/bank (per payment method)     amount received net of change
- Credit sales (per sales account)          line totals
- Debit  discount (when an account resolves) discount; otherwise the
                                            discount is netted against sales
- Credit tax payable                        tax, when tax > 0
- Debit  COGS / Credit inventory            standard cost, per line, only
                                            when both accounts resolve

Every line carries exactly one side. Zero-amount lines are dropped.
"""

from __future__ import annotations

from dataclasses import dataclass

from .account_resolver import AccountResolver, require_account
from .exceptions import LedgerImbalanceError
from .settlement_calculator import lines_from_order


@dataclass(frozen=True)
class JournalLineDraft:
    gl_account_id: int
    debit_cents: int | None
    credit_cents: int | None
    description: str

    @classmethod
    def debit(cls, gl_account_id: int, amount_cents: int, description: str) -> "JournalLineDraft":
        return cls(gl_account_id, amount_cents, None, description)

    @classmethod
    def credit(cls, gl_account_id: int, amount_cents: int, description: str) -> "JournalLineDraft":
        return cls(gl_account_id, None, amount_cents, description)

    @property
    def amount_cents(self) -> int:
        return self.debit_cents if self.debit_cents is not None else self.credit_cents

    def to_dict(self) -> dict:
        return {
            "gl_account_id": self.gl_account_id,
            "debit_cents": self.debit_cents or 0,
            "credit_cents": self.credit_cents or 0,
            "description": self.description,
        }


def allocate_proportionally(total_cents: int, weights: dict) -> dict:
    """
    Split total_cents across keys in proportion to weights.

    Largest-remainder method: shares are floored, then the leftover cents go
    one at a time to the keys with the largest fractional remainder (ties to
    the larger weight). No share exceeds its own weight while total_cents is
    within the weight sum. Shares always sum to total_cents.
    """
    if not weights or total_cents == 0:
        return {key: 0 for key in weights}

    weight_sum = 0
    for weight in weights.values():
        weight_sum += weight
    if weight_sum <= 0:
        raise LedgerImbalanceError(
            "Cannot allocate against a zero base",
            details={"total_cents": total_cents},
        )

    shares = {}
    remainders = {}
    allocated = 0
    for key, weight in weights.items():
        share, remainder = divmod(total_cents * weight, weight_sum)
        shares[key] = share
        remainders[key] = remainder
        allocated += share

    leftover = total_cents - allocated
    order = sorted(weights, key=lambda k: (remainders[k], weights[k]), reverse=True)
    while leftover > 0:
        progressed = False
        for key in order:
            if leftover == 0:
                break
            if shares[key] >= weights[key]:
                continue
            shares[key] += 1
            leftover -= 1
            progressed = True
        if not progressed:
            raise LedgerImbalanceError(
                "Allocation exceeds the available base",
                details={"total_cents": total_cents, "weight_sum": weight_sum},
            )
    return shares


def assert_balanced(lines: list[JournalLineDraft]) -> None:
    """
    Raise LedgerImbalanceError unless debits equal credits.

    Amounts are integer cents, so equality is exact. Also rejects lines that
    carry both sides, neither side, or a negative amount.
    """
    total_debit = 0
    total_credit = 0
    for line in lines:
        has_debit = line.debit_cents is not None
        has_credit = line.credit_cents is not None
        if has_debit == has_credit:
            raise LedgerImbalanceError(
                "Journal line must carry exactly one of debit or credit",
                details={"line": line.to_dict()},
            )
        if line.amount_cents < 0:
            raise LedgerImbalanceError(
                "Journal line amount cannot be negative",
                details={"line": line.to_dict()},
            )
        if has_debit:
            total_debit += line.debit_cents
        else:
            total_credit += line.credit_cents

    if total_debit != total_credit:
        raise LedgerImbalanceError(
            "Journal entry is not balanced",
            details={
                "total_debit_cents": total_debit,
                "total_credit_cents": total_credit,
                "difference_cents": total_debit - total_credit,
            },
        )


def build_order_journal_lines(
    order,
    payments: list,
    resolver: AccountResolver,
) -> list[JournalLineDraft]:
    """
    Build the balanced journal lines for a paid order.

    Raises:
        UnresolvedAccountError: sales, cash, or (when tax > 0) tax has no account
        LedgerImbalanceError: the resulting lines do not balance
    """
    lines: list[JournalLineDraft] = []
    label = f"Order {order.id}"

    # Cash / bank
    for payment in payments:
        cash_account_id = require_account(
            resolver.cash(payment.payment_method_id),
            payment_method_id=payment.payment_method_id,
        )
        lines.append(
            JournalLineDraft.debit(
                cash_account_id,
                payment.amount_received_cents,
                f"{label} - Payment",
            )
        )

    # Sales, grouped per account in line order
    line_totals = {}
    for calc_line in lines_from_order(order):
        line_totals[calc_line.line_id] = calc_line.line_total_cents

    sales_by_account: dict[int, int] = {}
    for item in order.items:
        sales_account_id = require_account(
            resolver.sales(item.menu_item_id),
            menu_item_id=item.menu_item_id,
        )
        sales_by_account[sales_account_id] = sales_by_account.get(sales_account_id, 0) + line_totals[item.id]

    discount_cents = order.discount_cents or 0
    if discount_cents > 0:
        discount_resolution = resolver.discount(order.discount)
        if discount_resolution.is_resolved:
            lines.append(
                JournalLineDraft.debit(
                    discount_resolution.account_id,
                    discount_cents,
                    f"{label} - Discount",
                )
            )
        else:
            shares = allocate_proportionally(discount_cents, sales_by_account)
            for account_id, share in shares.items():
                sales_by_account[account_id] -= share

    for account_id, amount in sales_by_account.items():
        lines.append(JournalLineDraft.credit(account_id, amount, f"{label} - Sales"))

    # Tax
    tax_cents = order.tax_cents or 0
    if tax_cents > 0:
        tax_account_id = require_account(resolver.tax())
        lines.append(JournalLineDraft.credit(tax_account_id, tax_cents, f"{label} - Sales tax"))

    # COGS
    for item in order.items:
        cost = item.cogs_cents or 0
        if cost <= 0:
            continue
        cogs = resolver.cogs(item.menu_item_id)
        inventory = resolver.inventory(item.menu_item_id)
        if not (cogs.is_resolved and inventory.is_resolved):
            continue
        item_name = item.menu_item.name if item.menu_item else f"item {item.menu_item_id}"
        lines.append(JournalLineDraft.debit(cogs.account_id, cost, f"{label} - COGS {item_name}"))
        lines.append(JournalLineDraft.credit(inventory.account_id, cost, f"{label} - Inventory {item_name}"))

    lines = [line for line in lines if line.amount_cents]
    assert_balanced(lines)
    return lines
