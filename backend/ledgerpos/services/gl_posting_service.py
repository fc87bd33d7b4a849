# Overview: Service-layer operations for GL posting of settled orders; encapsulates business logic and database work.

"""
GL Posting Command (settlement phase 2)

WHY: Settlement (phase 1) must succeed even when accounting master data is
incomplete. Posting therefore runs after the settlement commit, in its own
transaction, driven by the ledger_posting_requests outbox row.

DESIGN PRINCIPLES:
- Idempotent per order: an order that already has a journal entry returns
  that entry; JournalEntry.order_id is unique, so a concurrent duplicate
  loses on the constraint and re-reads the winner.
- Failure never unwinds the settlement: the posting transaction is rolled
  back, the outbox row is marked FAILED in a separate transaction, and the
  caller gets requires_manual_posting=true.
- Period check and numbering happen inside the posting transaction, so a
  failed posting consumes no document number.
"""

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..extensions import db
from ..models import (
    JournalEntry,
    JournalEntryLine,
    LedgerPostingRequest,
    MenuItem,
    MenuItemGlMapping,
    Order,
    PaymentMethod,
    PaymentMethodGlMapping,
    PosConfiguration,
)
from ..models.accounting import (
    POSTING_STATUS_FAILED,
    POSTING_STATUS_PENDING,
    POSTING_STATUS_POSTED,
)
from ..models.orders import ORDER_STATUS_PAID
from ledgerpos.time_utils import utcnow, utctoday
from .account_resolver import AccountResolver
from .concurrency import lock_for_update, run_with_retry
from .exceptions import (
    ConfigurationError,
    LedgerImbalanceError,
    LedgerPosError,
    OrderNotFoundError,
    OrderNotPostableError,
)
from .journal_builder import build_order_journal_lines
from .numbering_service import find_journal_entry_series, next_journal_entry_number
from .period_service import find_open_period, require_open_period


POSTING_OUTCOME_SKIPPED = "SKIPPED"

MAX_ERROR_LENGTH = 500


@dataclass
class PostingOutcome:
    status: str
    journal_entry_id: int | None = None
    document_number: str | None = None
    error: dict | None = None

    @property
    def posted(self) -> bool:
        return self.status == POSTING_STATUS_POSTED

    @property
    def requires_manual_posting(self) -> bool:
        return self.status == POSTING_STATUS_FAILED

    @classmethod
    def skipped(cls) -> "PostingOutcome":
        return cls(status=POSTING_OUTCOME_SKIPPED)

    @classmethod
    def from_entry(cls, entry: JournalEntry) -> "PostingOutcome":
        return cls(
            status=POSTING_STATUS_POSTED,
            journal_entry_id=entry.id,
            document_number=entry.document_number,
        )

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "posted": self.posted,
            "requires_manual_posting": self.requires_manual_posting,
            "journal_entry_id": self.journal_entry_id,
            "document_number": self.document_number,
            "error": self.error,
        }


def posting_error_payload(exc: Exception) -> dict:
    if isinstance(exc, LedgerPosError):
        return {"code": exc.code, "message": exc.message, "details": exc.details}
    if isinstance(exc, SQLAlchemyError):
        return {"code": "STORAGE_ERROR", "message": str(exc), "details": {"retryable": True}}
    return {"code": "INTERNAL_ERROR", "message": str(exc), "details": {}}


def _load_order(order_id: int, business_unit_id: int | None) -> Order:
    order = db.session.query(Order).filter_by(id=order_id).first()
    if order is None or (business_unit_id is not None and order.business_unit_id != business_unit_id):
        raise OrderNotFoundError(f"Order {order_id} not found", details={"order_id": order_id})
    return order


def _existing_entry(order_id: int) -> JournalEntry | None:
    return db.session.query(JournalEntry).filter_by(order_id=order_id).first()


def _get_or_create_request(order: Order, actor_user_id: int | None) -> LedgerPostingRequest:
    request = db.session.query(LedgerPostingRequest).filter_by(order_id=order.id).first()
    if request is None:
        request = LedgerPostingRequest(
            order_id=order.id,
            business_unit_id=order.business_unit_id,
            status=POSTING_STATUS_PENDING,
            attempts=0,
            requested_by_user_id=actor_user_id,
        )
        db.session.add(request)
        db.session.flush()
    return request


def _mark_failed(order_id: int, exc: Exception, actor_user_id: int | None) -> None:
    """Record a failed attempt on the outbox row, in its own transaction."""
    def _op():
        order = db.session.query(Order).filter_by(id=order_id).first()
        if order is None:
            return
        request = _get_or_create_request(order, actor_user_id)
        request.status = POSTING_STATUS_FAILED
        request.attempts = (request.attempts or 0) + 1
        request.last_error = str(exc)[:MAX_ERROR_LENGTH]
        db.session.commit()

    try:
        run_with_retry(_op)
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to record posting failure for order_id=%s", order_id)


def post_order_to_gl(
    order_id: int,
    *,
    business_unit_id: int | None = None,
    actor_user_id: int | None = None,
) -> PostingOutcome:
    """
    Post a paid order to the general ledger.

    Safe to call repeatedly: an already-posted order returns its existing
    journal entry. Configuration, consistency and storage failures are
    captured on the outbox row and reported in the outcome (status FAILED,
    requires_manual_posting) rather than raised.

    Raises:
        OrderNotFoundError: unknown order (or another business unit's)
        OrderNotPostableError: order is not PAID
    """
    order = _load_order(order_id, business_unit_id)
    existing = _existing_entry(order.id)
    if existing is not None:
        return PostingOutcome.from_entry(existing)
    if order.status != ORDER_STATUS_PAID:
        raise OrderNotPostableError(
            f"Order {order.id} is {order.status}; only PAID orders can be posted",
            details={"order_id": order.id, "status": order.status},
        )

    def _op() -> PostingOutcome:
        locked = lock_for_update(db.session.query(Order).filter_by(id=order_id)).first()

        entry = _existing_entry(locked.id)
        if entry is not None:
            return PostingOutcome.from_entry(entry)

        request = _get_or_create_request(locked, actor_user_id)
        configuration = (
            db.session.query(PosConfiguration)
            .filter_by(business_unit_id=locked.business_unit_id)
            .first()
        )
        resolver = AccountResolver(locked.business_unit_id, configuration)

        drafts = build_order_journal_lines(locked, list(locked.payments), resolver)

        posting_date = (locked.paid_at or utcnow()).date()
        period = require_open_period(locked.business_unit_id, posting_date)
        document_number = next_journal_entry_number(locked.business_unit_id, configuration)

        now = utcnow()
        entry = JournalEntry(
            business_unit_id=locked.business_unit_id,
            document_number=document_number,
            document_date=posting_date,
            posting_date=posting_date,
            accounting_period_id=period.id,
            order_id=locked.id,
            remarks=f"POS Order {locked.id}",
            is_posted=True,
            posted_by_user_id=actor_user_id,
            posted_at=now,
        )
        db.session.add(entry)
        db.session.flush()

        for draft in drafts:
            db.session.add(
                JournalEntryLine(
                    journal_entry_id=entry.id,
                    gl_account_id=draft.gl_account_id,
                    debit_cents=draft.debit_cents,
                    credit_cents=draft.credit_cents,
                    description=draft.description,
                )
            )

        request.status = POSTING_STATUS_POSTED
        request.attempts = (request.attempts or 0) + 1
        request.last_error = None
        request.journal_entry_id = entry.id

        db.session.commit()
        return PostingOutcome.from_entry(entry)

    try:
        outcome = run_with_retry(_op)
    except IntegrityError as exc:
        db.session.rollback()
        winner = _existing_entry(order_id)
        if winner is not None:
            return PostingOutcome.from_entry(winner)
        failure = exc
    except (ConfigurationError, LedgerImbalanceError, SQLAlchemyError) as exc:
        db.session.rollback()
        failure = exc
    else:
        current_app.logger.info(
            "Posted order to GL: order_id=%s journal_entry_id=%s document_number=%s",
            order_id,
            outcome.journal_entry_id,
            outcome.document_number,
        )
        return outcome

    if isinstance(failure, LedgerImbalanceError):
        current_app.logger.error("Ledger imbalance posting order_id=%s", order_id, exc_info=failure)
    else:
        current_app.logger.warning(
            "GL posting failed for order_id=%s (manual posting required): %s",
            order_id,
            failure,
        )
    _mark_failed(order_id, failure, actor_user_id)
    return PostingOutcome(status=POSTING_STATUS_FAILED, error=posting_error_payload(failure))


def post_pending_orders(business_unit_id: int | None = None, limit: int = 100) -> list[tuple[int, PostingOutcome]]:
    """Sweep PENDING and FAILED outbox rows through the posting command."""
    query = db.session.query(LedgerPostingRequest.order_id).filter(
        LedgerPostingRequest.status.in_([POSTING_STATUS_PENDING, POSTING_STATUS_FAILED])
    )
    if business_unit_id is not None:
        query = query.filter(LedgerPostingRequest.business_unit_id == business_unit_id)
    order_ids = [row[0] for row in query.order_by(LedgerPostingRequest.id).limit(limit).all()]

    results = []
    for order_id in order_ids:
        try:
            outcome = post_order_to_gl(order_id)
        except LedgerPosError as exc:
            db.session.rollback()
            current_app.logger.warning("Skipping outbox row for order_id=%s: %s", order_id, exc)
            outcome = PostingOutcome(status=POSTING_STATUS_FAILED, error=posting_error_payload(exc))
        results.append((order_id, outcome))
    return results


def get_order_accounting_summary(order_id: int, *, business_unit_id: int | None = None) -> dict:
    """Totals, posting state and journal lines for one order."""
    order = _load_order(order_id, business_unit_id)
    entry = _existing_entry(order.id)
    request = db.session.query(LedgerPostingRequest).filter_by(order_id=order.id).first()

    return {
        "order_id": order.id,
        "status": order.status,
        "subtotal_cents": order.subtotal_cents,
        "discount_cents": order.discount_cents,
        "tax_cents": order.tax_cents,
        "total_amount_cents": order.total_cents,
        "amount_paid_cents": order.amount_paid_cents,
        "change_cents": order.change_cents,
        "is_paid": order.is_paid,
        "is_posted": entry is not None and entry.is_posted,
        "posting_status": request.status if request else None,
        "posting_attempts": request.attempts if request else 0,
        "last_error": request.last_error if request else None,
        "requires_manual_posting": (
            order.status == ORDER_STATUS_PAID and entry is None
            and (request is None or request.status == POSTING_STATUS_FAILED)
        ),
        "journal_entry_id": entry.id if entry else None,
        "journal_entry_number": entry.document_number if entry else None,
        "journal_lines": [line.to_dict() for line in entry.lines] if entry else [],
        "total_debit_cents": entry.total_debit_cents if entry else 0,
        "total_credit_cents": entry.total_credit_cents if entry else 0,
    }


def validate_configuration(business_unit_id: int) -> dict:
    """
    Check that a business unit can post settlements to the GL.

    Issues block posting; warnings indicate a fallback will be used.
    """
    issues: list[str] = []
    warnings: list[str] = []

    configuration = (
        db.session.query(PosConfiguration)
        .filter_by(business_unit_id=business_unit_id)
        .first()
    )
    if configuration is None:
        issues.append("POS configuration not found. Please create a configuration first.")
        return {"is_valid": False, "issues": issues, "warnings": warnings}

    if not configuration.default_sales_account_id:
        issues.append("Default sales revenue account is not set")
    if not configuration.default_tax_account_id:
        issues.append("Default sales tax account is not set")
    if not configuration.default_cash_account_id:
        warnings.append("Default cash account not set - will use payment method mappings")
    if not configuration.default_discount_account_id:
        warnings.append("Default discount account not set - discounts will be netted against sales")

    if find_journal_entry_series(business_unit_id, configuration) is None:
        issues.append("Journal entry numbering series is required for posting")

    unmapped_menu_items = (
        db.session.query(MenuItem)
        .outerjoin(
            MenuItemGlMapping,
            (MenuItemGlMapping.menu_item_id == MenuItem.id)
            & (MenuItemGlMapping.business_unit_id == business_unit_id),
        )
        .filter(
            MenuItem.business_unit_id == business_unit_id,
            MenuItem.is_active.is_(True),
            MenuItemGlMapping.id.is_(None),
        )
        .count()
    )
    if unmapped_menu_items:
        if not configuration.default_sales_account_id:
            issues.append(f"{unmapped_menu_items} menu items are missing GL account mappings and no default is set.")
        else:
            warnings.append(f"{unmapped_menu_items} menu items are missing GL account mappings (will use default sales account).")

    unmapped_payment_methods = (
        db.session.query(PaymentMethod)
        .outerjoin(
            PaymentMethodGlMapping,
            (PaymentMethodGlMapping.payment_method_id == PaymentMethod.id)
            & (PaymentMethodGlMapping.business_unit_id == business_unit_id),
        )
        .filter(
            PaymentMethod.business_unit_id == business_unit_id,
            PaymentMethod.is_active.is_(True),
            PaymentMethodGlMapping.id.is_(None),
        )
        .count()
    )
    if unmapped_payment_methods:
        if not configuration.default_cash_account_id:
            issues.append(f"{unmapped_payment_methods} payment methods are missing GL account mappings and no default is set.")
        else:
            warnings.append(f"{unmapped_payment_methods} payment methods are missing GL account mappings (will use default cash account).")

    if find_open_period(business_unit_id, utctoday()) is None:
        issues.append("No open accounting period found for current date")

    return {"is_valid": not issues, "issues": issues, "warnings": warnings}
