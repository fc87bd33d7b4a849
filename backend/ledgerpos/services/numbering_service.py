# Overview: Service-layer operations for document numbering; encapsulates business logic and database work.

from __future__ import annotations

from sqlalchemy import update

from ..extensions import db
from ..models import NumberingSeries, PosConfiguration
from ..models.accounting import DOCUMENT_TYPE_JOURNAL_ENTRY
from .exceptions import NoNumberingSeriesError


def format_document_number(prefix: str, number: int, pad: int = 6) -> str:
    return f"{prefix}{number:0{pad}d}"


def find_journal_entry_series(
    business_unit_id: int,
    configuration: PosConfiguration | None = None,
) -> NumberingSeries | None:
    """
    Series used for order journal entries.

    The POS configuration may pin a series; otherwise the business unit's
    JOURNAL_ENTRY series is used.
    """
    if configuration is not None and configuration.journal_entry_series_id:
        series = (
            db.session.query(NumberingSeries)
            .filter_by(id=configuration.journal_entry_series_id, business_unit_id=business_unit_id)
            .first()
        )
        if series is not None:
            return series
    return (
        db.session.query(NumberingSeries)
        .filter_by(business_unit_id=business_unit_id, document_type=DOCUMENT_TYPE_JOURNAL_ENTRY)
        .order_by(NumberingSeries.id)
        .first()
    )


def next_document_number(series: NumberingSeries) -> str:
    """
    Allocate the next number from a series.

    Runs inside the caller's transaction: the single UPDATE serializes
    concurrent allocations on the series row, and a rolled-back posting
    releases its number with it.
    """
    stmt = (
        update(NumberingSeries)
        .where(NumberingSeries.id == series.id)
        .values(next_number=NumberingSeries.next_number + 1)
        .execution_options(synchronize_session=False)
    )
    result = db.session.execute(stmt)
    if not result.rowcount:
        raise NoNumberingSeriesError(
            f"Numbering series {series.id} no longer exists",
            details={"series_id": series.id},
        )

    db.session.expire(series, ["next_number", "updated_at"])
    allocated = series.next_number - 1
    return format_document_number(series.prefix, allocated, series.pad or 6)


def next_journal_entry_number(
    business_unit_id: int,
    configuration: PosConfiguration | None = None,
) -> str:
    series = find_journal_entry_series(business_unit_id, configuration)
    if series is None:
        raise NoNumberingSeriesError(
            "No journal entry numbering series configured",
            details={"business_unit_id": business_unit_id, "document_type": DOCUMENT_TYPE_JOURNAL_ENTRY},
        )
    return next_document_number(series)
