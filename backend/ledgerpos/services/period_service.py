# Overview: Service-layer operations for accounting periods; encapsulates business logic and database work.

from __future__ import annotations

from datetime import date

from ..extensions import db
from ..models import AccountingPeriod
from ..models.accounting import PERIOD_STATUS_OPEN
from .exceptions import NoOpenPeriodError


def find_open_period(business_unit_id: int, posting_date: date) -> AccountingPeriod | None:
    return (
        db.session.query(AccountingPeriod)
        .filter(
            AccountingPeriod.business_unit_id == business_unit_id,
            AccountingPeriod.status == PERIOD_STATUS_OPEN,
            AccountingPeriod.start_date <= posting_date,
            AccountingPeriod.end_date >= posting_date,
        )
        .order_by(AccountingPeriod.start_date.desc())
        .first()
    )


def require_open_period(business_unit_id: int, posting_date: date) -> AccountingPeriod:
    """
    Return the OPEN period containing posting_date.

    Raises:
        NoOpenPeriodError: no period covers the date, or the covering period is CLOSED
    """
    period = find_open_period(business_unit_id, posting_date)
    if period is None:
        raise NoOpenPeriodError(
            f"No open accounting period for {posting_date.isoformat()}",
            details={"business_unit_id": business_unit_id, "posting_date": posting_date.isoformat()},
        )
    return period
