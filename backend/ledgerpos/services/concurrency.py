# Overview: Service-layer operations for concurrency; row locking and retry around settlement and posting transactions.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    On SQLite the guarded status UPDATE and unique constraints carry the
    per-order serialization instead.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, busy database) and StaleDataError
    (optimistic locking conflicts). The session is rolled back before each
    retry so every attempt starts from a clean transaction. Domain errors are
    never retried; they propagate on the first attempt.
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            current_app.logger.warning(
                "Concurrency conflict (attempt %s/%s), retrying: %s",
                attempt + 1,
                attempts,
                exc.__class__.__name__,
            )
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc
