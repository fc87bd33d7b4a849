# Overview: Shared JSON error mapping and input parsing for POS API routes.

from __future__ import annotations

from flask import current_app, jsonify
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from ..extensions import db
from ..services.exceptions import LedgerImbalanceError, LedgerPosError, SettlementValidationError


def json_error(exc: Exception):
    """Map an exception to the {"error", "code", "details"} body and its status."""
    if isinstance(exc, LedgerImbalanceError):
        current_app.logger.error("Ledger imbalance: %s", exc.details, exc_info=exc)
        return jsonify(exc.to_dict()), exc.http_status
    if isinstance(exc, LedgerPosError):
        return jsonify(exc.to_dict()), exc.http_status
    if isinstance(exc, SQLAlchemyError):
        db.session.rollback()
        current_app.logger.exception("Database error")
        code = "DATABASE_BUSY" if isinstance(exc, OperationalError) else "DATABASE_ERROR"
        return jsonify({
            "error": "Database temporarily unavailable",
            "code": code,
            "details": {"retryable": True},
        }), 503
    current_app.logger.exception("Unhandled error")
    return jsonify({"error": "Internal server error", "code": "INTERNAL_ERROR", "details": {}}), 500


def parse_int(data: dict, key: str, *, required: bool = True, minimum: int | None = None) -> int | None:
    """Strict integer field: rejects bools, floats and numeric strings with decimals."""
    value = data.get(key)
    if value is None:
        if required:
            raise SettlementValidationError(f"{key} is required", details={"field": key})
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        if isinstance(value, str) and value.strip().lstrip("-").isdigit():
            value = int(value.strip())
        else:
            raise SettlementValidationError(f"{key} must be an integer", details={"field": key})
    if minimum is not None and value < minimum:
        raise SettlementValidationError(
            f"{key} must be at least {minimum}",
            details={"field": key, "value": value},
        )
    return value
