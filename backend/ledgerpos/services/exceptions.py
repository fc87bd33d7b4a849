# Overview: Domain error taxonomy for settlement and ledger posting.

"""
Settlement and posting errors.

Every error carries a stable machine code, the HTTP status the routes answer
with, and a details dict that is echoed back in the response body.

Families:
- SettlementValidationError: the request itself is wrong (4xx).
- ConfigurationError: master data (accounts, periods, series, stock rows) is
  missing or inconsistent; 422.
- LedgerImbalanceError: an internal consistency violation; 500.

Storage failures are not wrapped: SQLAlchemy errors propagate and the routes
answer 503 with retryable=true.
"""

from __future__ import annotations


class LedgerPosError(Exception):
    """Base exception for all settlement/posting failures."""

    code = "LEDGERPOS_ERROR"
    http_status = 400

    def __init__(self, message: str, *, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code, "details": self.details}


# =============================================================================
# VALIDATION
# =============================================================================

class SettlementValidationError(LedgerPosError):
    code = "VALIDATION_ERROR"
    http_status = 400


class OrderNotFoundError(SettlementValidationError):
    code = "ORDER_NOT_FOUND"
    http_status = 404


class AlreadySettledError(SettlementValidationError):
    """Order is PAID or CANCELLED (or lost the race to another settlement)."""
    code = "ALREADY_SETTLED"
    http_status = 409


class InvalidPaymentMethodError(SettlementValidationError):
    code = "INVALID_PAYMENT_METHOD"


class InsufficientPaymentError(SettlementValidationError):
    code = "INSUFFICIENT_PAYMENT"


class InvalidDiscountError(SettlementValidationError):
    code = "INVALID_DISCOUNT"


# =============================================================================
# CONFIGURATION
# =============================================================================

class ConfigurationError(LedgerPosError):
    code = "CONFIGURATION_ERROR"
    http_status = 422


class UnresolvedAccountError(ConfigurationError):
    """A required account role (sales, cash, tax) has no mapping and no default."""
    code = "UNRESOLVED_ACCOUNT"


class NoOpenPeriodError(ConfigurationError):
    code = "NO_OPEN_PERIOD"


class NoNumberingSeriesError(ConfigurationError):
    code = "NO_NUMBERING_SERIES"


class StockRecordMissingError(ConfigurationError):
    code = "STOCK_RECORD_MISSING"


class OrderNotPostableError(ConfigurationError):
    """Order is not PAID, so there is nothing to post."""
    code = "ORDER_NOT_POSTABLE"


# =============================================================================
# CONSISTENCY
# =============================================================================

class LedgerImbalanceError(LedgerPosError):
    code = "LEDGER_IMBALANCE"
    http_status = 500
