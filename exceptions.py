"""
Ledgerman Exceptions.

All ledgerman errors derive from LedgerError for consistent handling.
Every error aborts the current operation; nothing is applied partially.
"""

from typing import Any


class LedgerError(Exception):
    """
    Base exception for all Ledgerman errors.

    Usage:
        raise LedgerError('INVALID_QUANTITY', quantity=0)

    Attributes:
        code: Error code (INVALID_LINE_ITEM, COLLECTION_NOT_FOUND, etc.)
        details: Additional context as keyword arguments
    """

    default_code = "LEDGER_ERROR"

    def __init__(self, code: str | None = None, **details: Any):
        self.code = code or self.default_code
        self.details = details
        message = f"{self.code}: {details}" if details else self.code
        super().__init__(message)

    def as_dict(self) -> dict:
        """Return error as dictionary for API responses."""
        return {"code": self.code, **self.details}

    def __str__(self) -> str:
        name = type(self).__name__
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{name}({self.code}: {details_str})"
        return f"{name}({self.code})"


class ValidationError(LedgerError):
    """Input rejected before any computation (bad line item, bad quantity)."""

    default_code = "INVALID_LINE_ITEM"


class NotFoundError(LedgerError):
    """Referenced collection (or obligation) does not exist."""

    default_code = "COLLECTION_NOT_FOUND"


class PersistenceError(LedgerError):
    """Atomic apply failed. Nothing was written; the call may be retried."""

    default_code = "PERSISTENCE_FAILED"


class ConcurrencyConflict(LedgerError):
    """Obligation changed between read and write. Retry with fresh state."""

    default_code = "CONCURRENCY_CONFLICT"


class AlreadyReconciled(LedgerError):
    """Collection was already reconciled (raised only with ON_DUPLICATE='raise')."""

    default_code = "ALREADY_RECONCILED"


# Common error codes
# INVALID_LINE_ITEM: Line item with blank product code or non-positive quantity
# INVALID_QUANTITY: Obligation quantity must be positive
# INVALID_STATUS: Status transition not allowed
# COLLECTION_NOT_FOUND: Collection does not exist
# OBLIGATION_NOT_FOUND: Obligation does not exist
# PERSISTENCE_FAILED: Storage unavailable or constraint violated during apply
# CONCURRENCY_CONFLICT: Optimistic version check failed
# ALREADY_RECONCILED: Collection already has a reconciliation record
