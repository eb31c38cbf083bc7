"""
Django Ledgerman - Outstanding-obligation ledger for collections.

Keeps track of product quantities still owed for collection and debits
them, oldest first, whenever a collection is completed.

Usage:
    from ledgerman import ledger, LedgerError

    # Record what is still owed
    ledger.record_obligation("PRD-001", 5)
    ledger.record_obligation("PRD-001", 3)

    # Completing a collection reconciles automatically...
    ledger.update_status(collection, "completed")

    # ...or explicitly
    result = ledger.reconcile(collection)
    for update in result.applied:
        print(f"{update.product_code}: {update.previous_quantity} -> {update.new_quantity_pending}")
    for shortfall in result.shortfalls:
        print(f"Excedente: {shortfall.product_code} +{shortfall.unallocated_quantity}")
"""

from ledgerman.exceptions import LedgerError


def __getattr__(name):
    """Lazy import to avoid AppRegistryNotReady errors."""
    if name in ("ledger", "Ledger"):
        from ledgerman.service import Ledger

        return Ledger
    if name == "ReconciliationResult":
        from ledgerman.results import ReconciliationResult

        return ReconciliationResult
    if name == "Shortfall":
        from ledgerman.results import Shortfall

        return Shortfall
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["ledger", "Ledger", "LedgerError", "ReconciliationResult", "Shortfall"]
__version__ = "0.1.0"
