"""
Ledgerman Signals.

All communication with the collection workflow and with the host
application's notification layer happens via signals.

Signals:
    collection_completed: Collection reached COMPLETED, reconcile its items
    obligations_reconciled: Reconciliation committed, surface the outcome
"""

from django.dispatch import Signal

# Collection completed - debit outstanding obligations
# Sent by Collection.update_status() inside its transaction
# Args: collection, user
collection_completed = Signal()

# Reconciliation finished - updates written, shortfalls to report
# Sent by Reconciler.reconcile() (not sent for duplicates)
# Args: collection_id, result (ReconciliationResult)
obligations_reconciled = Signal()

__all__ = ["collection_completed", "obligations_reconciled"]
