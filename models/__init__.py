"""
Ledgerman Models.

Core models for the outstanding-obligation ledger:
- Obligation: quantity of a product still owed for collection
- Collection: one pickup operation (status workflow)
- CollectedLineItem: product code + quantity actually collected
- Reconciliation: processed-event log, one per reconciled collection
- CodeSequence: atomic counter for collection codes
"""

from ledgerman.models.collection import CollectedLineItem, Collection, CollectionStatus
from ledgerman.models.obligation import Obligation, ObligationStatus
from ledgerman.models.reconciliation import Reconciliation
from ledgerman.models.sequence import CodeSequence

__all__ = [
    "Obligation",
    "ObligationStatus",
    "Collection",
    "CollectionStatus",
    "CollectedLineItem",
    "Reconciliation",
    "CodeSequence",
]
