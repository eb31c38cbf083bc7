"""
Notification Protocol - Interface for surfacing reconciliation outcomes.

Ledgerman defines this protocol. The host application implements it to show
shortfalls and update counts to users (toast, e-mail, metrics...).
Ledgerman never formats or localizes the message itself.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ledgerman.results import Shortfall


@runtime_checkable
class NotificationBackend(Protocol):
    """
    Protocol for receiving reconciliation outcomes.

    Called once per reconciliation, after the updates were applied. When the
    reconciliation runs from Collection.update_status(), this happens inside
    that transaction, before commit; an exception here rolls everything back.
    """

    def notify(
        self,
        collection_id,
        updated_count: int,
        shortfalls: list[Shortfall],
    ) -> None:
        """
        Deliver the outcome of one reconciliation.

        Args:
            collection_id: The reconciled collection
            updated_count: Number of obligations debited
            shortfalls: Collected quantities with no matching obligation
        """
        ...
