"""
Noop Notification Backend -- discards reconciliation outcomes.

Use this adapter when the caller surfaces the ReconciliationResult itself
(the API does), or in tests that should stay quiet.

Configuration:
    LEDGERMAN = {
        "NOTIFICATION_BACKEND": "ledgerman.adapters.noop.NoopNotificationBackend",
    }
"""

from __future__ import annotations

from ledgerman.results import Shortfall


class NoopNotificationBackend:
    """
    No-operation implementation of the NotificationBackend protocol.

    The result is still returned to the caller and the
    `obligations_reconciled` signal still fires; only this sink is silent.
    """

    def notify(self, collection_id, updated_count: int, shortfalls: list[Shortfall]) -> None:
        return None
