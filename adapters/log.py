"""
Logging Notification Backend -- default sink for reconciliation outcomes.

Writes one INFO record per reconciliation and one WARNING per shortfall
to the ``ledgerman.notifications`` logger.

Configuration:
    LEDGERMAN = {
        "NOTIFICATION_BACKEND": "ledgerman.adapters.log.LoggingNotificationBackend",
    }
"""

from __future__ import annotations

import logging

from ledgerman.results import Shortfall

logger = logging.getLogger("ledgerman.notifications")


class LoggingNotificationBackend:
    """NotificationBackend that reports through the logging module."""

    def notify(self, collection_id, updated_count: int, shortfalls: list[Shortfall]) -> None:
        logger.info(
            f"Collection {collection_id}: {updated_count} obligations updated",
            extra={
                "collection": collection_id,
                "updated_count": updated_count,
                "shortfalls": len(shortfalls),
            },
        )

        for shortfall in shortfalls:
            logger.warning(
                f"Collection {collection_id}: {shortfall.unallocated_quantity} of "
                f"{shortfall.product_code} collected with no pending obligation",
                extra={
                    "collection": collection_id,
                    "product_code": shortfall.product_code,
                    "unallocated_quantity": shortfall.unallocated_quantity,
                },
            )
