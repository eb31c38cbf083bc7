"""
Ledgerman Adapters.

Implementations of the store and notification protocols.
"""

from ledgerman.adapters.log import LoggingNotificationBackend
from ledgerman.adapters.noop import NoopNotificationBackend
from ledgerman.adapters.orm import DjangoCollectionReader, DjangoObligationStore

__all__ = [
    # Store adapters
    "DjangoCollectionReader",
    "DjangoObligationStore",
    # Notification adapters
    "LoggingNotificationBackend",
    "NoopNotificationBackend",
]
