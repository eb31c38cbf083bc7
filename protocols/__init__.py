"""
Ledgerman Protocols.

Defines interfaces for persistence and external integrations.
"""

from ledgerman.protocols.notification import NotificationBackend
from ledgerman.protocols.store import CollectionReader, ObligationStore

__all__ = [
    # Store Protocols
    "CollectionReader",
    "ObligationStore",
    # Notification Protocol
    "NotificationBackend",
]
