"""
Ledgerman Signal Handlers.

Connects the collection workflow to the reconciliation coordinator.

This module is imported in apps.py to register handlers.
"""

import logging

from django.dispatch import receiver

from ledgerman.conf import get_setting
from ledgerman.signals import collection_completed

logger = logging.getLogger(__name__)


@receiver(collection_completed)
def reconcile_on_collection_completed(sender, collection, user=None, **kwargs):
    """
    When a collection is completed, debit its items from pending obligations.

    Runs inside Collection.update_status()'s transaction: any error
    propagates and the status change is rolled back together with it.
    """
    if not get_setting("AUTO_RECONCILE"):
        logger.info(
            f"AUTO_RECONCILE disabled, skipping reconciliation for {collection.code}"
        )
        return None

    from ledgerman.services.reconciliation import Reconciler

    return Reconciler().reconcile(collection.pk, user=user)
