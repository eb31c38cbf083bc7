"""
Reconciliation coordinator.

Runs one completion event end-to-end:

    1. read the collected line items        (locks the collection, must be completed)
    2. read pending obligations per code    (locks the obligations, FIFO order)
    3. allocate                             (pure, services.allocation)
    4. apply every update + processed mark  (one transaction)
    5. notify outcome                       (shortfalls are warnings, not errors)

Steps 1–4 never interleave or reorder. A ConcurrencyConflict retries them
with fresh state; every other error aborts the call with nothing written.
"""

import logging

from django.db import DatabaseError, transaction

from ledgerman.conf import get_max_attempts, get_notification_backend, get_on_duplicate
from ledgerman.exceptions import (
    AlreadyReconciled,
    ConcurrencyConflict,
    LedgerError,
    PersistenceError,
    ValidationError,
)
from ledgerman.models import CollectionStatus
from ledgerman.results import ReconciliationResult
from ledgerman.services.allocation import allocate, group_by_code, validate_line_items

logger = logging.getLogger(__name__)


class Reconciler:
    """
    Baixa de pendências a partir de uma coleta concluída.

    Usage:
        result = Reconciler().reconcile(collection.pk)

    Collaborators default to the ORM store and the configured
    notification backend; tests can pass their own.
    """

    def __init__(self, reader=None, store=None, notifier=None, max_attempts=None):
        if reader is None or store is None:
            from ledgerman.adapters.orm import DjangoCollectionReader, DjangoObligationStore

            reader = reader or DjangoCollectionReader()
            store = store or DjangoObligationStore()

        self.reader = reader
        self.store = store
        self._notifier = notifier
        self.max_attempts = max_attempts

    @property
    def notifier(self):
        return self._notifier or get_notification_backend()

    def reconcile(self, collection_id, user=None) -> ReconciliationResult:
        """
        Reconcile one collection.

        Returns:
            ReconciliationResult with the applied updates and shortfalls.
            For an already reconciled collection, the recorded result
            with duplicate=True (nothing is written again).

        Raises:
            ValidationError: the collection is not completed, or a line item is invalid
            NotFoundError: the collection does not exist
            ConcurrencyConflict: still conflicting after MAX_ATTEMPTS
            PersistenceError: the atomic write failed
            AlreadyReconciled: repeat call with ON_DUPLICATE='raise'
        """
        attempts = self.max_attempts or get_max_attempts()
        created_by = f"user:{user.username}" if user else "system:reconciler"

        for attempt in range(1, attempts + 1):
            try:
                result = self._reconcile_once(collection_id, created_by)
                break
            except ConcurrencyConflict as e:
                if attempt >= attempts:
                    logger.error(
                        f"Reconciliation of collection {collection_id} gave up after {attempt} attempts",
                        extra={"collection": collection_id, **e.details},
                    )
                    raise
                logger.warning(
                    f"Concurrency conflict reconciling collection {collection_id}, retrying ({attempt}/{attempts})",
                    extra={"collection": collection_id, **e.details},
                )

        if result.duplicate:
            return result

        self._notify(result)
        return result

    def _reconcile_once(self, collection_id, created_by: str) -> ReconciliationResult:
        try:
            with transaction.atomic():
                line_items = self.reader.get_line_items(collection_id)

                # Items may still change until the collection is completed
                status = self.reader.get_status(collection_id)
                if status != CollectionStatus.COMPLETED:
                    raise ValidationError(
                        "INVALID_STATUS", collection=collection_id, status=status
                    )

                recorded = self.store.get_reconciliation(collection_id)
                if recorded is not None:
                    return self._duplicate(collection_id, recorded)

                validate_line_items(line_items)

                # Sorted so concurrent reconciliations lock codes in the same order
                codes = sorted({item.product_code for item in line_items})
                obligations = {
                    code: self.store.get_pending_obligations(code) for code in codes
                }

                allocation = allocate(line_items, obligations)

                self.store.apply_updates(allocation.updates)
                self.store.record_reconciliation(
                    collection_id,
                    allocation.updates,
                    allocation.shortfalls,
                    created_by=created_by,
                )

        except LedgerError:
            raise
        except DatabaseError as e:
            logger.error(
                f"Failed to reconcile collection {collection_id}: {e}",
                extra={"collection": collection_id},
            )
            raise PersistenceError(
                "PERSISTENCE_FAILED", collection=collection_id, error=str(e)
            ) from e

        logger.info(
            f"Collection {collection_id} reconciled: {len(allocation.updates)} obligations, "
            f"{allocation.total_debited} units debited, {len(allocation.shortfalls)} shortfalls",
            extra={
                "collection": collection_id,
                "collected": group_by_code(line_items),
                "updated_count": len(allocation.updates),
                "debited": allocation.total_debited,
                "shortfalls": [s.as_dict() for s in allocation.shortfalls],
            },
        )

        return ReconciliationResult(
            collection_id=collection_id,
            applied=allocation.updates,
            shortfalls=allocation.shortfalls,
        )

    def _duplicate(self, collection_id, recorded: ReconciliationResult) -> ReconciliationResult:
        if get_on_duplicate() == "raise":
            raise AlreadyReconciled("ALREADY_RECONCILED", collection=collection_id)

        logger.warning(
            f"Collection {collection_id} already reconciled, skipping",
            extra={"collection": collection_id, "updated_count": recorded.updated_count},
        )
        return recorded

    def _notify(self, result: ReconciliationResult):
        """Runs inside the caller's transaction, if any; errors propagate."""
        from ledgerman.signals import obligations_reconciled

        self.notifier.notify(result.collection_id, result.updated_count, result.shortfalls)
        obligations_reconciled.send(
            sender=self.__class__, collection_id=result.collection_id, result=result
        )
