"""
Django ORM Store.

Implements CollectionReader and ObligationStore over the ledgerman models.

Concurrency:
    get_pending_obligations() locks the rows it returns (SELECT FOR UPDATE)
    when called inside a transaction, so two completions for the same
    product code serialize. apply_updates() re-locks the rows and checks
    each one against the version it was read with; any mismatch aborts
    the whole batch.
"""

import logging

from django.db import DatabaseError, IntegrityError, transaction

from ledgerman.conf import get_setting
from ledgerman.exceptions import ConcurrencyConflict, NotFoundError, PersistenceError
from ledgerman.models import (
    Collection,
    Obligation,
    ObligationStatus,
    Reconciliation,
)
from ledgerman.results import (
    LineItem,
    ObligationSnapshot,
    ObligationUpdate,
    ReconciliationResult,
    Shortfall,
)

logger = logging.getLogger(__name__)


class DjangoCollectionReader:
    """
    Leitura de itens coletados via ORM.

    Inside a transaction the collection row stays locked until commit,
    so two reconciliations of the same collection cannot overlap.

    Exemplo de uso:
        reader = DjangoCollectionReader()
        items = reader.get_line_items(collection.pk)
    """

    def get_line_items(self, collection_id) -> list[LineItem]:
        collection = self._get(collection_id)
        return [item.as_line_item() for item in collection.items.order_by("id")]

    def get_status(self, collection_id) -> str:
        return self._get(collection_id).status

    def _get(self, collection_id) -> Collection:
        qs = Collection.objects.all()
        if transaction.get_connection().in_atomic_block:
            qs = qs.select_for_update()

        try:
            return qs.get(pk=collection_id)
        except Collection.DoesNotExist:
            raise NotFoundError("COLLECTION_NOT_FOUND", collection=collection_id)


class DjangoObligationStore:
    """
    Livro de pendências via ORM.

    Args:
        lock: use SELECT FOR UPDATE when reading pending obligations.
              Defaults to LEDGERMAN['LOCK_OBLIGATIONS'].
    """

    def __init__(self, lock: bool | None = None):
        self.lock = get_setting("LOCK_OBLIGATIONS") if lock is None else lock

    def get_pending_obligations(self, product_code: str) -> list[ObligationSnapshot]:
        qs = Obligation.objects.filter(
            product_code=product_code, status=ObligationStatus.PENDING
        ).order_by("created_at", "id")

        if self.lock and transaction.get_connection().in_atomic_block:
            qs = qs.select_for_update()

        return [obligation.snapshot() for obligation in qs]

    def apply_updates(self, updates: list[ObligationUpdate]) -> None:
        if not updates:
            return

        ids = [u.obligation_id for u in updates]

        try:
            with transaction.atomic():
                rows = Obligation.objects.select_for_update().in_bulk(ids)

                for update in updates:
                    row = rows.get(update.obligation_id)
                    if row is None:
                        raise ConcurrencyConflict(
                            obligation=update.obligation_id,
                            product_code=update.product_code,
                            reason="obligation disappeared",
                        )
                    row.apply(update)

        except DatabaseError as e:
            logger.error(
                f"Failed to apply {len(updates)} obligation updates: {e}",
                extra={"obligations": ids},
            )
            raise PersistenceError(
                "PERSISTENCE_FAILED", obligations=ids, error=str(e)
            ) from e

        logger.info(
            f"Applied {len(updates)} obligation updates",
            extra={
                "obligations": ids,
                "debited": sum(u.debited for u in updates),
            },
        )

    def get_reconciliation(self, collection_id) -> ReconciliationResult | None:
        record = Reconciliation.objects.filter(collection_id=collection_id).first()
        if record is None:
            return None
        return record.as_result(duplicate=True)

    def record_reconciliation(
        self,
        collection_id,
        updates: list[ObligationUpdate],
        shortfalls: list[Shortfall],
        created_by: str = "",
    ) -> Reconciliation:
        try:
            with transaction.atomic():
                return Reconciliation.objects.create(
                    collection_id=collection_id,
                    updated_count=len(updates),
                    updates=[u.as_dict() for u in updates],
                    shortfalls=[s.as_dict() for s in shortfalls],
                    created_by=created_by,
                )
        except IntegrityError as e:
            # Another transaction recorded this collection first
            raise ConcurrencyConflict(
                collection=collection_id, reason="already recorded", error=str(e)
            ) from e
        except DatabaseError as e:
            raise PersistenceError(
                "PERSISTENCE_FAILED", collection=collection_id, error=str(e)
            ) from e
