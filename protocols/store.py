"""
Store Protocols.

Defines the persistence interface the reconciliation coordinator consumes.

    CollectionReader.get_line_items()          →  what was collected
    ObligationStore.get_pending_obligations()  →  what is still owed (FIFO)
    ObligationStore.apply_updates()            →  atomic write of all debits
    ObligationStore.get_reconciliation()       →  already processed?
    ObligationStore.record_reconciliation()    →  processed-event marker
"""

from typing import Protocol, runtime_checkable

from ledgerman.results import (
    LineItem,
    ObligationSnapshot,
    ObligationUpdate,
    ReconciliationResult,
    Shortfall,
)


@runtime_checkable
class CollectionReader(Protocol):
    """
    Interface para leitura dos itens coletados.

    Implementações:
        - DjangoCollectionReader: Collection / CollectedLineItem models
    """

    def get_line_items(self, collection_id) -> list[LineItem]:
        """
        Itens finalizados de uma coleta.

        Locks the collection when called inside a transaction.

        Raises:
            NotFoundError: se a coleta não existe

        Returns:
            Lista (possivelmente vazia) na ordem de registro
        """
        ...

    def get_status(self, collection_id) -> str:
        """Current status of the collection (read under the same lock)."""
        ...


@runtime_checkable
class ObligationStore(Protocol):
    """
    Interface para o livro de pendências.

    Implementações:
        - DjangoObligationStore: Obligation model, row locks + version check
    """

    def get_pending_obligations(self, product_code: str) -> list[ObligationSnapshot]:
        """
        Pendências em aberto de um produto, mais antigas primeiro.

        Only status == pending is returned; ordering is (created_at, id).
        """
        ...

    def apply_updates(self, updates: list[ObligationUpdate]) -> None:
        """
        Grava todas as baixas como uma unidade atômica.

        Raises:
            ConcurrencyConflict: uma pendência mudou desde a leitura
            PersistenceError: falha de armazenamento (nada foi gravado)
        """
        ...

    def get_reconciliation(self, collection_id) -> ReconciliationResult | None:
        """Result recorded for an already reconciled collection, or None."""
        ...

    def record_reconciliation(
        self,
        collection_id,
        updates: list[ObligationUpdate],
        shortfalls: list[Shortfall],
        created_by: str = "",
    ) -> None:
        """Persist the processed-event marker for a collection."""
        ...
