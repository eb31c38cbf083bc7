"""
Ledgerman Service - Thin wrapper over models and the reconciler.

Usage:
    from ledgerman import ledger, LedgerError

    # Obligations
    ledger.record_obligation("PRD-001", 5, description="Modem")
    ledger.pending_obligations("PRD-001")
    ledger.outstanding_summary()

    # Collections
    ledger.update_status(collection, "completed", user=operador)  # reconciles
    ledger.reconcile(collection)  # explicit (no-op if already reconciled)
"""

import logging
from datetime import datetime

from django.db.models import Count, Sum
from django.utils import timezone

from ledgerman.exceptions import NotFoundError, ValidationError
from ledgerman.models import Collection, Obligation, ObligationStatus
from ledgerman.results import OutstandingTotal, ReconciliationResult

logger = logging.getLogger(__name__)


class Ledger:
    """
    Main API for Ledgerman (thin wrapper).

    Business state transitions live on the models; reconciliation lives
    in services.reconciliation. This class only makes them easy to reach.
    """

    # ══════════════════════════════════════════════════════════════
    # OBLIGATIONS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def record_obligation(
        cls,
        product_code: str,
        quantity: int,
        description: str = "",
        notes: str = "",
        created_at: datetime | None = None,
    ) -> Obligation:
        """
        Registra uma pendência de coleta.

        Args:
            product_code: Código do produto
            quantity: Quantidade pendente (inteiro positivo)
            description: Descrição do produto (opcional)
            notes: Observações (opcional)
            created_at: Data de referência para a ordem FIFO (default: agora)
        """
        product_code = (product_code or "").strip()
        if not product_code:
            raise ValidationError("INVALID_LINE_ITEM", reason="missing product code")

        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
            raise ValidationError("INVALID_QUANTITY", quantity=quantity)

        obligation = Obligation.objects.create(
            product_code=product_code,
            product_description=description,
            quantity_pending=quantity,
            notes=notes,
            created_at=created_at or timezone.now(),
        )

        logger.info(
            f"Recorded obligation of {quantity} x {product_code}",
            extra={
                "obligation": obligation.pk,
                "product_code": product_code,
                "quantity": quantity,
            },
        )

        return obligation

    @classmethod
    def cancel_obligation(cls, obligation: Obligation, reason: str = "", user=None) -> Obligation:
        """Cancela uma pendência em aberto (sem baixa)."""
        obligation.cancel(reason, user)
        obligation.refresh_from_db()
        return obligation

    @classmethod
    def pending_obligations(cls, product_code: str | None = None) -> list[Obligation]:
        """Pendências em aberto, mais antigas primeiro."""
        qs = Obligation.objects.filter(status=ObligationStatus.PENDING)
        if product_code:
            qs = qs.filter(product_code=product_code)
        return list(qs.order_by("created_at", "id"))

    @classmethod
    def outstanding_summary(cls) -> list[OutstandingTotal]:
        """Total pendente por código de produto."""
        rows = (
            Obligation.objects.filter(status=ObligationStatus.PENDING)
            .values("product_code")
            .annotate(total=Sum("quantity_pending"), count=Count("id"))
            .order_by("product_code")
        )
        return [
            OutstandingTotal(
                product_code=row["product_code"],
                quantity_pending=row["total"] or 0,
                obligations=row["count"],
            )
            for row in rows
        ]

    # ══════════════════════════════════════════════════════════════
    # COLLECTIONS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def update_status(
        cls, collection: Collection, status: str, user=None
    ) -> ReconciliationResult | None:
        """
        ✅ Delega ao modelo.

        Altera o status da coleta; concluir dispara a baixa de pendências.
        """
        result = collection.update_status(status, user)
        collection.refresh_from_db()
        return result

    @classmethod
    def reconcile(cls, collection, user=None) -> ReconciliationResult:
        """
        Baixa as pendências de uma coleta.

        Args:
            collection: Collection instance or primary key
        """
        from ledgerman.services.reconciliation import Reconciler

        collection_id = collection.pk if isinstance(collection, Collection) else collection
        return Reconciler().reconcile(collection_id, user=user)

    @classmethod
    def get_collection(cls, code: str) -> Collection:
        """Find a collection by code."""
        try:
            return Collection.objects.get(code=code)
        except Collection.DoesNotExist:
            raise NotFoundError("COLLECTION_NOT_FOUND", collection=code)
