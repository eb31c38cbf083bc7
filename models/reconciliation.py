"""
Reconciliation log.

One row per reconciled collection. The unique link to the collection is
the processed-event marker: a second reconcile of the same collection
finds this row and does not debit again.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from ledgerman.results import ObligationUpdate, ReconciliationResult, Shortfall


class Reconciliation(models.Model):
    """
    Registro de baixa de pendências de uma coleta.

    updates:
        [{"obligation_id": 1, "product_code": "X", "previous_quantity": 5,
          "debited": 5, "new_quantity_pending": 0, "new_status": "fulfilled",
          "version": 1}, ...]
    shortfalls:
        [{"product_code": "X", "unallocated_quantity": 3}, ...]
    """

    collection = models.OneToOneField(
        "ledgerman.Collection",
        on_delete=models.PROTECT,
        related_name="reconciliation",
        verbose_name=_("Coleta"),
    )

    updated_count = models.PositiveIntegerField(
        default=0,
        verbose_name=_("Pendências atualizadas"),
    )
    updates = models.JSONField(
        default=list,
        blank=True,
        verbose_name=_("Baixas"),
    )
    shortfalls = models.JSONField(
        default=list,
        blank=True,
        verbose_name=_("Excedentes"),
    )

    created_by = models.CharField(
        max_length=255,
        blank=True,
        verbose_name=_("Criado por"),
        help_text=_("Ex: 'user:joao', 'system:reconciler', 'api:pdv-001'"),
    )
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Criado em"))

    class Meta:
        db_table = "ledgerman_reconciliation"
        verbose_name = _("Baixa de Pendências")
        verbose_name_plural = _("Baixas de Pendências")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.collection} ({self.updated_count})"

    @property
    def shortfall_quantity(self) -> int:
        return sum(s.get("unallocated_quantity", 0) for s in self.shortfalls)

    def as_result(self, duplicate: bool = True) -> ReconciliationResult:
        """Rebuild the result recorded for this collection."""
        return ReconciliationResult(
            collection_id=self.collection_id,
            applied=[ObligationUpdate(**u) for u in self.updates],
            shortfalls=[Shortfall(**s) for s in self.shortfalls],
            duplicate=duplicate,
        )
