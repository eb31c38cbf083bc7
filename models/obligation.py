"""
Obligation model.

Obligation = quantity of a product still owed for collection.

Balances only go down here: the reconciliation apply step debits them,
cancel() soft-closes them, and nothing in ledgerman deletes them.
"""

import logging
import uuid

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from simple_history.models import HistoricalRecords

from ledgerman.exceptions import ConcurrencyConflict
from ledgerman.results import ObligationSnapshot, ObligationUpdate

logger = logging.getLogger(__name__)


class ObligationStatus(models.TextChoices):
    """Obligation lifecycle status."""

    PENDING = "pending", _("Pendente")
    FULFILLED = "fulfilled", _("Coletado")
    CANCELLED = "cancelled", _("Cancelado")


class Obligation(models.Model):
    """
    Pendência de coleta de um produto.

    Status: PENDING → FULFILLED (quantity reaches zero)
            PENDING → CANCELLED (manual soft-close)

    Invariant: status == FULFILLED iff quantity_pending == 0
    (enforced by clean() and by a database check constraint).
    """

    uuid = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
        verbose_name=_("UUID"),
    )

    product_code = models.CharField(
        max_length=100,
        db_index=True,
        verbose_name=_("Código do Produto"),
    )
    product_description = models.CharField(
        max_length=255,
        blank=True,
        verbose_name=_("Descrição do Produto"),
    )

    quantity_pending = models.PositiveIntegerField(
        verbose_name=_("Quantidade Pendente"),
    )

    status = models.CharField(
        max_length=20,
        choices=ObligationStatus.choices,
        default=ObligationStatus.PENDING,
        db_index=True,
        verbose_name=_("Status"),
    )

    # Optimistic concurrency token, bumped on every reconciliation write
    version = models.PositiveIntegerField(
        default=1,
        editable=False,
        verbose_name=_("Versão"),
    )

    notes = models.TextField(
        blank=True,
        verbose_name=_("Observações"),
    )

    created_at = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        verbose_name=_("Criado em"),
        help_text=_("Define a prioridade FIFO: pendências mais antigas são baixadas primeiro"),
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name=_("Atualizado em"),
    )

    history = HistoricalRecords()

    class Meta:
        db_table = "ledgerman_obligation"
        verbose_name = _("Pendência de Coleta")
        verbose_name_plural = _("Pendências de Coleta")
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["product_code", "status", "created_at"],
                name="ledgerman_obl_code_status_idx",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(status=ObligationStatus.FULFILLED, quantity_pending=0)
                    | (~Q(status=ObligationStatus.FULFILLED) & Q(quantity_pending__gt=0))
                ),
                name="ledgerman_obligation_fulfilled_iff_zero",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.product_code} ({self.quantity_pending}) - {self.get_status_display()}"

    def clean(self):
        if self.status == ObligationStatus.FULFILLED and self.quantity_pending != 0:
            raise ValidationError(_("Pendência coletada deve ter quantidade zero."))
        if self.status != ObligationStatus.FULFILLED and not self.quantity_pending:
            raise ValidationError(_("Quantidade pendente deve ser maior que zero."))

    # ══════════════════════════════════════════════════════════════
    # BUSINESS LOGIC
    # ══════════════════════════════════════════════════════════════

    def snapshot(self) -> ObligationSnapshot:
        """Immutable view used by the allocation engine."""
        return ObligationSnapshot(
            id=self.pk,
            product_code=self.product_code,
            quantity_pending=self.quantity_pending,
            created_at=self.created_at,
            version=self.version,
        )

    def apply(self, update: ObligationUpdate):
        """
        Write a computed debit to this (locked) row.

        Refuses when the row is no longer the one the update was computed
        from: different version, or not pending anymore.
        """
        if self.version != update.version or self.status != ObligationStatus.PENDING:
            raise ConcurrencyConflict(
                obligation=self.pk,
                product_code=self.product_code,
                expected_version=update.version,
                current_version=self.version,
                status=self.status,
            )

        self.quantity_pending = update.new_quantity_pending
        self.status = update.new_status
        self.version += 1
        self.save(update_fields=["quantity_pending", "status", "version", "updated_at"])

    def cancel(self, reason: str = "", user=None):
        """Encerra a pendência sem baixa de quantidade."""
        if self.status != ObligationStatus.PENDING:
            raise ValidationError(_("Apenas pendências em aberto podem ser canceladas."))

        self.status = ObligationStatus.CANCELLED
        if reason:
            self.notes = f"{self.notes}\n[CANCELADO] {reason}".strip()

        self.save(update_fields=["status", "notes", "updated_at"])

        logger.info(
            f"Obligation {self.pk} ({self.product_code}) cancelled: {reason}",
            extra={
                "obligation": self.pk,
                "product_code": self.product_code,
                "user": user.username if user else None,
            },
        )

    @property
    def is_open(self) -> bool:
        return self.status == ObligationStatus.PENDING
