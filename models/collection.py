"""
Collection and CollectedLineItem models.

Collection = one pickup operation.
CollectedLineItem = what was actually picked up (product code + quantity).

Completing a collection is the event that reconciles outstanding obligations.
"""

import logging
import uuid

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import models, transaction
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from simple_history.models import HistoricalRecords

from ledgerman.exceptions import ValidationError
from ledgerman.models.sequence import CodeSequence
from ledgerman.results import LineItem, ReconciliationResult

logger = logging.getLogger(__name__)


class CollectionStatus(models.TextChoices):
    """Collection lifecycle status."""

    PENDING = "pending", _("Coleta Pendente")
    SCHEDULED = "scheduled", _("Coleta Em Trânsito")
    COMPLETED = "completed", _("Coleta Entregue em nossa unidade")


class Collection(models.Model):
    """
    Coleta (pickup) de produtos em um cliente.

    Status: PENDING → SCHEDULED → COMPLETED

    COMPLETED is terminal. Reaching it sends `collection_completed`,
    which reconciles the collected items against pending obligations.
    """

    uuid = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
        verbose_name=_("UUID"),
    )

    code = models.CharField(
        unique=True,
        max_length=50,
        blank=True,
        verbose_name=_("Código"),
        help_text=_("Identificador único (auto-gerado se vazio)"),
    )

    client_name = models.CharField(
        max_length=255,
        blank=True,
        verbose_name=_("Cliente"),
    )

    status = models.CharField(
        max_length=20,
        choices=CollectionStatus.choices,
        default=CollectionStatus.PENDING,
        db_index=True,
        verbose_name=_("Status"),
    )

    completed_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_("Concluída em"),
    )

    notes = models.TextField(
        blank=True,
        verbose_name=_("Observações"),
    )

    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Criado em"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("Atualizado em"))

    history = HistoricalRecords()

    class Meta:
        db_table = "ledgerman_collection"
        verbose_name = _("Coleta")
        verbose_name_plural = _("Coletas")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        if self.client_name:
            return f"{self.code} - {self.client_name}"
        return self.code or f"COL-{self.pk}"

    def save(self, *args, **kwargs):
        """Override save to auto-generate code."""
        if not self.code:
            self.code = CodeSequence.next_code("COL")
        super().save(*args, **kwargs)

    # ══════════════════════════════════════════════════════════════
    # BUSINESS LOGIC
    # ══════════════════════════════════════════════════════════════

    def update_status(self, new_status: str, user=None) -> ReconciliationResult | None:
        """
        Altera o status da coleta.

        Moving to COMPLETED sends `collection_completed` inside the same
        transaction: if reconciliation fails, the status change is rolled
        back with it.

        Returns:
            ReconciliationResult produced by the completion handler, if any.
        """
        if new_status not in CollectionStatus.values:
            raise ValidationError(
                "INVALID_STATUS", collection=self.code, requested=new_status
            )

        with transaction.atomic():
            locked = Collection.objects.select_for_update().get(pk=self.pk)

            if locked.status == new_status:
                self.status = locked.status
                return None

            if locked.status == CollectionStatus.COMPLETED:
                raise ValidationError(
                    "INVALID_STATUS",
                    collection=self.code,
                    current=locked.status,
                    requested=new_status,
                )

            try:
                responses = self._transition(locked, new_status, user)
            except Exception:
                # The row is rolled back; keep this instance in step with it
                self.status = locked.status
                self.completed_at = locked.completed_at
                self.updated_at = locked.updated_at
                raise

        return next(
            (r for _, r in responses if isinstance(r, ReconciliationResult)), None
        )

    def _transition(self, locked, new_status: str, user=None) -> list:
        self.status = new_status
        update_fields = ["status", "updated_at"]
        if new_status == CollectionStatus.COMPLETED:
            self.completed_at = timezone.now()
            update_fields.append("completed_at")
        self.save(update_fields=update_fields)

        logger.info(
            f"Collection {self.code}: {locked.status} → {new_status}",
            extra={
                "collection": self.pk,
                "code": self.code,
                "status": new_status,
                "user": user.username if user else None,
            },
        )

        if new_status != CollectionStatus.COMPLETED:
            return []

        from ledgerman.signals import collection_completed

        return collection_completed.send(
            sender=self.__class__, collection=self, user=user
        )

    @property
    def is_completed(self) -> bool:
        return self.status == CollectionStatus.COMPLETED

    @property
    def total_quantity(self) -> int:
        return self.items.aggregate(total=models.Sum("quantity"))["total"] or 0


class CollectedLineItem(models.Model):
    """
    Item efetivamente coletado.

    Finalized together with the collection; read-only to reconciliation.
    """

    collection = models.ForeignKey(
        Collection,
        on_delete=models.CASCADE,
        related_name="items",
        verbose_name=_("Coleta"),
    )

    product_code = models.CharField(
        max_length=100,
        verbose_name=_("Código do Produto"),
    )
    product_description = models.CharField(
        max_length=255,
        blank=True,
        verbose_name=_("Descrição do Produto"),
    )

    quantity = models.PositiveIntegerField(
        verbose_name=_("Quantidade"),
    )

    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Criado em"))

    class Meta:
        db_table = "ledgerman_collected_line_item"
        verbose_name = _("Item Coletado")
        verbose_name_plural = _("Itens Coletados")
        ordering = ["id"]

    def __str__(self) -> str:
        return f"{self.product_code} x {self.quantity}"

    def clean(self):
        if not (self.product_code or "").strip():
            raise DjangoValidationError(_("Código do produto é obrigatório."))
        if not self.quantity or self.quantity <= 0:
            raise DjangoValidationError(_("Quantidade deve ser maior que zero."))

    def as_line_item(self) -> LineItem:
        return LineItem(
            product_code=self.product_code,
            quantity=self.quantity,
            collection_id=self.collection_id,
        )
