"""
Yearly numbering for collection codes.

Codes read KIND-YEAR-NNNNN and restart at 1 every year, so the counter
is kept per (kind, year) rather than per formatted prefix.
"""

from django.db import models, transaction
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

CODE_DIGITS = 5


class CodeSequence(models.Model):
    """
    Contador de códigos por tipo e ano.

    Usage (internal to Collection.save):
        CodeSequence.next_code("COL")          # "COL-2026-00001"
        CodeSequence.next_value("COL", 2025)   # next number in the 2025 series
    """

    kind = models.CharField(
        max_length=20,
        verbose_name=_("Tipo"),
    )
    year = models.PositiveSmallIntegerField(
        verbose_name=_("Ano"),
    )
    last_value = models.PositiveIntegerField(
        default=0,
        verbose_name=_("Último valor"),
    )

    class Meta:
        db_table = "ledgerman_code_sequence"
        verbose_name = _("Sequência de Código")
        verbose_name_plural = _("Sequências de Código")
        constraints = [
            models.UniqueConstraint(fields=["kind", "year"], name="ledgerman_code_sequence_kind_year"),
        ]

    def __str__(self) -> str:
        return f"{self.kind}-{self.year} → {self.last_value}"

    @classmethod
    def next_value(cls, kind: str, year: int | None = None) -> int:
        """Take the next number of the (kind, year) series; the row stays locked until commit."""
        year = year or timezone.now().year
        with transaction.atomic():
            counter, _ = cls.objects.select_for_update().get_or_create(kind=kind, year=year)
            counter.last_value += 1
            counter.save(update_fields=["last_value"])
        return counter.last_value

    @classmethod
    def next_code(cls, kind: str, when=None) -> str:
        year = (when or timezone.now()).year
        return f"{kind}-{year}-{cls.next_value(kind, year):0{CODE_DIGITS}d}"
