"""
Ledgerman Result Types.

Immutable values exchanged between the store, the allocation engine
and the reconciliation coordinator. None of them touch the database.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class LineItem:
    """Quantidade efetivamente coletada de um produto."""

    product_code: str
    quantity: int
    collection_id: int | None = None


@dataclass(frozen=True)
class ObligationSnapshot:
    """Estado de uma pendência no momento da leitura."""

    id: int
    product_code: str
    quantity_pending: int
    created_at: datetime
    version: int = 1


@dataclass(frozen=True)
class ObligationUpdate:
    """
    Novo saldo de uma pendência.

    `version` is the version read with the snapshot; the store refuses
    to write if the row moved on since then.
    """

    obligation_id: int
    product_code: str
    previous_quantity: int
    debited: int
    new_quantity_pending: int
    new_status: str
    version: int = 1

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Shortfall:
    """Quantidade coletada sem pendência correspondente."""

    product_code: str
    unallocated_quantity: int

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Allocation:
    """Output of the allocation engine."""

    updates: list[ObligationUpdate] = field(default_factory=list)
    shortfalls: list[Shortfall] = field(default_factory=list)

    @property
    def total_debited(self) -> int:
        return sum(u.debited for u in self.updates)


@dataclass
class ReconciliationResult:
    """
    Resultado da baixa de pendências para uma coleta.

    applied: updates persisted (or recorded, when duplicate=True)
    shortfalls: excess collected quantity, reported but not fatal
    duplicate: the collection had already been reconciled; nothing was written
    """

    collection_id: int
    applied: list[ObligationUpdate] = field(default_factory=list)
    shortfalls: list[Shortfall] = field(default_factory=list)
    duplicate: bool = False

    @property
    def updated_count(self) -> int:
        return len(self.applied)

    @property
    def has_shortfalls(self) -> bool:
        return len(self.shortfalls) > 0

    def as_dict(self) -> dict:
        return {
            "collection_id": self.collection_id,
            "updated_count": self.updated_count,
            "applied": [u.as_dict() for u in self.applied],
            "shortfalls": [s.as_dict() for s in self.shortfalls],
            "duplicate": self.duplicate,
        }


@dataclass(frozen=True)
class OutstandingTotal:
    """Total pendente por código de produto."""

    product_code: str
    quantity_pending: int
    obligations: int
