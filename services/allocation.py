"""
FIFO allocation of collected quantities against pending obligations.

Pure computation: no database, no clock, no hidden state. Given the same
line items and the same obligation snapshots, allocate() always returns
the same updates and shortfalls.

Example:
    obligations X: [#1 pending 5 (oldest), #2 pending 3]
    collected X: 6
    → #1: 5 → 0 (fulfilled), #2: 3 → 2 (pending), no shortfall
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from ledgerman.exceptions import ValidationError
from ledgerman.results import (
    Allocation,
    LineItem,
    ObligationSnapshot,
    ObligationUpdate,
    Shortfall,
)

FULFILLED = "fulfilled"
PENDING = "pending"


def validate_line_items(line_items: Iterable[LineItem]) -> None:
    """Reject the whole batch if any line item is unusable."""
    for position, item in enumerate(line_items):
        code = (item.product_code or "").strip()
        if not code:
            raise ValidationError(
                "INVALID_LINE_ITEM",
                position=position,
                collection=item.collection_id,
                reason="missing product code",
            )
        if not isinstance(item.quantity, int) or isinstance(item.quantity, bool) or item.quantity <= 0:
            raise ValidationError(
                "INVALID_LINE_ITEM",
                position=position,
                collection=item.collection_id,
                product_code=code,
                quantity=item.quantity,
                reason="quantity must be a positive integer",
            )


def allocate(
    line_items: Sequence[LineItem],
    obligations_by_code: Mapping[str, Sequence[ObligationSnapshot]],
) -> Allocation:
    """
    Debit collected quantities from pending obligations, oldest first.

    Args:
        line_items: What was collected, in the order received.
        obligations_by_code: Pending obligations per product code, already
            sorted by (created_at, id). Not re-filtered or re-sorted here.

    Returns:
        Allocation with one update per touched obligation (final balance,
        cumulative debit, first-touch order) and one shortfall per line
        item that could not be fully allocated.

    Raises:
        ValidationError: a line item has a blank code or non-positive quantity.
    """
    validate_line_items(line_items)

    # Working balances for this call only; the snapshots are never mutated.
    balances: dict[int, int] = {}
    touched: dict[int, ObligationSnapshot] = {}
    shortfalls: list[Shortfall] = []

    for item in line_items:
        remaining = item.quantity

        for obligation in obligations_by_code.get(item.product_code, ()):
            if remaining == 0:
                break

            pending = balances.get(obligation.id, obligation.quantity_pending)
            if pending == 0:
                continue

            debit = min(remaining, pending)
            balances[obligation.id] = pending - debit
            touched.setdefault(obligation.id, obligation)
            remaining -= debit

        if remaining > 0:
            shortfalls.append(
                Shortfall(product_code=item.product_code, unallocated_quantity=remaining)
            )

    updates = []
    for obligation_id, obligation in touched.items():
        new_quantity = balances[obligation_id]
        updates.append(
            ObligationUpdate(
                obligation_id=obligation_id,
                product_code=obligation.product_code,
                previous_quantity=obligation.quantity_pending,
                debited=obligation.quantity_pending - new_quantity,
                new_quantity_pending=new_quantity,
                new_status=FULFILLED if new_quantity == 0 else PENDING,
                version=obligation.version,
            )
        )

    return Allocation(updates=updates, shortfalls=shortfalls)


def group_by_code(line_items: Iterable[LineItem]) -> dict[str, int]:
    """Total collected quantity per product code, in first-seen order."""
    totals: dict[str, int] = {}
    for item in line_items:
        totals[item.product_code] = totals.get(item.product_code, 0) + item.quantity
    return totals
