"""
Tests for the FIFO allocation engine (ledgerman.services.allocation).

Pure function: no database access, so no `db` fixture anywhere here.
"""

from datetime import datetime, timedelta, timezone

import pytest

from ledgerman.exceptions import ValidationError
from ledgerman.results import LineItem, ObligationSnapshot, ObligationUpdate, Shortfall
from ledgerman.services.allocation import allocate, group_by_code, validate_line_items


T0 = datetime(2026, 1, 1, 8, 0, tzinfo=timezone.utc)


def snap(id, code, quantity, minutes=0, version=1):
    return ObligationSnapshot(
        id=id,
        product_code=code,
        quantity_pending=quantity,
        created_at=T0 + timedelta(minutes=minutes),
        version=version,
    )


# ═══════════════════════════════════════════════════════════════════
# FIFO ordering
# ═══════════════════════════════════════════════════════════════════


class TestFifo:
    """Oldest obligations are debited first."""

    def test_spills_into_next_obligation(self):
        obligations = {"X": [snap(1, "X", 5), snap(2, "X", 3, minutes=10)]}

        result = allocate([LineItem("X", 6)], obligations)

        assert result.updates == [
            ObligationUpdate(1, "X", 5, 5, 0, "fulfilled"),
            ObligationUpdate(2, "X", 3, 1, 2, "pending"),
        ]
        assert result.shortfalls == []

    def test_exact_match_fulfills_only_oldest(self):
        obligations = {"X": [snap(1, "X", 4), snap(2, "X", 4, minutes=10)]}

        result = allocate([LineItem("X", 4)], obligations)

        assert len(result.updates) == 1
        assert result.updates[0].obligation_id == 1
        assert result.updates[0].new_status == "fulfilled"

    def test_partial_debit_keeps_pending(self):
        obligations = {"X": [snap(1, "X", 10)]}

        result = allocate([LineItem("X", 3)], obligations)

        update = result.updates[0]
        assert update.new_quantity_pending == 7
        assert update.new_status == "pending"
        assert update.debited == 3

    def test_uses_given_order(self):
        """Input order is authoritative; the engine does not re-sort."""
        obligations = {"X": [snap(2, "X", 3, minutes=10), snap(1, "X", 5)]}

        result = allocate([LineItem("X", 3)], obligations)

        assert [u.obligation_id for u in result.updates] == [2]

    def test_carries_version(self):
        obligations = {"X": [snap(1, "X", 5, version=7)]}

        result = allocate([LineItem("X", 1)], obligations)

        assert result.updates[0].version == 7


# ═══════════════════════════════════════════════════════════════════
# Shortfalls
# ═══════════════════════════════════════════════════════════════════


class TestShortfalls:
    """Excess quantities are reported, never fatal."""

    def test_over_collection(self):
        obligations = {"X": [snap(1, "X", 2)]}

        result = allocate([LineItem("X", 5)], obligations)

        assert result.updates[0].new_quantity_pending == 0
        assert result.shortfalls == [Shortfall("X", 3)]

    def test_no_obligation_for_code(self):
        result = allocate([LineItem("Y", 4)], {})

        assert result.updates == []
        assert result.shortfalls == [Shortfall("Y", 4)]

    def test_empty_obligation_list(self):
        result = allocate([LineItem("Y", 4)], {"Y": []})

        assert result.shortfalls == [Shortfall("Y", 4)]

    def test_one_shortfall_per_line_item(self):
        result = allocate([LineItem("Y", 1), LineItem("Y", 2)], {})

        assert result.shortfalls == [Shortfall("Y", 1), Shortfall("Y", 2)]

    def test_mixed_codes(self):
        obligations = {"A": [snap(1, "A", 2)]}

        result = allocate([LineItem("A", 2), LineItem("B", 1)], obligations)

        assert [u.obligation_id for u in result.updates] == [1]
        assert result.shortfalls == [Shortfall("B", 1)]


# ═══════════════════════════════════════════════════════════════════
# Same code on several line items
# ═══════════════════════════════════════════════════════════════════


class TestRepeatedCode:
    """Later line items see the balances left by earlier ones."""

    def test_second_item_continues_from_remaining_balance(self):
        obligations = {"X": [snap(1, "X", 5), snap(2, "X", 5, minutes=10)]}

        result = allocate([LineItem("X", 3), LineItem("X", 4)], obligations)

        assert result.updates == [
            ObligationUpdate(1, "X", 5, 5, 0, "fulfilled"),
            ObligationUpdate(2, "X", 5, 2, 3, "pending"),
        ]
        assert result.total_debited == 7

    def test_one_update_per_obligation(self):
        obligations = {"X": [snap(1, "X", 10)]}

        result = allocate([LineItem("X", 2), LineItem("X", 3)], obligations)

        assert len(result.updates) == 1
        assert result.updates[0].debited == 5
        assert result.updates[0].previous_quantity == 10
        assert result.updates[0].new_quantity_pending == 5

    def test_exhausted_obligation_is_skipped(self):
        obligations = {"X": [snap(1, "X", 2)]}

        result = allocate([LineItem("X", 2), LineItem("X", 1)], obligations)

        assert len(result.updates) == 1
        assert result.shortfalls == [Shortfall("X", 1)]


# ═══════════════════════════════════════════════════════════════════
# Purity and invariants
# ═══════════════════════════════════════════════════════════════════


class TestInvariants:
    """Conservation, non-negativity and determinism."""

    def test_inputs_untouched(self):
        obligations = {"X": [snap(1, "X", 5)]}
        items = [LineItem("X", 3)]

        allocate(items, obligations)

        assert obligations == {"X": [snap(1, "X", 5)]}
        assert items == [LineItem("X", 3)]

    def test_deterministic(self):
        obligations = {"X": [snap(1, "X", 5), snap(2, "X", 3, minutes=1)]}
        items = [LineItem("X", 6), LineItem("Z", 2)]

        assert allocate(items, obligations) == allocate(items, obligations)

    def test_debited_plus_shortfall_equals_collected(self):
        obligations = {
            "A": [snap(1, "A", 3), snap(2, "A", 4, minutes=5)],
            "B": [snap(3, "B", 1)],
        }
        items = [LineItem("A", 5), LineItem("B", 4), LineItem("A", 6), LineItem("C", 2)]

        result = allocate(items, obligations)

        collected = sum(i.quantity for i in items)
        unallocated = sum(s.unallocated_quantity for s in result.shortfalls)
        assert result.total_debited + unallocated == collected

    def test_balances_never_negative(self):
        obligations = {"A": [snap(1, "A", 1), snap(2, "A", 1, minutes=1)]}

        result = allocate([LineItem("A", 100)], obligations)

        assert all(u.new_quantity_pending >= 0 for u in result.updates)
        assert all(
            (u.new_status == "fulfilled") == (u.new_quantity_pending == 0)
            for u in result.updates
        )

    def test_empty_collection(self):
        result = allocate([], {"X": [snap(1, "X", 5)]})

        assert result.updates == []
        assert result.shortfalls == []


# ═══════════════════════════════════════════════════════════════════
# Validation
# ═══════════════════════════════════════════════════════════════════


class TestValidation:
    """Invalid input rejects the whole batch."""

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, True, None])
    def test_bad_quantity(self, quantity):
        with pytest.raises(ValidationError) as exc:
            allocate([LineItem("X", 1), LineItem("X", quantity)], {"X": [snap(1, "X", 5)]})

        assert exc.value.code == "INVALID_LINE_ITEM"
        assert exc.value.details["position"] == 1

    @pytest.mark.parametrize("code", ["", "   ", None])
    def test_blank_code(self, code):
        with pytest.raises(ValidationError) as exc:
            validate_line_items([LineItem(code, 1)])

        assert exc.value.details["reason"] == "missing product code"

    def test_valid_batch_passes(self):
        validate_line_items([LineItem("X", 1), LineItem("Y", 2)])


class TestGroupByCode:
    def test_totals_in_first_seen_order(self):
        totals = group_by_code([LineItem("B", 1), LineItem("A", 2), LineItem("B", 3)])

        assert list(totals.items()) == [("B", 4), ("A", 2)]
