"""
Tests for CodeSequence (ledgerman.models.sequence).

Verifies atomic, gap-free collection code generation.
"""

from datetime import datetime
from datetime import timezone as dt_timezone

import pytest
from django.utils import timezone

from ledgerman.models import CodeSequence, Collection


@pytest.mark.django_db
class TestCodeSequence:
    """Tests for CodeSequence model."""

    def test_first_value_is_one(self):
        assert CodeSequence.next_value("TEST") == 1

    def test_values_increment(self):
        values = [CodeSequence.next_value("TEST") for _ in range(3)]

        assert values == [1, 2, 3]

    def test_kinds_are_independent(self):
        CodeSequence.next_value("A")
        CodeSequence.next_value("A")

        assert CodeSequence.next_value("B") == 1

    def test_each_year_restarts(self):
        CodeSequence.next_value("COL", 2025)
        CodeSequence.next_value("COL", 2025)

        assert CodeSequence.next_value("COL", 2026) == 1
        assert CodeSequence.next_value("COL", 2025) == 3
        assert CodeSequence.objects.get(kind="COL", year=2025).last_value == 3

    def test_next_code_format(self):
        year = timezone.now().year

        assert CodeSequence.next_code("COL") == f"COL-{year}-00001"
        assert CodeSequence.next_code("COL") == f"COL-{year}-00002"

    def test_next_code_for_date(self):
        when = datetime(2024, 12, 31, 23, 0, tzinfo=dt_timezone.utc)

        assert CodeSequence.next_code("COL", when=when) == "COL-2024-00001"


@pytest.mark.django_db
class TestCollectionCode:
    """Collection.save() assigns a code when empty."""

    def test_auto_generated(self):
        first = Collection.objects.create(client_name="A")
        second = Collection.objects.create(client_name="B")

        year = timezone.now().year
        assert first.code == f"COL-{year}-00001"
        assert second.code == f"COL-{year}-00002"

    def test_explicit_code_kept(self):
        collection = Collection.objects.create(code="MANUAL-1")

        assert collection.code == "MANUAL-1"
        assert not CodeSequence.objects.exists()

    def test_code_stable_on_resave(self):
        collection = Collection.objects.create()
        code = collection.code

        collection.notes = "x"
        collection.save()

        assert collection.code == code
