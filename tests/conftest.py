"""
Shared fixtures for the Ledgerman test suite.
"""

from datetime import timedelta

import pytest
from django.utils import timezone

from ledgerman.conf import reset_notification_backend
from ledgerman.models import CollectedLineItem, Collection, CollectionStatus, Obligation


@pytest.fixture(autouse=True)
def _reset_notification_backend():
    reset_notification_backend()
    yield
    reset_notification_backend()


@pytest.fixture
def make_obligation(db):
    """Obligation factory; `age` in minutes before now sets FIFO priority."""
    base = timezone.now() - timedelta(days=1)

    def _make(product_code="PRD-001", quantity=5, age=0, **kwargs):
        return Obligation.objects.create(
            product_code=product_code,
            quantity_pending=quantity,
            created_at=base + timedelta(minutes=age),
            **kwargs,
        )

    return _make


@pytest.fixture
def make_collection(db):
    """Collection factory: make_collection(("PRD-001", 3), ("PRD-002", 1))."""

    def _make(*items, status=CollectionStatus.SCHEDULED, client_name="Cliente Teste"):
        collection = Collection.objects.create(client_name=client_name, status=status)
        for product_code, quantity in items:
            CollectedLineItem.objects.create(
                collection=collection,
                product_code=product_code,
                quantity=quantity,
            )
        return collection

    return _make
