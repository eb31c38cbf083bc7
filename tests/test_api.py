"""
Tests for Ledgerman API ViewSets (ledgerman.api.views).

Verifies DRF endpoints for Obligation, Collection and Reconciliation,
and the mapping of ledger errors to HTTP status codes.
"""

import pytest
from unittest.mock import patch

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from ledgerman import ledger
from ledgerman.api.serializers import ObligationSerializer
from ledgerman.exceptions import ConcurrencyConflict, PersistenceError
from ledgerman.models import (
    Collection,
    CollectionStatus,
    Obligation,
    ObligationStatus,
    Reconciliation,
)

pytestmark = pytest.mark.urls("ledgerman.tests.test_api_urls")

User = get_user_model()


# ═══════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════


@pytest.fixture
def api_client(db):
    user = User.objects.create_user(username="api_user", password="test123")
    client = APIClient()
    client.force_authenticate(user=user)
    return client


# ═══════════════════════════════════════════════════════════════════
# ObligationViewSet
# ═══════════════════════════════════════════════════════════════════


class TestObligationAPI:
    """Tests for Obligation endpoints."""

    def test_requires_authentication(self, db):
        response = APIClient().get("/api/ledgerman/obligations/")

        assert response.status_code in (401, 403)

    def test_create(self, api_client):
        """POST /api/ledgerman/obligations/ records a pending obligation."""
        response = api_client.post(
            "/api/ledgerman/obligations/",
            {"product_code": "PRD-001", "quantity_pending": 5, "product_description": "Modem"},
            format="json",
        )

        assert response.status_code == 201
        assert response.data["status"] == "pending"
        assert response.data["version"] == 1
        assert Obligation.objects.get(uuid=response.data["uuid"]).quantity_pending == 5

    def test_create_rejects_zero(self, api_client):
        response = api_client.post(
            "/api/ledgerman/obligations/",
            {"product_code": "PRD-001", "quantity_pending": 0},
            format="json",
        )

        assert response.status_code == 400
        assert "quantity_pending" in response.data

    def test_list_filters(self, api_client, make_obligation):
        make_obligation("A", 1)
        make_obligation("B", 1)

        response = api_client.get("/api/ledgerman/obligations/?product_code=A")

        assert response.status_code == 200
        assert [o["product_code"] for o in response.data] == ["A"]

    def test_cancel(self, api_client, make_obligation):
        obligation = make_obligation("A", 3)

        response = api_client.post(
            f"/api/ledgerman/obligations/{obligation.uuid}/cancel/",
            {"reason": "Cliente desistiu"},
            format="json",
        )

        obligation.refresh_from_db()
        assert response.status_code == 200
        assert response.data["status"] == "cancelled"
        assert obligation.status == ObligationStatus.CANCELLED

    def test_cancel_twice(self, api_client, make_obligation):
        obligation = make_obligation("A", 3)
        obligation.cancel()

        response = api_client.post(f"/api/ledgerman/obligations/{obligation.uuid}/cancel/")

        assert response.status_code == 400

    def test_summary(self, api_client, make_obligation):
        make_obligation("A", 3)
        make_obligation("A", 2, age=1)

        response = api_client.get("/api/ledgerman/obligations/summary/")

        assert response.status_code == 200
        assert response.data == [{"product_code": "A", "quantity_pending": 5, "obligations": 2}]

    def test_patch_ignores_quantity(self, api_client, make_obligation):
        """quantity_pending is writable on create only."""
        obligation = make_obligation("A", 3)

        response = api_client.patch(
            f"/api/ledgerman/obligations/{obligation.uuid}/",
            {"quantity_pending": 50, "notes": "Conferido"},
            format="json",
        )

        obligation.refresh_from_db()
        assert response.status_code == 200
        assert response.data["quantity_pending"] == 3
        assert obligation.quantity_pending == 3
        assert obligation.notes == "Conferido"

    def test_stale_update_keeps_reconciled_balance(self, make_obligation, make_collection):
        """Editing a stale instance does not undo a debit applied meanwhile."""
        obligation = make_obligation("X", 5)
        stale = Obligation.objects.get(pk=obligation.pk)
        ledger.reconcile(make_collection(("X", 5), status=CollectionStatus.COMPLETED))

        serializer = ObligationSerializer(stale, data={"notes": "Observação"}, partial=True)
        assert serializer.is_valid(), serializer.errors
        serializer.save()

        obligation.refresh_from_db()
        assert obligation.quantity_pending == 0
        assert obligation.status == ObligationStatus.FULFILLED
        assert obligation.version == 2
        assert obligation.notes == "Observação"


# ═══════════════════════════════════════════════════════════════════
# CollectionViewSet
# ═══════════════════════════════════════════════════════════════════


class TestCollectionAPI:
    """Tests for Collection endpoints."""

    def test_create_with_items(self, api_client):
        """POST /api/ledgerman/collections/ creates collection and items."""
        response = api_client.post(
            "/api/ledgerman/collections/",
            {
                "client_name": "Loja Centro",
                "items": [
                    {"product_code": "A", "quantity": 2},
                    {"product_code": "B", "quantity": 1},
                ],
            },
            format="json",
        )

        assert response.status_code == 201
        assert response.data["code"].startswith("COL-")
        collection = Collection.objects.get(uuid=response.data["uuid"])
        assert collection.items.count() == 2
        assert collection.status == CollectionStatus.PENDING

    def test_create_rejects_bad_item(self, api_client):
        response = api_client.post(
            "/api/ledgerman/collections/",
            {"items": [{"product_code": "A", "quantity": 0}]},
            format="json",
        )

        assert response.status_code == 400
        assert not Collection.objects.exists()

    def test_complete_reconciles(self, api_client, make_obligation, make_collection):
        """POST /api/ledgerman/collections/{uuid}/status/ with completed."""
        obligation = make_obligation("A", 2)
        collection = make_collection(("A", 3))

        response = api_client.post(
            f"/api/ledgerman/collections/{collection.uuid}/status/",
            {"status": "completed"},
            format="json",
        )

        obligation.refresh_from_db()
        assert response.status_code == 200
        assert response.data["status"] == "completed"
        assert response.data["reconciliation"]["updated_count"] == 1
        assert response.data["reconciliation"]["shortfalls"] == [
            {"product_code": "A", "unallocated_quantity": 1}
        ]
        assert obligation.status == ObligationStatus.FULFILLED

    def test_status_invalid_choice(self, api_client, make_collection):
        collection = make_collection()

        response = api_client.post(
            f"/api/ledgerman/collections/{collection.uuid}/status/",
            {"status": "lost"},
            format="json",
        )

        assert response.status_code == 400

    def test_reopen_completed_rejected(self, api_client, make_collection):
        collection = make_collection(status=CollectionStatus.COMPLETED)

        response = api_client.post(
            f"/api/ledgerman/collections/{collection.uuid}/status/",
            {"status": "pending"},
            format="json",
        )

        assert response.status_code == 400
        assert response.data["code"] == "INVALID_STATUS"

    def test_conflict_maps_to_409(self, api_client, make_obligation, make_collection):
        make_obligation("A", 2)
        collection = make_collection(("A", 1))

        with patch(
            "ledgerman.adapters.orm.DjangoObligationStore.apply_updates",
            side_effect=ConcurrencyConflict(reason="simulated"),
        ):
            response = api_client.post(
                f"/api/ledgerman/collections/{collection.uuid}/status/",
                {"status": "completed"},
                format="json",
            )

        collection.refresh_from_db()
        assert response.status_code == 409
        assert response.data["code"] == "CONCURRENCY_CONFLICT"
        assert collection.status == CollectionStatus.SCHEDULED

    def test_persistence_maps_to_503(self, api_client, make_collection):
        collection = make_collection(("A", 1))

        with patch(
            "ledgerman.adapters.orm.DjangoObligationStore.record_reconciliation",
            side_effect=PersistenceError("PERSISTENCE_FAILED"),
        ):
            response = api_client.post(
                f"/api/ledgerman/collections/{collection.uuid}/status/",
                {"status": "completed"},
                format="json",
            )

        assert response.status_code == 503
        assert response.data["code"] == "PERSISTENCE_FAILED"

    def test_reconcile_requires_completed(self, api_client, make_collection):
        collection = make_collection(("A", 1))

        response = api_client.post(f"/api/ledgerman/collections/{collection.uuid}/reconcile/")

        assert response.status_code == 400
        assert not Reconciliation.objects.exists()

    def test_reconcile_is_idempotent(self, api_client, make_obligation, make_collection, settings):
        settings.LEDGERMAN = {"AUTO_RECONCILE": False}
        obligation = make_obligation("A", 5)
        collection = make_collection(("A", 2))
        collection.update_status(CollectionStatus.COMPLETED)
        url = f"/api/ledgerman/collections/{collection.uuid}/reconcile/"

        first = api_client.post(url)
        second = api_client.post(url)

        obligation.refresh_from_db()
        assert first.status_code == 201
        assert second.status_code == 200
        assert second.data["duplicate"] is True
        assert obligation.quantity_pending == 3

    def test_items_frozen_after_completion(self, api_client, make_collection):
        collection = make_collection(("A", 1))
        collection.update_status(CollectionStatus.COMPLETED)

        response = api_client.patch(
            f"/api/ledgerman/collections/{collection.uuid}/",
            {"items": [{"product_code": "A", "quantity": 9}]},
            format="json",
        )

        assert response.status_code == 400
        assert collection.items.get().quantity == 1


# ═══════════════════════════════════════════════════════════════════
# ReconciliationViewSet
# ═══════════════════════════════════════════════════════════════════


class TestReconciliationAPI:
    """Tests for Reconciliation read-only endpoints."""

    def test_list(self, api_client, make_collection):
        collection = make_collection(("A", 1))
        collection.update_status(CollectionStatus.COMPLETED)

        response = api_client.get("/api/ledgerman/reconciliations/")

        assert response.status_code == 200
        assert response.data[0]["collection_code"] == collection.code
        assert response.data[0]["shortfalls"] == [{"product_code": "A", "unallocated_quantity": 1}]

    def test_read_only(self, api_client, make_collection):
        collection = make_collection()

        response = api_client.post(
            "/api/ledgerman/reconciliations/", {"collection": collection.pk}, format="json"
        )

        assert response.status_code == 405
