"""
Ledgerman API ViewSets.
"""

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ledgerman.exceptions import (
    AlreadyReconciled,
    ConcurrencyConflict,
    LedgerError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from ledgerman.models import Collection, Obligation, ObligationStatus, Reconciliation
from ledgerman.service import Ledger

from .serializers import (
    CollectionSerializer,
    CollectionStatusSerializer,
    ObligationSerializer,
    ReconciliationSerializer,
)


def error_response(error: LedgerError) -> Response:
    """Map a LedgerError to an HTTP response carrying its as_dict() body."""
    if isinstance(error, ValidationError):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(error, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, (ConcurrencyConflict, AlreadyReconciled)):
        code = status.HTTP_409_CONFLICT
    elif isinstance(error, PersistenceError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_400_BAD_REQUEST
    return Response(error.as_dict(), status=code)


class ObligationViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Obligation.

    list: List obligations (?product_code=, ?status=)
    create: Record a new obligation
    retrieve: Get a specific obligation by UUID
    update: Update an obligation
    destroy: Delete an obligation
    cancel: Cancel a pending obligation
    summary: Outstanding quantity per product code
    """

    permission_classes = [IsAuthenticated]
    queryset = Obligation.objects.all()
    serializer_class = ObligationSerializer
    lookup_field = "uuid"

    def get_queryset(self):
        qs = super().get_queryset()
        product_code = self.request.query_params.get("product_code")
        if product_code:
            qs = qs.filter(product_code=product_code)
        status_filter = self.request.query_params.get("status")
        if status_filter:
            qs = qs.filter(status=status_filter)
        return qs

    @action(detail=True, methods=["post"])
    def cancel(self, request, uuid=None):
        """
        Cancel a pending obligation.

        POST /api/ledgerman/obligations/{uuid}/cancel/
        {
            "reason": "Cliente desistiu"  // optional
        }
        """
        obligation = self.get_object()
        try:
            Ledger.cancel_obligation(
                obligation, reason=request.data.get("reason", ""), user=request.user
            )
        except DjangoValidationError as e:
            return Response({"error": e.messages}, status=status.HTTP_400_BAD_REQUEST)

        return Response({"status": obligation.status, "notes": obligation.notes})

    @action(detail=False, methods=["get"])
    def summary(self, request):
        """
        Outstanding quantity per product code.

        GET /api/ledgerman/obligations/summary/
        """
        return Response(
            [
                {
                    "product_code": total.product_code,
                    "quantity_pending": total.quantity_pending,
                    "obligations": total.obligations,
                }
                for total in Ledger.outstanding_summary()
            ]
        )

    def perform_destroy(self, instance):
        if instance.status != ObligationStatus.PENDING:
            raise DRFValidationError({"status": "Apenas pendências em aberto podem ser removidas."})
        instance.delete()


class CollectionViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Collection.

    list: List all collections
    create: Create a collection with its line items
    retrieve: Get a specific collection by UUID
    update: Update a collection (items frozen once completed)
    destroy: Delete a collection
    status: Change status (completing it reconciles obligations)
    reconcile: Explicitly reconcile a completed collection
    """

    permission_classes = [IsAuthenticated]
    queryset = Collection.objects.prefetch_related("items")
    serializer_class = CollectionSerializer
    lookup_field = "uuid"

    @action(detail=True, methods=["post"], url_path="status")
    def change_status(self, request, uuid=None):
        """
        Change the collection status.

        POST /api/ledgerman/collections/{uuid}/status/
        {
            "status": "completed"
        }
        """
        collection = self.get_object()
        serializer = CollectionStatusSerializer(data=request.data)

        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            result = Ledger.update_status(
                collection, serializer.validated_data["status"], user=request.user
            )
        except LedgerError as e:
            return error_response(e)

        return Response(
            {
                "status": collection.status,
                "completed_at": collection.completed_at,
                "reconciliation": result.as_dict() if result else None,
            }
        )

    @action(detail=True, methods=["post"])
    def reconcile(self, request, uuid=None):
        """
        Reconcile a completed collection (no-op if already reconciled).

        POST /api/ledgerman/collections/{uuid}/reconcile/
        """
        collection = self.get_object()

        if not collection.is_completed:
            return error_response(
                ValidationError("INVALID_STATUS", status=collection.status)
            )

        try:
            result = Ledger.reconcile(collection, user=request.user)
        except LedgerError as e:
            return error_response(e)

        return Response(
            result.as_dict(),
            status=status.HTTP_200_OK if result.duplicate else status.HTTP_201_CREATED,
        )


class ReconciliationViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for Reconciliation log (read-only).

    list: List all reconciliations
    retrieve: Get a specific reconciliation
    """

    permission_classes = [IsAuthenticated]
    queryset = Reconciliation.objects.select_related("collection")
    serializer_class = ReconciliationSerializer
