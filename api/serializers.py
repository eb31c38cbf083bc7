"""
Ledgerman API Serializers.
"""

from django.db import transaction
from rest_framework import serializers

from ledgerman.models import (
    CollectedLineItem,
    Collection,
    CollectionStatus,
    Obligation,
    Reconciliation,
)


class ObligationSerializer(serializers.ModelSerializer):
    """Serializer for Obligation model."""

    class Meta:
        model = Obligation
        fields = [
            "id",
            "uuid",
            "product_code",
            "product_description",
            "quantity_pending",
            "status",
            "version",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["uuid", "status", "version", "updated_at"]

    def get_extra_kwargs(self):
        extra_kwargs = super().get_extra_kwargs()
        if self.instance is not None:
            # Balances move only through reconciliation
            extra_kwargs.setdefault("quantity_pending", {})["read_only"] = True
        return extra_kwargs

    def validate_quantity_pending(self, value):
        if value <= 0:
            raise serializers.ValidationError("Quantidade pendente deve ser maior que zero.")
        return value

    def validate_product_code(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Código do produto é obrigatório.")
        return value

    def update(self, instance, validated_data):
        """Write only the submitted fields, on a freshly locked row."""
        with transaction.atomic():
            locked = Obligation.objects.select_for_update().get(pk=instance.pk)
            for attr, value in validated_data.items():
                setattr(locked, attr, value)
            locked.save(update_fields=[*validated_data, "updated_at"])
        return locked


class CollectedLineItemSerializer(serializers.ModelSerializer):
    """Serializer for CollectedLineItem model."""

    class Meta:
        model = CollectedLineItem
        fields = ["id", "product_code", "product_description", "quantity"]

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Quantidade deve ser maior que zero.")
        return value


class CollectionSerializer(serializers.ModelSerializer):
    """
    Serializer for Collection model.

    Line items are written together with the collection and are frozen
    once it is completed.
    """

    items = CollectedLineItemSerializer(many=True, required=False)
    total_quantity = serializers.IntegerField(read_only=True)
    is_reconciled = serializers.SerializerMethodField()

    class Meta:
        model = Collection
        fields = [
            "id",
            "uuid",
            "code",
            "client_name",
            "status",
            "items",
            "total_quantity",
            "is_reconciled",
            "notes",
            "completed_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "uuid",
            "code",
            "status",
            "total_quantity",
            "is_reconciled",
            "completed_at",
            "created_at",
            "updated_at",
        ]

    def get_is_reconciled(self, obj) -> bool:
        return Reconciliation.objects.filter(collection=obj).exists()

    def create(self, validated_data):
        items = validated_data.pop("items", [])
        collection = Collection.objects.create(**validated_data)
        for item in items:
            CollectedLineItem.objects.create(collection=collection, **item)
        return collection

    def update(self, instance, validated_data):
        items = validated_data.pop("items", None)

        if items is not None and instance.is_completed:
            raise serializers.ValidationError(
                {"items": "Itens de uma coleta concluída não podem ser alterados."}
            )

        instance = super().update(instance, validated_data)

        if items is not None:
            instance.items.all().delete()
            for item in items:
                CollectedLineItem.objects.create(collection=instance, **item)

        return instance


class CollectionStatusSerializer(serializers.Serializer):
    """Serializer for Collection status action."""

    status = serializers.ChoiceField(
        choices=CollectionStatus.choices, help_text="New status (e.g., 'completed')"
    )


class ReconciliationSerializer(serializers.ModelSerializer):
    """Serializer for Reconciliation log (read-only)."""

    collection_code = serializers.CharField(source="collection.code", read_only=True)

    class Meta:
        model = Reconciliation
        fields = [
            "id",
            "collection",
            "collection_code",
            "updated_count",
            "updates",
            "shortfalls",
            "created_by",
            "created_at",
        ]
        read_only_fields = fields
