"""
Ledgerman Admin - Django admin for Obligation, Collection and Reconciliation.

Obligation and Collection use simple_history's admin so every balance
change and status transition can be audited from the change page.
"""

from django.contrib import admin
from simple_history.admin import SimpleHistoryAdmin

from ledgerman.models import CollectedLineItem, Collection, Obligation, Reconciliation


# ── Obligation ──


@admin.register(Obligation)
class ObligationAdmin(SimpleHistoryAdmin):
    """Admin for pending obligations."""

    list_display = ("product_code", "product_description", "quantity_pending", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("product_code", "product_description")
    date_hierarchy = "created_at"
    readonly_fields = ("uuid", "status", "version", "updated_at")

    def get_readonly_fields(self, request, obj=None):
        # Balances move only through reconciliation
        if obj is not None:
            return (*self.readonly_fields, "quantity_pending")
        return self.readonly_fields

    def save_model(self, request, obj, form, change):
        obj._history_user = request.user
        if change:
            obj.save(update_fields=[*form.changed_data, "updated_at"])
        else:
            obj.save()


# ── Collection ──


class CollectedLineItemInline(admin.TabularInline):
    """Inline for collected items."""

    model = CollectedLineItem
    extra = 1
    fields = ("product_code", "product_description", "quantity")

    def has_change_permission(self, request, obj=None):
        if obj is not None and obj.is_completed:
            return False
        return super().has_change_permission(request, obj)

    def has_add_permission(self, request, obj=None):
        if obj is not None and obj.is_completed:
            return False
        return super().has_add_permission(request, obj)

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.is_completed:
            return False
        return super().has_delete_permission(request, obj)


@admin.register(Collection)
class CollectionAdmin(SimpleHistoryAdmin):
    """Admin for collections. Status changes go through the API or the service."""

    list_display = ("code", "client_name", "status", "completed_at", "created_at")
    list_filter = ("status",)
    search_fields = ("code", "client_name")
    inlines = [CollectedLineItemInline]
    readonly_fields = ("uuid", "code", "status", "completed_at", "created_at", "updated_at")


# ── Reconciliation ──


@admin.register(Reconciliation)
class ReconciliationAdmin(admin.ModelAdmin):
    """Admin for the reconciliation log (read-only)."""

    list_display = ("collection", "updated_count", "shortfall_quantity", "created_by", "created_at")
    search_fields = ("collection__code",)
    raw_id_fields = ("collection",)
    readonly_fields = ("collection", "updated_count", "updates", "shortfalls", "created_by", "created_at")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
