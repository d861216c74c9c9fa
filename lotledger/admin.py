"""
LotLedger Admin — basic fallback (works without Unfold).

For the Unfold-styled version, add 'lotledger.contrib.admin_unfold' to INSTALLED_APPS.
When the Unfold contrib is loaded, this module only provides the shared actions
(avoids double registration).

- Item / Location / Supplier / Customer: list + edit
- StockLot: read-only (quantities only change through the ledger)
- Movement: read-only audit trail
- Alert: read-only with "dismiss" action
"""

import logging

from django.apps import apps
from django.contrib import admin, messages
from django.http import HttpResponse
from django.utils.translation import gettext_lazy as _

from lotledger.exceptions import LedgerError
from lotledger.reports import MOVEMENT_COLUMNS, MOVEMENT_HEADERS, ON_HAND_COLUMNS, ON_HAND_HEADERS, export_csv

logger = logging.getLogger(__name__)


# =========================================================================
# SHARED ACTIONS
# =========================================================================


def csv_response(content: str, filename: str) -> HttpResponse:
    response = HttpResponse(content, content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


@admin.action(description=_('Export selected lots to CSV'))
def export_lots_csv(modeladmin, request, queryset):
    lots = queryset.select_related('item', 'location')
    return csv_response(export_csv(lots, ON_HAND_COLUMNS, ON_HAND_HEADERS), 'on-hand-inventory.csv')


@admin.action(description=_('Export selected movements to CSV'))
def export_movements_csv(modeladmin, request, queryset):
    movements = queryset.select_related('item', 'user').order_by('-created_at', '-pk')
    return csv_response(export_csv(movements, MOVEMENT_COLUMNS, MOVEMENT_HEADERS), 'stock-movements.csv')


@admin.action(description=_('Dismiss selected alerts'))
def dismiss_alerts(modeladmin, request, queryset):
    from lotledger import ledger
    from lotledger.models import AlertStatus

    count = 0
    for alert in queryset.filter(status=AlertStatus.ACTIVE):
        try:
            ledger.dismiss_alert(alert, user=request.user)
            count += 1
        except LedgerError as exc:
            logger.warning("dismiss_alerts: failed to dismiss %s: %s", alert.pk, exc)

    modeladmin.message_user(request, _('{count} alert(s) dismissed.').format(count=count), messages.SUCCESS)


class ReadOnlyMixin:
    """Records written by the ledger only."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class ItemAdminMixin:
    """SKU is fixed after creation; items are never deleted."""

    def get_readonly_fields(self, request, obj=None):
        fields = list(super().get_readonly_fields(request, obj))
        if obj is not None:
            fields.append('sku')
        return fields

    def has_delete_permission(self, request, obj=None):
        return False


class LocationAdminMixin:
    """Referenced locations cannot be deleted."""

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.is_referenced():
            return False
        return super().has_delete_permission(request, obj)


# Skip registration if the Unfold contrib is installed (it will register its own admins)
if not apps.is_installed('lotledger.contrib.admin_unfold'):
    from lotledger.models import Alert, Customer, Item, Location, Movement, StockLot, Supplier

    # =========================================================================
    # CATALOG ADMINS (editable)
    # =========================================================================

    @admin.register(Item)
    class ItemAdmin(ItemAdminMixin, admin.ModelAdmin):
        list_display = ['sku', 'name', 'category', 'unit', 'min_stock_threshold', 'supplier']
        list_filter = ['category', 'supplier']
        search_fields = ['sku', 'name', 'barcode']
        readonly_fields = ['created_at', 'updated_at']

    @admin.register(Location)
    class LocationAdmin(LocationAdminMixin, admin.ModelAdmin):
        list_display = ['name', 'type', 'parent', 'capacity']
        list_filter = ['type']
        search_fields = ['name']
        readonly_fields = ['created_at']

    @admin.register(Supplier)
    class SupplierAdmin(admin.ModelAdmin):
        list_display = ['name', 'contact_name', 'email', 'phone']
        search_fields = ['name', 'contact_name', 'email']

    @admin.register(Customer)
    class CustomerAdmin(admin.ModelAdmin):
        list_display = ['name', 'contact_name', 'email', 'phone']
        search_fields = ['name', 'contact_name', 'email']

    # =========================================================================
    # STOCK LOT ADMIN (read-only)
    # =========================================================================

    @admin.register(StockLot)
    class StockLotAdmin(ReadOnlyMixin, admin.ModelAdmin):
        """StockLot admin — read-only. Quantities only change via the ledger."""

        list_display = ['lot_number', 'item', 'location', 'quantity', 'unit_cost',
                        'expiry_date', 'is_expired_display']
        list_filter = ['location', 'expiry_date']
        search_fields = ['lot_number', 'item__sku', 'item__name']
        list_select_related = ['item', 'location']
        date_hierarchy = 'received_date'
        actions = [export_lots_csv]

        @admin.display(description=_('Expired?'), boolean=True)
        def is_expired_display(self, obj):
            return obj.is_expired

    # =========================================================================
    # MOVEMENT ADMIN (read-only audit trail)
    # =========================================================================

    @admin.register(Movement)
    class MovementAdmin(ReadOnlyMixin, admin.ModelAdmin):
        """Movement admin — read-only. Immutable audit trail."""

        list_display = ['created_at', 'type', 'item', 'lot', 'quantity',
                        'from_location', 'to_location', 'reason', 'user']
        list_filter = ['type', 'created_at']
        search_fields = ['reason', 'reference_number', 'item__sku', 'lot__lot_number']
        list_select_related = ['item', 'lot', 'from_location', 'to_location', 'user']
        date_hierarchy = 'created_at'
        actions = [export_movements_csv]

    # =========================================================================
    # ALERT ADMIN (read-only with dismiss action)
    # =========================================================================

    @admin.register(Alert)
    class AlertAdmin(ReadOnlyMixin, admin.ModelAdmin):
        """Alert admin — derived by the evaluator; dismiss is the only action."""

        list_display = ['created_at', 'type', 'severity', 'item', 'lot', 'status', 'message']
        list_filter = ['status', 'type', 'severity']
        search_fields = ['message', 'item__sku']
        list_select_related = ['item', 'lot']
        actions = [dismiss_alerts]
