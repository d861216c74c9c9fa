"""
LotLedger Admin with Unfold theme.

To use, add 'lotledger.contrib.admin_unfold' to INSTALLED_APPS after 'lotledger'.
The basic admin then skips registration and these classes are used instead.
"""

import logging

from django.contrib import admin
from django.utils.translation import gettext_lazy as _
from unfold.decorators import display

from lotledger.admin import (
    ItemAdminMixin,
    LocationAdminMixin,
    ReadOnlyMixin,
    dismiss_alerts,
    export_lots_csv,
    export_movements_csv,
)
from lotledger.contrib.admin_unfold.base import BaseModelAdmin, BaseTabularInline, format_quantity
from lotledger.models import (
    Alert,
    AlertSeverity,
    AlertStatus,
    Customer,
    Item,
    Location,
    Movement,
    MovementType,
    StockLot,
    Supplier,
)

logger = logging.getLogger(__name__)


def _format_datetime(dt):
    if dt:
        return dt.strftime('%Y-%m-%d · %H:%M')
    return '-'


def _format_date(d):
    if d:
        return d.strftime('%Y-%m-%d')
    return '-'


# =============================================================================
# CATALOG
# =============================================================================


class StockLotInline(BaseTabularInline):
    model = StockLot
    fields = ['lot_number', 'location', 'quantity', 'unit_cost', 'expiry_date']
    readonly_fields = fields
    ordering = ['expiry_date', 'received_date']

    def get_queryset(self, request):
        return super().get_queryset(request).filter(quantity__gt=0).select_related('location')


@admin.register(Item)
class ItemAdmin(ItemAdminMixin, BaseModelAdmin):
    list_display = ['sku', 'name', 'category', 'unit', 'threshold_display', 'supplier']
    list_filter = ['category', 'supplier']
    search_fields = ['sku', 'name', 'barcode']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [StockLotInline]
    warn_unsaved_form = True

    @display(description=_('Min stock'))
    def threshold_display(self, obj):
        return format_quantity(obj.min_stock_threshold, obj.unit)


@admin.register(Location)
class LocationAdmin(LocationAdminMixin, BaseModelAdmin):
    list_display = ['name', 'type', 'path_display', 'capacity']
    list_filter = ['type']
    search_fields = ['name']
    readonly_fields = ['created_at']
    warn_unsaved_form = True

    @display(description=_('Path'))
    def path_display(self, obj):
        return obj.path


@admin.register(Supplier)
class SupplierAdmin(BaseModelAdmin):
    list_display = ['name', 'contact_name', 'email', 'phone']
    search_fields = ['name', 'contact_name', 'email']


@admin.register(Customer)
class CustomerAdmin(BaseModelAdmin):
    list_display = ['name', 'contact_name', 'email', 'phone']
    search_fields = ['name', 'contact_name', 'email']


# =============================================================================
# LEDGER (read-only)
# =============================================================================


@admin.register(StockLot)
class StockLotAdmin(ReadOnlyMixin, BaseModelAdmin):
    """Lots change only through ledger.receive/pick/transfer/adjust."""

    list_display = ['lot_number', 'item', 'location', 'quantity_display', 'unit_cost',
                    'expiry_display']
    list_filter = ['location', 'expiry_date']
    search_fields = ['lot_number', 'item__sku', 'item__name']
    list_select_related = ['item', 'location']
    actions = [export_lots_csv]

    @display(description=_('Quantity'))
    def quantity_display(self, obj):
        return format_quantity(obj.quantity, obj.item.unit)

    @display(description=_('Expiry'), label={'EXPIRED': 'danger', 'VALID': 'success', '-': 'info'})
    def expiry_display(self, obj):
        if obj.expiry_date is None:
            return '-'
        return 'EXPIRED' if obj.is_expired else 'VALID'


@admin.register(Movement)
class MovementAdmin(ReadOnlyMixin, BaseModelAdmin):
    """Immutable audit trail."""

    list_display = ['created_at_display', 'type_display', 'item', 'lot', 'quantity_display',
                    'from_location', 'to_location', 'reason', 'user']
    list_filter = ['type', 'created_at']
    search_fields = ['reason', 'reference_number', 'item__sku', 'lot__lot_number']
    list_select_related = ['item', 'lot', 'from_location', 'to_location', 'user']
    actions = [export_movements_csv]

    @display(description=_('Date'))
    def created_at_display(self, obj):
        return _format_datetime(obj.created_at)

    @display(
        description=_('Type'),
        label={
            MovementType.IN: 'success',
            MovementType.OUT: 'danger',
            MovementType.TRANSFER: 'info',
            MovementType.ADJUST: 'warning',
        },
    )
    def type_display(self, obj):
        return obj.type

    @display(description=_('Quantity'))
    def quantity_display(self, obj):
        signed = obj.signed_quantity
        formatted = format_quantity(abs(obj.quantity), obj.item.unit)
        if signed > 0:
            return f'+{formatted}'
        if signed < 0:
            return f'-{formatted}'
        return formatted


@admin.register(Alert)
class AlertAdmin(ReadOnlyMixin, BaseModelAdmin):
    list_display = ['created_at_display', 'type', 'severity_display', 'item', 'lot',
                    'status_display', 'message']
    list_filter = ['status', 'type', 'severity']
    search_fields = ['message', 'item__sku']
    list_select_related = ['item', 'lot']
    actions = [dismiss_alerts]

    @display(description=_('Created'))
    def created_at_display(self, obj):
        return _format_datetime(obj.created_at)

    @display(
        description=_('Severity'),
        label={
            AlertSeverity.LOW: 'info',
            AlertSeverity.MEDIUM: 'warning',
            AlertSeverity.HIGH: 'danger',
        },
    )
    def severity_display(self, obj):
        return obj.severity

    @display(
        description=_('Status'),
        label={
            AlertStatus.ACTIVE: 'danger',
            AlertStatus.DISMISSED: 'info',
            AlertStatus.RESOLVED: 'success',
        },
    )
    def status_display(self, obj):
        return obj.status
