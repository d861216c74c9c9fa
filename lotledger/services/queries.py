"""
Ledger queries — read-only operations.

Nothing here takes locks or writes. Reads see the latest committed
ledger state (read-committed is enough for this path).
"""

import logging
from datetime import date, datetime, time
from decimal import Decimal

from django.db.models import Count, DecimalField, F, Q, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from lotledger.conf import ledger_settings
from lotledger.models.alert import Alert
from lotledger.models.enums import MovementType
from lotledger.models.item import Item
from lotledger.models.lot import StockLot
from lotledger.models.movement import Movement

logger = logging.getLogger('lotledger')


class LedgerQueries:
    """Read-only ledger query methods."""

    @classmethod
    def on_hand(cls, item, location=None) -> Decimal:
        """
        Total quantity of an item across its lots.

        Args:
            item: Item object
            location: Specific location (None = all)
        """
        lots = StockLot.objects.filter(item=item)
        if location is not None:
            lots = lots.filter(location=location)
        return lots.aggregate(
            t=Coalesce(Sum('quantity'), Decimal('0'))
        )['t']

    @classmethod
    def lots(cls, item=None, location=None, include_empty: bool = False):
        """On-hand by lot, with item and location joined."""
        qs = StockLot.objects.select_related('item', 'location')

        if item is not None:
            qs = qs.filter(item=item)

        if location is not None:
            qs = qs.filter(location=location)

        if not include_empty:
            qs = qs.in_stock()

        return qs

    @classmethod
    def valuation(cls, item=None, location=None) -> Decimal:
        """Σ(quantity × unit_cost) over the matching lots."""
        qs = cls.lots(item=item, location=location)
        return sum(
            (quantity * unit_cost for quantity, unit_cost in qs.values_list('quantity', 'unit_cost')),
            Decimal('0'),
        )

    @classmethod
    def movements(cls, item=None, lot=None, type=None,
                  since: date | datetime | None = None,
                  until: date | datetime | None = None,
                  limit: int | None = None):
        """
        Movement ledger, newest first.

        Args:
            item, lot, type: Optional filters
            since / until: Inclusive bounds; plain dates cover whole days
            limit: Max rows (None = MOVEMENT_HISTORY_LIMIT setting, 0 = all)
        """
        qs = Movement.objects.select_related(
            'item', 'lot', 'from_location', 'to_location', 'user',
        ).newest_first()

        if item is not None:
            qs = qs.filter(item=item)
        if lot is not None:
            qs = qs.filter(lot=lot)
        if type is not None:
            qs = qs.filter(type=type)
        if since is not None:
            qs = qs.filter(created_at__gte=cls._bound(since, time.min))
        if until is not None:
            qs = qs.filter(created_at__lte=cls._bound(until, time.max))

        if limit is None:
            limit = ledger_settings.MOVEMENT_HISTORY_LIMIT
        if limit:
            qs = qs[:limit]
        return qs

    @classmethod
    def item_totals(cls):
        """Items annotated with total_quantity, total_value and lot_count (non-empty lots)."""
        money = DecimalField(max_digits=24, decimal_places=7)
        return Item.objects.annotate(
            total_quantity=Coalesce(Sum('lots__quantity'), Decimal('0')),
            total_value=Coalesce(
                Sum(F('lots__quantity') * F('lots__unit_cost'), output_field=money),
                Decimal('0'),
                output_field=money,
            ),
            lot_count=Count('lots', filter=Q(lots__quantity__gt=0)),
        ).order_by('sku')

    @classmethod
    def low_stock_items(cls):
        """Items whose on-hand total is below their minimum threshold."""
        return cls.item_totals().filter(total_quantity__lt=F('min_stock_threshold'))

    @classmethod
    def active_alerts(cls, limit: int | None = None):
        qs = Alert.objects.active().select_related('item', 'lot')
        if limit:
            qs = qs[:limit]
        return qs

    @classmethod
    def dashboard(cls, today: date | None = None) -> dict:
        """
        Headline numbers for the dashboard.

        Returns:
            dict with total_value, low_stock_count, movements_today,
            total_items, recent_movements (10) and active_alerts (5)
        """
        today = today or date.today()
        todays = cls.movements(since=today, until=today, limit=0)

        return {
            'total_value': cls.valuation(),
            'low_stock_count': cls.low_stock_items().count(),
            'movements_today': todays.count(),
            'total_items': Item.objects.count(),
            'recent_movements': list(todays[:10]),
            'active_alerts': list(cls.active_alerts(limit=5)),
        }

    @classmethod
    def reconcile(cls, item) -> dict:
        """
        Conservation check for one item.

        on_hand (Σ lot quantities) must equal ledger_total
        (Σ in − Σ out + Σ adjust; transfers net to zero).
        """
        on_hand = cls.on_hand(item)

        def total(movement_type):
            return Movement.objects.filter(item=item, type=movement_type).aggregate(
                t=Coalesce(Sum('quantity'), Decimal('0'))
            )['t']

        ledger_total = (
            total(MovementType.IN)
            - total(MovementType.OUT)
            + total(MovementType.ADJUST)
        )
        balanced = on_hand == ledger_total

        if not balanced:
            logger.warning(
                "ledger.reconcile.drift",
                extra={
                    "sku": item.sku,
                    "on_hand": str(on_hand),
                    "ledger_total": str(ledger_total),
                },
            )

        return {
            'on_hand': on_hand,
            'ledger_total': ledger_total,
            'balanced': balanced,
        }

    @classmethod
    def _bound(cls, value, clock: time):
        if isinstance(value, datetime):
            return value
        bound = datetime.combine(value, clock)
        if timezone.is_naive(bound) and timezone.is_aware(timezone.now()):
            bound = timezone.make_aware(bound)
        return bound
