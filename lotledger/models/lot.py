"""
StockLot model — a received batch of an item at a location.
"""

import logging
from datetime import date
from decimal import Decimal

from django.db import models
from django.db.models import Q, Sum
from django.db.models.functions import Coalesce
from django.utils.translation import gettext_lazy as _

logger = logging.getLogger('lotledger')


class StockLotQuerySet(models.QuerySet):
    """Custom QuerySet for StockLot with convenience filters."""

    def for_item(self, item):
        return self.filter(item=item)

    def at_location(self, location):
        return self.filter(location=location)

    def in_stock(self):
        """Lots with remaining quantity."""
        return self.filter(quantity__gt=0)

    def expiring_before(self, day):
        """Lots expiring on or before the given date."""
        return self.filter(expiry_date__isnull=False, expiry_date__lte=day)

    def fefo(self):
        """First-expired, first-out ordering (no expiry last, then oldest)."""
        return self.order_by(
            models.F('expiry_date').asc(nulls_last=True),
            'received_date',
            'pk',
        )


class StockLot(models.Model):
    """
    Quantity of one item, from one receipt, at one location.

    Rules:
    - Created only by ledger.receive() (or a partial ledger.transfer())
    - quantity only changes through ledger.pick/transfer/adjust
    - quantity >= 0, enforced by the database and by the ledger
    - version increments on every ledger mutation (compare-and-swap)
    """

    item = models.ForeignKey(
        'lotledger.Item',
        on_delete=models.PROTECT,
        related_name='lots',
        verbose_name=_('Item'),
    )
    lot_number = models.CharField(max_length=64, verbose_name=_('Lot number'))
    location = models.ForeignKey(
        'lotledger.Location',
        on_delete=models.PROTECT,
        related_name='lots',
        verbose_name=_('Location'),
    )
    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal('0'),
        verbose_name=_('Quantity'),
    )
    unit_cost = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        default=Decimal('0'),
        verbose_name=_('Unit cost'),
    )
    expiry_date = models.DateField(null=True, blank=True, db_index=True, verbose_name=_('Expiry date'))
    received_date = models.DateField(default=date.today, verbose_name=_('Received date'))
    supplier = models.ForeignKey(
        'lotledger.Supplier',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='lots',
        verbose_name=_('Supplier'),
    )
    parent = models.ForeignKey(
        'self',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='splits',
        verbose_name=_('Split from'),
    )
    notes = models.TextField(blank=True, default='', verbose_name=_('Notes'))
    version = models.PositiveIntegerField(default=0, editable=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = StockLotQuerySet.as_manager()

    class Meta:
        verbose_name = _('Stock lot')
        verbose_name_plural = _('Stock lots')
        ordering = ['item', 'lot_number']
        constraints = [
            models.UniqueConstraint(
                fields=['item', 'lot_number'],
                name='unique_lot_number_per_item',
            ),
            models.CheckConstraint(
                condition=Q(quantity__gte=0),
                name='stock_lot_quantity_non_negative',
            ),
        ]
        indexes = [
            models.Index(fields=['item', 'location'], name='lotledger_lot_item_loc_idx'),
        ]

    @property
    def value(self) -> Decimal:
        return self.quantity * self.unit_cost

    @property
    def is_expired(self) -> bool:
        if self.expiry_date is None:
            return False
        return date.today() > self.expiry_date

    def days_to_expiry(self, today: date | None = None) -> int | None:
        """Days until expiry (negative once expired), None without expiry."""
        if self.expiry_date is None:
            return None
        return (self.expiry_date - (today or date.today())).days

    def ledger_quantity(self) -> Decimal:
        """
        Quantity implied by the movements that touched this lot.

        in/out/adjust on the lot itself, plus the split side of
        partial transfers (+q on the child, -q on the source).
        Full relocations do not change quantity.
        """
        from lotledger.models.enums import MovementType
        from lotledger.models.movement import Movement

        def total(qs):
            return qs.aggregate(t=Coalesce(Sum('quantity'), Decimal('0')))['t']

        own = Movement.objects.filter(lot=self)
        received = total(own.filter(type=MovementType.IN))
        picked = total(own.filter(type=MovementType.OUT))
        adjusted = total(own.filter(type=MovementType.ADJUST))
        split_in = total(own.filter(type=MovementType.TRANSFER, source_lot__isnull=False))
        split_out = total(Movement.objects.filter(source_lot=self, type=MovementType.TRANSFER))

        return received - picked + adjusted + split_in - split_out

    def recalculate(self) -> Decimal:
        """
        Recalculate quantity from Movements.

        Use for integrity audits and correction after a detected drift.

        Returns:
            New calculated quantity
        """
        total = self.ledger_quantity()

        if total != self.quantity:
            old = self.quantity
            self.quantity = total
            self.save(update_fields=['quantity', 'updated_at'])
            logger.warning(
                f"StockLot {self.pk} recalculated: {old} -> {total} "
                f"(diff: {total - old})"
            )

        return total

    def __str__(self) -> str:
        return f"{self.lot_number} [{self.location}]: {self.quantity}"
