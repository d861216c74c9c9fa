"""
Movement model — Immutable ledger of stock-affecting events.
"""

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from lotledger.models.enums import MovementType


class MovementQuerySet(models.QuerySet):

    def for_item(self, item):
        return self.filter(item=item)

    def of_type(self, movement_type):
        return self.filter(type=movement_type)

    def newest_first(self):
        return self.order_by('-created_at', '-pk')


class Movement(models.Model):
    """
    Immutable record of one stock-affecting event.

    Rules:
    - NEVER update() or delete()
    - Corrections are new ADJUST movements
    - Written by the ledger in the same transaction as the lot change

    quantity is a magnitude for IN/OUT/TRANSFER and a signed delta for ADJUST.
    """

    type = models.CharField(
        max_length=10,
        choices=MovementType.choices,
        db_index=True,
        verbose_name=_('Type'),
    )
    item = models.ForeignKey(
        'lotledger.Item',
        on_delete=models.PROTECT,
        related_name='movements',
        verbose_name=_('Item'),
    )
    lot = models.ForeignKey(
        'lotledger.StockLot',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='movements',
        verbose_name=_('Lot'),
    )
    source_lot = models.ForeignKey(
        'lotledger.StockLot',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='split_movements',
        verbose_name=_('Source lot'),
        help_text=_('Set on partial transfers: the lot the quantity was split from'),
    )
    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        verbose_name=_('Quantity'),
        help_text=_('Magnitude for in/out/transfer, signed delta for adjust'),
    )
    from_location = models.ForeignKey(
        'lotledger.Location',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('From'),
    )
    to_location = models.ForeignKey(
        'lotledger.Location',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('To'),
    )
    unit_cost = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        default=Decimal('0'),
        verbose_name=_('Unit cost'),
    )

    customer = models.ForeignKey(
        'lotledger.Customer',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='movements',
        verbose_name=_('Customer'),
    )
    supplier = models.ForeignKey(
        'lotledger.Supplier',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='movements',
        verbose_name=_('Supplier'),
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('User'),
    )

    reason = models.CharField(max_length=255, verbose_name=_('Reason'))
    reference_number = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Reference'))
    notes = models.TextField(blank=True, default='', verbose_name=_('Notes'))
    created_at = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Created at'))

    objects = MovementQuerySet.as_manager()

    class Meta:
        verbose_name = _('Movement')
        verbose_name_plural = _('Movements')
        ordering = ['created_at', 'pk']
        indexes = [
            models.Index(fields=['item', 'created_at'], name='lotledger_mv_item_ts_idx'),
            models.Index(fields=['lot', 'created_at'], name='lotledger_mv_lot_ts_idx'),
        ]

    @property
    def signed_quantity(self) -> Decimal:
        """Net effect on the item's on-hand total."""
        if self.type == MovementType.IN:
            return self.quantity
        if self.type == MovementType.OUT:
            return -self.quantity
        if self.type == MovementType.ADJUST:
            return self.quantity
        return Decimal('0')

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValueError(
                "Movements are immutable. "
                "To correct one, record a new adjust movement."
            )
        if not self.reason:
            raise ValueError("Reason is required")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError(
            "Movements are immutable. "
            "To reverse one, record a new adjust movement."
        )

    def __str__(self) -> str:
        sign = '+' if self.signed_quantity > 0 else ''
        return f"{self.type} {sign}{self.signed_quantity} | {self.reason}"
