"""
Item model — what is stocked.
"""

from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _

from lotledger.exceptions import ValidationError


class Item(models.Model):
    """
    A stockable article identified by its SKU.

    Rules:
    - SKU is immutable once created
    - Items are never hard-deleted (lots and movements reference them)
    """

    sku = models.CharField(
        max_length=64,
        unique=True,
        verbose_name=_('SKU'),
    )
    name = models.CharField(max_length=200, verbose_name=_('Name'))
    description = models.TextField(blank=True, default='', verbose_name=_('Description'))
    unit = models.CharField(
        max_length=20,
        default='pcs',
        verbose_name=_('Unit'),
        help_text=_('Unit of measure (pcs, kg, m, ...)'),
    )
    category = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Category'))
    barcode = models.CharField(max_length=64, blank=True, default='', verbose_name=_('Barcode'))
    supplier = models.ForeignKey(
        'lotledger.Supplier',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='items',
        verbose_name=_('Default supplier'),
    )

    min_stock_threshold = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal('0'),
        verbose_name=_('Minimum stock'),
        help_text=_('low_stock alert fires while on-hand is below this value'),
    )
    reorder_point = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal('0'),
        verbose_name=_('Reorder point'),
    )
    reorder_quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal('0'),
        verbose_name=_('Reorder quantity'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Item')
        verbose_name_plural = _('Items')
        ordering = ['sku']

    def save(self, *args, **kwargs):
        if self.pk:
            stored = type(self).objects.filter(pk=self.pk).values_list('sku', flat=True).first()
            if stored is not None and stored != self.sku:
                raise ValidationError('SKU_IMMUTABLE', sku=stored, attempted=self.sku)
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError('ITEM_UNDELETABLE', sku=self.sku)

    def __str__(self) -> str:
        return f"{self.sku} - {self.name}"
