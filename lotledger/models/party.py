"""
Counterparties: suppliers deliver stock in, customers take it out.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Party(models.Model):
    name = models.CharField(max_length=200, verbose_name=_('Name'))
    contact_name = models.CharField(max_length=200, blank=True, default='', verbose_name=_('Contact'))
    email = models.EmailField(blank=True, default='', verbose_name=_('Email'))
    phone = models.CharField(max_length=50, blank=True, default='', verbose_name=_('Phone'))
    address = models.TextField(blank=True, default='', verbose_name=_('Address'))
    notes = models.TextField(blank=True, default='', verbose_name=_('Notes'))

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ['name']

    def __str__(self) -> str:
        return self.name


class Supplier(Party):

    class Meta(Party.Meta):
        verbose_name = _('Supplier')
        verbose_name_plural = _('Suppliers')


class Customer(Party):

    class Meta(Party.Meta):
        verbose_name = _('Customer')
        verbose_name_plural = _('Customers')
