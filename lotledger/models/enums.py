"""
Enums for LotLedger models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class LocationType(models.TextChoices):
    """
    Level of a location in the storage hierarchy.

    The hierarchy is loose: a bin usually sits in a rack, a rack in an
    aisle, an aisle in a warehouse, but nothing enforces it.
    """
    WAREHOUSE = 'warehouse', _('Warehouse')
    AISLE = 'aisle', _('Aisle')
    RACK = 'rack', _('Rack')
    BIN = 'bin', _('Bin')


class MovementType(models.TextChoices):
    """
    Kind of stock-affecting event.

    IN:       Receive. Creates a lot, quantity enters stock.
    OUT:      Pick. Quantity leaves stock (to a customer).
    TRANSFER: Quantity changes location. On-hand unchanged.
    ADJUST:   Correction. Quantity is a signed delta.
    """
    IN = 'in', _('In')
    OUT = 'out', _('Out')
    TRANSFER = 'transfer', _('Transfer')
    ADJUST = 'adjust', _('Adjust')


class AlertType(models.TextChoices):
    LOW_STOCK = 'low_stock', _('Low stock')
    EXPIRY_WARNING = 'expiry_warning', _('Expiry warning')
    NEGATIVE_BALANCE = 'negative_balance', _('Negative balance')


class AlertSeverity(models.TextChoices):
    LOW = 'low', _('Low')
    MEDIUM = 'medium', _('Medium')
    HIGH = 'high', _('High')


class AlertStatus(models.TextChoices):
    """Alert lifecycle status."""
    ACTIVE = 'active', _('Active')          # Condition detected
    DISMISSED = 'dismissed', _('Dismissed') # Acknowledged by a user
    RESOLVED = 'resolved', _('Resolved')    # Condition cleared on re-evaluation
