"""
Location model — where stock lots are kept.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from lotledger.exceptions import ValidationError
from lotledger.models.enums import LocationType


class Location(models.Model):
    """
    A place that holds stock lots.

    Locations form a loose hierarchy through ``parent``
    (warehouse > aisle > rack > bin). Deleting a location is blocked
    while any lot, movement or child location still points at it.

    Examples:
        wh = Location.objects.create(name='Warehouse A', type=LocationType.WAREHOUSE)
        Location.objects.create(name='A-1', type=LocationType.AISLE, parent=wh)
    """

    name = models.CharField(
        max_length=100,
        unique=True,
        verbose_name=_('Name'),
    )
    type = models.CharField(
        max_length=20,
        choices=LocationType.choices,
        default=LocationType.BIN,
        verbose_name=_('Type'),
    )
    parent = models.ForeignKey(
        'self',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='children',
        verbose_name=_('Parent'),
    )
    capacity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        null=True,
        blank=True,
        verbose_name=_('Capacity'),
    )
    description = models.TextField(blank=True, default='', verbose_name=_('Description'))

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _('Location')
        verbose_name_plural = _('Locations')
        ordering = ['name']

    @property
    def path(self) -> str:
        """Hierarchy rendered root first, e.g. 'Warehouse A / A-1 / A-1-1'."""
        parts = []
        node, seen = self, set()
        while node is not None and node.pk not in seen:
            seen.add(node.pk)
            parts.append(node.name)
            node = node.parent
        return ' / '.join(reversed(parts))

    def is_referenced(self) -> bool:
        """Is any lot, movement or child location still pointing here?"""
        from lotledger.models.movement import Movement

        if self.lots.exists() or self.children.exists():
            return True
        return Movement.objects.filter(
            models.Q(from_location=self) | models.Q(to_location=self)
        ).exists()

    def delete(self, *args, **kwargs):
        if self.is_referenced():
            raise ValidationError('LOCATION_IN_USE', location=self.name)
        return super().delete(*args, **kwargs)

    def __str__(self) -> str:
        return self.name
