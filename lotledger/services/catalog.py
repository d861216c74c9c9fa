"""
Ledger catalog — explicit creation and maintenance of items and locations.
"""

import logging
from decimal import Decimal

from lotledger.exceptions import ValidationError
from lotledger.models.enums import LocationType
from lotledger.models.item import Item
from lotledger.models.location import Location
from lotledger.models.party import Supplier
from lotledger.services.atomic import ledger_atomic
from lotledger.services.movements import resolve, to_decimal

logger = logging.getLogger('lotledger')

ITEM_MUTABLE_FIELDS = (
    'name', 'description', 'unit', 'category', 'barcode', 'supplier',
    'min_stock_threshold', 'reorder_point', 'reorder_quantity',
)

ITEM_QUANTITY_FIELDS = ('min_stock_threshold', 'reorder_point', 'reorder_quantity')


class LedgerCatalog:
    """Item and location maintenance."""

    @classmethod
    def create_item(cls, sku: str, name: str, unit: str = 'pcs',
                    min_stock_threshold=Decimal('0'), reorder_point=Decimal('0'),
                    reorder_quantity=Decimal('0'), category: str = '',
                    description: str = '', barcode: str = '', supplier=None) -> Item:
        """
        Register a new item.

        Raises:
            ValidationError('FIELD_REQUIRED'): If sku or name is blank
            ValidationError('DUPLICATE_SKU'): If the SKU is taken
            ValidationError('INVALID'): If a threshold is negative
        """
        sku = (sku or '').strip()
        name = (name or '').strip()
        if not sku:
            raise ValidationError('FIELD_REQUIRED', field='sku')
        if not name:
            raise ValidationError('FIELD_REQUIRED', field='name')

        values = cls._quantities(
            min_stock_threshold=min_stock_threshold,
            reorder_point=reorder_point,
            reorder_quantity=reorder_quantity,
        )

        with ledger_atomic():
            if Item.objects.filter(sku=sku).exists():
                raise ValidationError('DUPLICATE_SKU', sku=sku)
            if supplier is not None:
                supplier = resolve(Supplier, supplier, 'NOT_FOUND')

            item = Item.objects.create(
                sku=sku,
                name=name,
                unit=unit or 'pcs',
                category=category,
                description=description,
                barcode=barcode,
                supplier=supplier,
                **values,
            )

        logger.info("ledger.item.created", extra={"sku": sku, "item_id": item.pk})
        return item

    @classmethod
    def update_item(cls, item, **changes) -> Item:
        """
        Change an item's mutable fields and re-check its alerts.

        Raises:
            ValidationError('SKU_IMMUTABLE'): If sku is among the changes
            ValidationError('FIELD_REQUIRED'): If name is blanked
            ValidationError('INVALID'): For unknown fields or negative thresholds
            NotFoundError('ITEM_NOT_FOUND'): If the item does not exist
        """
        if 'sku' in changes:
            raise ValidationError('SKU_IMMUTABLE', attempted=changes['sku'])

        unknown = set(changes) - set(ITEM_MUTABLE_FIELDS)
        if unknown:
            raise ValidationError('INVALID', fields=sorted(unknown))

        if 'name' in changes:
            changes['name'] = (changes['name'] or '').strip()
            if not changes['name']:
                raise ValidationError('FIELD_REQUIRED', field='name')

        changes.update(cls._quantities(**{
            k: v for k, v in changes.items() if k in ITEM_QUANTITY_FIELDS
        }))

        with ledger_atomic():
            item = resolve(Item, item, 'ITEM_NOT_FOUND')
            if changes.get('supplier') is not None:
                changes['supplier'] = resolve(Supplier, changes['supplier'], 'NOT_FOUND')

            for field, value in changes.items():
                setattr(item, field, value)
            item.save()

            from lotledger.services.alerts import evaluate_item
            evaluate_item(item)

        return item

    @classmethod
    def create_location(cls, name: str, type: str = LocationType.BIN, parent=None,
                        capacity=None, description: str = '') -> Location:
        """
        Register a new location.

        Raises:
            ValidationError('FIELD_REQUIRED'): If name is blank
            ValidationError('DUPLICATE_LOCATION'): If the name is taken
            ValidationError('INVALID'): For an unknown type or negative capacity
            NotFoundError('LOCATION_NOT_FOUND'): If parent does not exist
        """
        name = (name or '').strip()
        if not name:
            raise ValidationError('FIELD_REQUIRED', field='name')
        if type not in LocationType.values:
            raise ValidationError('INVALID', field='type', value=type)
        if capacity is not None:
            capacity = to_decimal(capacity, 'capacity', 'INVALID')
            if capacity < 0:
                raise ValidationError('INVALID', field='capacity', value=capacity)

        with ledger_atomic():
            if Location.objects.filter(name=name).exists():
                raise ValidationError('DUPLICATE_LOCATION', name=name)
            if parent is not None:
                parent = resolve(Location, parent, 'LOCATION_NOT_FOUND')

            location = Location.objects.create(
                name=name,
                type=type,
                parent=parent,
                capacity=capacity,
                description=description,
            )

        logger.info("ledger.location.created", extra={"location": name, "location_id": location.pk})
        return location

    @classmethod
    def delete_location(cls, location) -> None:
        """
        Delete an unused location.

        Raises:
            ValidationError('LOCATION_IN_USE'): If lots, movements or children reference it
            NotFoundError('LOCATION_NOT_FOUND'): If it does not exist
        """
        with ledger_atomic():
            location = resolve(Location, location, 'LOCATION_NOT_FOUND')
            location.delete()
        logger.info("ledger.location.deleted", extra={"location": location.name})

    @classmethod
    def _quantities(cls, **values) -> dict:
        result = {}
        for field, value in values.items():
            value = to_decimal(value if value is not None else 0, field, 'INVALID')
            if value < 0:
                raise ValidationError('INVALID', field=field, value=value)
            result[field] = value
        return result
