"""
Ledger movements — state-changing operations (receive, pick, transfer, adjust).

Every method runs as one atomic unit:
    validate -> lock lot -> mutate lot -> insert movement -> evaluate alerts -> commit

Any failure rolls back both the lot change and the movement.
"""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation

from django.utils import timezone

from lotledger.conf import ledger_settings
from lotledger.exceptions import (
    ConflictError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from lotledger.models.enums import MovementType
from lotledger.models.item import Item
from lotledger.models.location import Location
from lotledger.models.lot import StockLot
from lotledger.models.movement import Movement
from lotledger.models.party import Customer, Supplier
from lotledger.services.atomic import ledger_atomic

logger = logging.getLogger('lotledger')


def to_decimal(value, field: str = 'quantity', code: str = 'INVALID_QUANTITY',
               max_digits: int = 12, decimal_places: int = 3) -> Decimal:
    """
    Coerce int/str/float input to a Decimal the column can store exactly.

    Rejects garbage, NaN/Infinity, values with more than ``decimal_places``
    decimals and values with more than ``max_digits - decimal_places``
    integer digits.
    """
    if isinstance(value, Decimal):
        number = value
    else:
        try:
            number = Decimal(str(value))
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError(code, field=field, value=value)

    if not number.is_finite():
        raise ValidationError(code, field=field, value=value)

    if number and number.adjusted() >= max_digits - decimal_places:
        raise ValidationError(code, field=field, value=value, max_digits=max_digits)

    if number.as_tuple().exponent < -decimal_places:
        step = Decimal(1).scaleb(-decimal_places)
        if number.quantize(step) != number:
            raise ValidationError(code, field=field, value=value, decimal_places=decimal_places)

    return number


def fit_lot_number(base: str, suffix: str = '') -> str:
    """Trim ``base`` so that base + suffix fits the lot_number column."""
    limit = StockLot._meta.get_field('lot_number').max_length
    return base[:limit - len(suffix)] + suffix


def resolve(model, ref, code: str):
    """Load a model instance from an instance or a primary key."""
    pk = getattr(ref, 'pk', ref)
    if pk is None:
        raise NotFoundError(code, id=None)
    try:
        return model.objects.get(pk=pk)
    except (model.DoesNotExist, ValueError, TypeError):
        raise NotFoundError(code, id=pk)


class LedgerMovements:
    """State-changing ledger methods."""

    @classmethod
    def receive(cls, quantity, item, location, unit_cost=Decimal('0'),
                lot_number='', expiry_date=None, supplier=None, user=None,
                reason='Stock received', reference_number='', notes='',
                received_date=None) -> StockLot:
        """
        Stock entry.

        Creates a new StockLot and one IN movement.
        Lot number is generated (LOT-<timestamp>) when not given.

        Raises:
            ValidationError('INVALID_QUANTITY'): If quantity <= 0 or not storable exactly
            ValidationError('INVALID_COST'): If unit_cost < 0
            ValidationError('DUPLICATE_LOT_NUMBER'): If the item already has the lot
            ValidationError('INVALID'): If lot_number is longer than the column
            NotFoundError: If item, location or supplier is unknown

        Concurrency:
            - Runs under ledger_atomic()
            - (item, lot_number) is unique in the database; a concurrent
              receive with the same lot number raises ConflictError
        """
        quantity = to_decimal(quantity)
        if quantity <= 0:
            raise ValidationError('INVALID_QUANTITY', requested=quantity)

        unit_cost = to_decimal(unit_cost or 0, 'unit_cost', 'INVALID_COST', decimal_places=4)
        if unit_cost < 0:
            raise ValidationError('INVALID_COST', unit_cost=unit_cost)

        lot_number = (lot_number or '').strip()
        if len(lot_number) > StockLot._meta.get_field('lot_number').max_length:
            raise ValidationError('INVALID', field='lot_number', value=lot_number)

        with ledger_atomic():
            item = resolve(Item, item, 'ITEM_NOT_FOUND')
            location = resolve(Location, location, 'LOCATION_NOT_FOUND')
            if supplier is not None:
                supplier = resolve(Supplier, supplier, 'NOT_FOUND')

            if lot_number:
                if StockLot.objects.filter(item=item, lot_number=lot_number).exists():
                    raise ValidationError(
                        'DUPLICATE_LOT_NUMBER',
                        sku=item.sku,
                        lot_number=lot_number,
                    )
            else:
                lot_number = cls.generate_lot_number(item)

            lot = StockLot.objects.create(
                item=item,
                lot_number=lot_number,
                location=location,
                quantity=quantity,
                unit_cost=unit_cost,
                expiry_date=expiry_date,
                received_date=received_date or date.today(),
                supplier=supplier,
                notes=notes,
            )

            Movement.objects.create(
                type=MovementType.IN,
                item=item,
                lot=lot,
                quantity=quantity,
                to_location=location,
                unit_cost=unit_cost,
                supplier=supplier,
                user=user,
                reason=reason,
                reference_number=reference_number,
                notes=notes,
            )

            cls._after_mutation(item)
            logger.info(
                "ledger.receive",
                extra={
                    "sku": item.sku,
                    "lot": lot.lot_number,
                    "qty": str(quantity),
                    "location": location.name,
                    "lot_id": lot.pk,
                },
            )
            return lot

    @classmethod
    def pick(cls, quantity, lot, customer=None, reference_number='', user=None,
             reason='Stock picked', notes='', expected_version=None) -> Movement:
        """
        Stock exit.

        Decrements the lot and writes an OUT movement from the lot's location.

        Raises:
            ValidationError('INVALID_QUANTITY'): If quantity <= 0 or not storable exactly
            InsufficientStockError: If quantity > lot quantity at commit time
            NotFoundError('LOT_NOT_FOUND'): If the lot no longer exists
            ConflictError: If expected_version is given and the lot moved on

        Concurrency:
            - Runs under ledger_atomic()
            - Uses select_for_update() on StockLot
            - Verifies quantity after lock, so two concurrent picks
              can never spend the same units
        """
        quantity = to_decimal(quantity)
        if quantity <= 0:
            raise ValidationError('INVALID_QUANTITY', requested=quantity)

        with ledger_atomic():
            if customer is not None:
                customer = resolve(Customer, customer, 'NOT_FOUND')

            locked = cls._lock_lot(lot, expected_version)

            if locked.quantity < quantity:
                raise InsufficientStockError(
                    available=locked.quantity,
                    requested=quantity,
                    lot=locked.lot_number,
                )

            locked.quantity -= quantity
            cls._bump(locked, 'quantity')

            move = Movement.objects.create(
                type=MovementType.OUT,
                item_id=locked.item_id,
                lot=locked,
                quantity=quantity,
                from_location_id=locked.location_id,
                unit_cost=locked.unit_cost,
                customer=customer,
                user=user,
                reason=reason,
                reference_number=reference_number,
                notes=notes,
            )

            cls._after_mutation(locked.item)
            logger.info(
                "ledger.pick",
                extra={
                    "lot_id": locked.pk,
                    "qty": str(quantity),
                    "remaining": str(locked.quantity),
                    "reference": reference_number,
                },
            )
            return move

    @classmethod
    def transfer(cls, quantity, lot, to_location, user=None,
                 reason='Stock transfer', notes='', reference_number='',
                 expected_version=None) -> Movement:
        """
        Move stock to another location.

        - quantity == lot quantity: the whole lot is relocated
        - quantity <  lot quantity: the lot is split; a child lot holding
          ``quantity`` is created at the destination and the movement
          points at it (source_lot = the lot it was split from)

        On-hand for the item never changes.

        Raises:
            ValidationError('INVALID_QUANTITY'): If quantity <= 0 or not storable exactly
            ValidationError('SAME_LOCATION'): If destination is the lot's location
            InsufficientStockError: If quantity > lot quantity
            NotFoundError: If the lot or destination does not exist
            ConflictError: If expected_version is given and the lot moved on

        Concurrency:
            - Runs under ledger_atomic()
            - Uses select_for_update() on the source StockLot
        """
        quantity = to_decimal(quantity)
        if quantity <= 0:
            raise ValidationError('INVALID_QUANTITY', requested=quantity)

        with ledger_atomic():
            destination = resolve(Location, to_location, 'LOCATION_NOT_FOUND')
            locked = cls._lock_lot(lot, expected_version)

            if destination.pk == locked.location_id:
                raise ValidationError('SAME_LOCATION', location=destination.name)

            if locked.quantity < quantity:
                raise InsufficientStockError(
                    available=locked.quantity,
                    requested=quantity,
                    lot=locked.lot_number,
                )

            origin_id = locked.location_id

            if quantity == locked.quantity:
                locked.location = destination
                cls._bump(locked, 'location')
                moved, source = locked, None
            else:
                locked.quantity -= quantity
                cls._bump(locked, 'quantity')
                moved = StockLot.objects.create(
                    item_id=locked.item_id,
                    lot_number=cls._split_lot_number(locked),
                    location=destination,
                    quantity=quantity,
                    unit_cost=locked.unit_cost,
                    expiry_date=locked.expiry_date,
                    received_date=locked.received_date,
                    supplier_id=locked.supplier_id,
                    parent=locked,
                    notes=locked.notes,
                )
                source = locked

            move = Movement.objects.create(
                type=MovementType.TRANSFER,
                item_id=locked.item_id,
                lot=moved,
                source_lot=source,
                quantity=quantity,
                from_location_id=origin_id,
                to_location=destination,
                unit_cost=locked.unit_cost,
                user=user,
                reason=reason,
                reference_number=reference_number,
                notes=notes,
            )

            cls._after_mutation(locked.item)
            logger.info(
                "ledger.transfer",
                extra={
                    "lot_id": locked.pk,
                    "moved_lot_id": moved.pk,
                    "qty": str(quantity),
                    "from_location_id": origin_id,
                    "to_location": destination.name,
                    "split": source is not None,
                },
            )
            return move

    @classmethod
    def adjust(cls, delta, lot, reason, user=None, notes='',
               reference_number='', expected_version=None) -> Movement:
        """
        Inventory correction by a signed delta.

        Raises:
            ValidationError('REASON_REQUIRED'): If reason is empty
            ValidationError('INVALID_DELTA'): If delta == 0
            InsufficientStockError: If the result would be below zero
            NotFoundError('LOT_NOT_FOUND'): If the lot no longer exists
            ConflictError: If expected_version is given and the lot moved on
        """
        if not reason:
            raise ValidationError('REASON_REQUIRED')

        delta = to_decimal(delta, 'delta', 'INVALID_DELTA')
        if delta == 0:
            raise ValidationError('INVALID_DELTA')

        with ledger_atomic():
            locked = cls._lock_lot(lot, expected_version)
            return cls._apply_adjustment(locked, delta, reason, user, notes, reference_number)

    @classmethod
    def set_quantity(cls, lot, new_quantity, reason, user=None, notes='',
                     reference_number='', expected_version=None) -> Movement | None:
        """
        Stock count: set the lot to a counted quantity.

        Calculates delta automatically under the lock: new_quantity - lot.quantity

        Returns:
            The ADJUST movement, or None when the count matches.
        """
        if not reason:
            raise ValidationError('REASON_REQUIRED')

        new_quantity = to_decimal(new_quantity)
        if new_quantity < 0:
            raise ValidationError('INVALID_QUANTITY', requested=new_quantity)

        with ledger_atomic():
            locked = cls._lock_lot(lot, expected_version)
            delta = new_quantity - locked.quantity

            if delta == 0:
                return None

            return cls._apply_adjustment(locked, delta, reason, user, notes, reference_number)

    # ══════════════════════════════════════════════════════════════
    # INTERNALS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def generate_lot_number(cls, item) -> str:
        """LOT-<epoch millis>, with a numeric suffix if the item already has it."""
        prefix = ledger_settings.LOT_NUMBER_PREFIX
        base = fit_lot_number(prefix, f"-{int(timezone.now().timestamp() * 1000)}")
        candidate, n = base, 1
        while StockLot.objects.filter(item=item, lot_number=candidate).exists():
            n += 1
            candidate = fit_lot_number(base, f"-{n}")
        return candidate

    @classmethod
    def _split_lot_number(cls, parent: StockLot) -> str:
        n = parent.splits.count() + 1
        candidate = fit_lot_number(parent.lot_number, f"-S{n}")
        while StockLot.objects.filter(item_id=parent.item_id, lot_number=candidate).exists():
            n += 1
            candidate = fit_lot_number(parent.lot_number, f"-S{n}")
        return candidate

    @classmethod
    def _lock_lot(cls, lot, expected_version=None) -> StockLot:
        """Re-read the lot under a row lock and check its version."""
        pk = getattr(lot, 'pk', lot)
        try:
            locked = StockLot.objects.select_for_update().get(pk=pk)
        except (StockLot.DoesNotExist, ValueError, TypeError):
            raise NotFoundError('LOT_NOT_FOUND', lot_id=pk)

        if expected_version is not None and locked.version != expected_version:
            raise ConflictError(
                lot_id=locked.pk,
                expected_version=expected_version,
                current_version=locked.version,
            )
        return locked

    @classmethod
    def _bump(cls, locked: StockLot, *fields):
        locked.version += 1
        locked.save(update_fields=[*fields, 'version', 'updated_at'])

    @classmethod
    def _apply_adjustment(cls, locked, delta, reason, user, notes, reference_number) -> Movement:
        new_quantity = locked.quantity + delta
        if new_quantity < 0:
            raise InsufficientStockError(
                available=locked.quantity,
                requested=-delta,
                lot=locked.lot_number,
            )

        locked.quantity = new_quantity
        cls._bump(locked, 'quantity')

        move = Movement.objects.create(
            type=MovementType.ADJUST,
            item_id=locked.item_id,
            lot=locked,
            quantity=delta,
            from_location_id=locked.location_id if delta < 0 else None,
            to_location_id=locked.location_id if delta > 0 else None,
            unit_cost=locked.unit_cost,
            user=user,
            reason=reason,
            reference_number=reference_number,
            notes=notes,
        )

        cls._after_mutation(locked.item)
        logger.info(
            "ledger.adjust",
            extra={
                "lot_id": locked.pk,
                "delta": str(delta),
                "reason": reason,
            },
        )
        return move

    @classmethod
    def _after_mutation(cls, item):
        if ledger_settings.EVALUATE_ALERTS_ON_MUTATION:
            from lotledger.services.alerts import evaluate_item
            evaluate_item(item)
