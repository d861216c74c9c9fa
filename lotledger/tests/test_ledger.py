"""
Tests for the ledger engine: receive, pick, transfer, adjust.
"""

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from threading import Barrier

import pytest
from django.db import DatabaseError, OperationalError, connection

from lotledger import (
    ConflictError,
    InsufficientStockError,
    LedgerError,
    NotFoundError,
    StorageError,
    ValidationError,
    ledger,
)
from lotledger.models import Movement, MovementType, StockLot
from lotledger.services.atomic import ledger_atomic
from lotledger.services.movements import LedgerMovements


pytestmark = pytest.mark.django_db


class TestReceive:
    """Tests for ledger.receive()."""

    def test_receive_creates_lot_and_in_movement(self, widget, bin_a, user):
        lot = ledger.receive(Decimal('150'), widget, bin_a, unit_cost=Decimal('5.99'), user=user)

        assert lot.quantity == Decimal('150')
        assert lot.location == bin_a
        move = lot.movements.get()
        assert move.type == MovementType.IN
        assert move.quantity == Decimal('150')
        assert move.to_location == bin_a
        assert move.from_location is None
        assert move.user == user

    def test_receive_updates_on_hand_and_valuation(self, widget, bin_a):
        """150 at 5.99 -> on-hand +150, valuation +898.50."""
        ledger.receive(150, widget, bin_a, unit_cost='5.99')

        assert ledger.on_hand(widget) == Decimal('150')
        assert ledger.valuation(widget) == Decimal('898.50')

    def test_receive_generates_lot_number(self, widget, bin_a):
        first = ledger.receive(10, widget, bin_a)
        second = ledger.receive(10, widget, bin_a)

        assert first.lot_number.startswith('LOT-')
        assert second.lot_number.startswith('LOT-')
        assert first.lot_number != second.lot_number

    def test_receive_respects_lot_number_prefix(self, widget, bin_a, settings):
        settings.LOTLEDGER = {'LOT_NUMBER_PREFIX': 'RCV'}

        lot = ledger.receive(10, widget, bin_a)

        assert lot.lot_number.startswith('RCV-')

    def test_receive_duplicate_lot_number(self, widget_lot, widget, bin_b):
        with pytest.raises(ValidationError) as exc:
            ledger.receive(5, widget, bin_b, lot_number='LOT-001')

        assert exc.value.code == 'DUPLICATE_LOT_NUMBER'

    def test_same_lot_number_for_other_item(self, widget_lot, cable, bin_a):
        lot = ledger.receive(5, cable, bin_a, lot_number='LOT-001')

        assert lot.lot_number == 'LOT-001'

    @pytest.mark.parametrize('quantity', [0, -5, '0'])
    def test_receive_invalid_quantity(self, widget, bin_a, quantity):
        with pytest.raises(ValidationError) as exc:
            ledger.receive(quantity, widget, bin_a)

        assert exc.value.code == 'INVALID_QUANTITY'
        assert not StockLot.objects.exists()

    def test_receive_non_numeric_quantity(self, widget, bin_a):
        with pytest.raises(ValidationError) as exc:
            ledger.receive('lots', widget, bin_a)

        assert exc.value.code == 'INVALID_QUANTITY'

    @pytest.mark.parametrize('quantity', [
        Decimal('NaN'),
        Decimal('sNaN'),
        Decimal('Infinity'),
        'inf',
        float('nan'),
        10 ** 10,
        Decimal('1E+9'),
    ])
    def test_receive_unstorable_quantity(self, widget, bin_a, quantity):
        with pytest.raises(ValidationError) as exc:
            ledger.receive(quantity, widget, bin_a)

        assert exc.value.code == 'INVALID_QUANTITY'
        assert not StockLot.objects.exists()
        assert not Movement.objects.exists()

    def test_receive_largest_storable_quantity(self, widget, bin_a):
        lot = ledger.receive(Decimal('999999999.999'), widget, bin_a)

        lot.refresh_from_db()
        assert lot.quantity == Decimal('999999999.999')

    def test_receive_too_many_decimals(self, widget, bin_a):
        with pytest.raises(ValidationError) as exc:
            ledger.receive(Decimal('1.0004'), widget, bin_a)

        assert exc.value.code == 'INVALID_QUANTITY'
        assert not StockLot.objects.exists()

    def test_receive_trailing_zeros_are_exact(self, widget, bin_a):
        lot = ledger.receive('1.5000', widget, bin_a)

        lot.refresh_from_db()
        assert lot.quantity == Decimal('1.5')

    @pytest.mark.parametrize('unit_cost', ['1.00005', Decimal('NaN'), Decimal('1E+8')])
    def test_receive_unstorable_cost(self, widget, bin_a, unit_cost):
        with pytest.raises(ValidationError) as exc:
            ledger.receive(10, widget, bin_a, unit_cost=unit_cost)

        assert exc.value.code == 'INVALID_COST'
        assert not StockLot.objects.exists()

    def test_receive_lot_number_too_long(self, widget, bin_a):
        with pytest.raises(ValidationError) as exc:
            ledger.receive(10, widget, bin_a, lot_number='L' * 65)

        assert exc.value.data['field'] == 'lot_number'
        assert not StockLot.objects.exists()

    def test_long_prefix_is_fitted(self, widget, bin_a, settings):
        settings.LOTLEDGER = {'LOT_NUMBER_PREFIX': 'P' * 80}

        first = ledger.receive(10, widget, bin_a)
        second = ledger.receive(10, widget, bin_a)

        assert len(first.lot_number) <= 64
        assert len(second.lot_number) <= 64
        assert first.lot_number.startswith('PPPP')
        assert first.lot_number != second.lot_number

    def test_receive_negative_cost(self, widget, bin_a):
        with pytest.raises(ValidationError) as exc:
            ledger.receive(10, widget, bin_a, unit_cost='-1')

        assert exc.value.code == 'INVALID_COST'

    def test_receive_unknown_item(self, bin_a):
        with pytest.raises(NotFoundError) as exc:
            ledger.receive(10, 999999, bin_a)

        assert exc.value.code == 'ITEM_NOT_FOUND'

    def test_receive_unknown_location(self, widget):
        with pytest.raises(NotFoundError) as exc:
            ledger.receive(10, widget, 999999)

        assert exc.value.code == 'LOCATION_NOT_FOUND'

    def test_receive_records_expiry_and_supplier(self, widget, bin_a, supplier, in_three_days):
        lot = ledger.receive(10, widget, bin_a, expiry_date=in_three_days, supplier=supplier)

        lot.refresh_from_db()
        assert lot.expiry_date == in_three_days
        assert lot.supplier == supplier
        assert lot.movements.get().supplier == supplier


class TestPick:
    """Tests for ledger.pick()."""

    def test_pick_decrements_lot(self, widget_lot, customer, user):
        move = ledger.pick(Decimal('30'), widget_lot, customer=customer,
                           reference_number='SO-1001', user=user)

        widget_lot.refresh_from_db()
        assert widget_lot.quantity == Decimal('120')
        assert move.type == MovementType.OUT
        assert move.quantity == Decimal('30')
        assert move.from_location_id == widget_lot.location_id
        assert move.to_location is None
        assert move.customer == customer
        assert move.reference_number == 'SO-1001'

    def test_pick_everything_then_one_more(self, widget_lot, widget):
        ledger.pick(150, widget_lot)

        with pytest.raises(InsufficientStockError) as exc:
            ledger.pick(1, widget_lot)

        assert exc.value.available == Decimal('0')
        assert exc.value.requested == Decimal('1')
        assert ledger.on_hand(widget) == Decimal('0')
        assert widget_lot.movements.filter(type=MovementType.OUT).count() == 1

    def test_pick_rereads_quantity_under_lock(self, widget_lot):
        """A stale in-memory lot cannot spend the same units twice."""
        ledger.pick(100, widget_lot)

        assert widget_lot.quantity == Decimal('150')  # stale copy
        with pytest.raises(InsufficientStockError) as exc:
            ledger.pick(100, widget_lot)

        assert exc.value.available == Decimal('50')

    def test_pick_below_ledger_precision(self, widget_lot):
        with pytest.raises(ValidationError) as exc:
            ledger.pick(Decimal('0.0004'), widget_lot)

        assert exc.value.code == 'INVALID_QUANTITY'
        widget_lot.refresh_from_db()
        assert widget_lot.quantity == Decimal('150')
        assert widget_lot.version == 0
        assert not widget_lot.movements.filter(type=MovementType.OUT).exists()

    def test_pick_not_a_number(self, widget_lot):
        with pytest.raises(ValidationError) as exc:
            ledger.pick(Decimal('NaN'), widget_lot)

        assert exc.value.code == 'INVALID_QUANTITY'

    def test_pick_invalid_quantity(self, widget_lot):
        with pytest.raises(ValidationError) as exc:
            ledger.pick(0, widget_lot)

        assert exc.value.code == 'INVALID_QUANTITY'

    def test_pick_unknown_lot(self, db):
        with pytest.raises(NotFoundError) as exc:
            ledger.pick(1, 999999)

        assert exc.value.code == 'LOT_NOT_FOUND'

    def test_pick_bumps_version(self, widget_lot):
        assert widget_lot.version == 0

        ledger.pick(1, widget_lot)

        widget_lot.refresh_from_db()
        assert widget_lot.version == 1

    def test_pick_with_stale_version(self, widget_lot):
        ledger.pick(1, widget_lot, expected_version=0)

        with pytest.raises(ConflictError) as exc:
            ledger.pick(1, widget_lot, expected_version=0)

        assert exc.value.code == 'CONCURRENT_MODIFICATION'
        assert exc.value.data['current_version'] == 1

    def test_errors_share_a_base_class(self, widget_lot):
        with pytest.raises(LedgerError):
            ledger.pick(1000, widget_lot)


class TestTransfer:
    """Tests for ledger.transfer()."""

    def test_full_transfer_relocates_lot(self, widget_lot, widget, bin_a, bin_b):
        move = ledger.transfer(150, widget_lot, bin_b)

        widget_lot.refresh_from_db()
        assert widget_lot.location == bin_b
        assert widget_lot.quantity == Decimal('150')
        assert move.type == MovementType.TRANSFER
        assert move.lot == widget_lot
        assert move.source_lot is None
        assert move.from_location == bin_a
        assert move.to_location == bin_b
        assert ledger.on_hand(widget) == Decimal('150')

    def test_partial_transfer_splits_lot(self, widget_lot, widget, bin_a, bin_b):
        move = ledger.transfer(Decimal('40'), widget_lot, bin_b)

        widget_lot.refresh_from_db()
        child = move.lot
        assert widget_lot.quantity == Decimal('110')
        assert widget_lot.location == bin_a
        assert child.quantity == Decimal('40')
        assert child.location == bin_b
        assert child.parent == widget_lot
        assert child.lot_number == 'LOT-001-S1'
        assert child.unit_cost == widget_lot.unit_cost
        assert move.source_lot == widget_lot

    def test_transfer_preserves_totals(self, widget_lot, widget, bin_a, bin_b):
        ledger.transfer(40, widget_lot, bin_b)
        ledger.transfer(10, widget_lot, bin_b)

        assert ledger.on_hand(widget) == Decimal('150')
        assert ledger.on_hand(widget, location=bin_a) == Decimal('100')
        assert ledger.on_hand(widget, location=bin_b) == Decimal('50')
        assert ledger.valuation(widget) == Decimal('898.50')
        assert widget_lot.splits.count() == 2

    def test_transfer_to_same_location(self, widget_lot, bin_a):
        with pytest.raises(ValidationError) as exc:
            ledger.transfer(10, widget_lot, bin_a)

        assert exc.value.code == 'SAME_LOCATION'

    def test_transfer_more_than_lot(self, widget_lot, bin_b):
        with pytest.raises(InsufficientStockError):
            ledger.transfer(151, widget_lot, bin_b)

        widget_lot.refresh_from_db()
        assert widget_lot.quantity == Decimal('150')
        assert not StockLot.objects.filter(parent=widget_lot).exists()

    def test_transfer_below_ledger_precision(self, widget_lot, bin_b):
        with pytest.raises(ValidationError) as exc:
            ledger.transfer(Decimal('10.0001'), widget_lot, bin_b)

        assert exc.value.code == 'INVALID_QUANTITY'
        assert not StockLot.objects.filter(parent=widget_lot).exists()

    def test_split_of_longest_lot_number(self, widget, bin_a, bin_b):
        lot = ledger.receive(100, widget, bin_a, lot_number='L' * 64)

        first = ledger.transfer(10, lot, bin_b).lot
        second = ledger.transfer(10, lot, bin_b).lot

        assert first.lot_number == 'L' * 61 + '-S1'
        assert second.lot_number == 'L' * 61 + '-S2'

    def test_transfer_unknown_destination(self, widget_lot):
        with pytest.raises(NotFoundError) as exc:
            ledger.transfer(10, widget_lot, 999999)

        assert exc.value.code == 'LOCATION_NOT_FOUND'


class TestAdjust:
    """Tests for ledger.adjust() and ledger.set_quantity()."""

    def test_adjust_down(self, widget_lot, bin_a):
        move = ledger.adjust(Decimal('-5'), widget_lot, reason='Damaged')

        widget_lot.refresh_from_db()
        assert widget_lot.quantity == Decimal('145')
        assert move.type == MovementType.ADJUST
        assert move.quantity == Decimal('-5')
        assert move.from_location == bin_a
        assert move.to_location is None

    def test_adjust_up(self, widget_lot, bin_a):
        move = ledger.adjust(3, widget_lot, reason='Found in recount')

        widget_lot.refresh_from_db()
        assert widget_lot.quantity == Decimal('153')
        assert move.to_location == bin_a

    def test_adjust_requires_reason(self, widget_lot):
        with pytest.raises(ValidationError) as exc:
            ledger.adjust(1, widget_lot, reason='')

        assert exc.value.code == 'REASON_REQUIRED'

    def test_adjust_zero_delta(self, widget_lot):
        with pytest.raises(ValidationError) as exc:
            ledger.adjust(0, widget_lot, reason='Nothing')

        assert exc.value.code == 'INVALID_DELTA'

    def test_adjust_below_zero(self, widget_lot):
        with pytest.raises(InsufficientStockError):
            ledger.adjust(-151, widget_lot, reason='Shrinkage')

        widget_lot.refresh_from_db()
        assert widget_lot.quantity == Decimal('150')
        assert not widget_lot.movements.filter(type=MovementType.ADJUST).exists()

    def test_adjust_to_exactly_zero(self, widget_lot):
        ledger.adjust(-150, widget_lot, reason='Written off')

        widget_lot.refresh_from_db()
        assert widget_lot.quantity == Decimal('0')

    def test_set_quantity_computes_delta(self, widget_lot):
        move = ledger.set_quantity(widget_lot, Decimal('140'), reason='Cycle count')

        assert move.quantity == Decimal('-10')
        widget_lot.refresh_from_db()
        assert widget_lot.quantity == Decimal('140')

    def test_set_quantity_unchanged(self, widget_lot):
        assert ledger.set_quantity(widget_lot, 150, reason='Cycle count') is None
        assert widget_lot.movements.count() == 1

    def test_adjust_below_ledger_precision(self, widget_lot):
        with pytest.raises(ValidationError) as exc:
            ledger.adjust(Decimal('0.0001'), widget_lot, reason='Recount')

        assert exc.value.code == 'INVALID_DELTA'
        widget_lot.refresh_from_db()
        assert widget_lot.quantity == Decimal('150')
        assert not widget_lot.movements.filter(type=MovementType.ADJUST).exists()

    @pytest.mark.parametrize('new_quantity', [Decimal('149.9995'), Decimal('Infinity'), 10 ** 12])
    def test_set_quantity_unstorable(self, widget_lot, new_quantity):
        with pytest.raises(ValidationError) as exc:
            ledger.set_quantity(widget_lot, new_quantity, reason='Cycle count')

        assert exc.value.code == 'INVALID_QUANTITY'
        assert widget_lot.movements.count() == 1


class TestAtomicity:
    """A failed operation leaves no partial state."""

    def test_movement_failure_rolls_back_lot(self, widget_lot, monkeypatch):
        def boom(**kwargs):
            raise DatabaseError('disk full')

        monkeypatch.setattr(Movement.objects, 'create', boom)

        with pytest.raises(StorageError) as exc:
            ledger.pick(10, widget_lot)

        assert exc.value.code == 'STORAGE_FAILURE'
        monkeypatch.undo()
        widget_lot.refresh_from_db()
        assert widget_lot.quantity == Decimal('150')
        assert widget_lot.version == 0

    def test_constraint_violation_becomes_conflict(self, widget_lot):
        with pytest.raises(ConflictError) as exc:
            with ledger_atomic():
                StockLot.objects.filter(pk=widget_lot.pk).update(quantity=Decimal('-1'))

        assert exc.value.code == 'INTEGRITY_VIOLATION'
        widget_lot.refresh_from_db()
        assert widget_lot.quantity == Decimal('150')

    def test_lock_contention_becomes_conflict(self, widget_lot, monkeypatch):
        def locked(**kwargs):
            raise OperationalError('database is locked')

        monkeypatch.setattr(Movement.objects, 'create', locked)

        with pytest.raises(ConflictError) as exc:
            ledger.pick(10, widget_lot)

        assert exc.value.code == 'CONCURRENT_MODIFICATION'
        monkeypatch.undo()
        widget_lot.refresh_from_db()
        assert widget_lot.quantity == Decimal('150')

    def test_deadlock_becomes_conflict(self, widget_lot, monkeypatch):
        class DeadlockDetected(Exception):
            pgcode = '40P01'

        def deadlock(**kwargs):
            raise OperationalError('deadlock detected') from DeadlockDetected()

        monkeypatch.setattr(Movement.objects, 'create', deadlock)

        with pytest.raises(ConflictError):
            ledger.pick(10, widget_lot)

class TestMovementImmutability:

    def test_movement_cannot_be_changed(self, widget_lot):
        move = widget_lot.movements.get()
        move.quantity = Decimal('1')

        with pytest.raises(ValueError):
            move.save()

    def test_movement_cannot_be_deleted(self, widget_lot):
        move = widget_lot.movements.get()

        with pytest.raises(ValueError):
            move.delete()


class TestConservation:
    """On-hand always equals the signed sum of movements."""

    def test_mixed_operations_stay_balanced(self, widget, widget_lot, bin_b, customer):
        second = ledger.receive(40, widget, bin_b, unit_cost='6.10')
        ledger.pick(25, widget_lot, customer=customer)
        ledger.transfer(30, widget_lot, bin_b)
        ledger.transfer(40, second, widget_lot.location)
        ledger.adjust(-2, second, reason='Damaged')
        ledger.adjust(7, widget_lot, reason='Recount')

        result = ledger.reconcile(widget)

        assert result['balanced'] is True
        assert result['on_hand'] == Decimal('170')
        for lot in StockLot.objects.filter(item=widget):
            assert lot.ledger_quantity() == lot.quantity


@pytest.mark.django_db(transaction=True)
@pytest.mark.skipif(connection.vendor == 'sqlite', reason='needs real row locks')
class TestConcurrentPicks:
    """Row locks serialize the picks; the second one sees the reduced lot."""

    def test_two_picks_cannot_oversell(self, widget_lot):
        def attempt():
            try:
                ledger.pick(100, widget_lot.pk)
                return 'ok'
            except InsufficientStockError:
                return 'insufficient'
            finally:
                connection.close()

        with ThreadPoolExecutor(max_workers=2) as pool:
            results = sorted(pool.map(lambda _: attempt(), range(2)))

        assert results == ['insufficient', 'ok']
        widget_lot.refresh_from_db()
        assert widget_lot.quantity == Decimal('50')


@pytest.mark.django_db(transaction=True)
@pytest.mark.skipif(connection.vendor != 'sqlite', reason='SQLite write lock')
class TestInterleavedPicks:
    """
    Both picks read the lot before either writes.

    SQLite has no row locks: the first writer takes the database write lock
    and the other is refused, so only one pick commits.
    """

    def test_only_one_pick_commits(self, widget_lot, monkeypatch):
        barrier = Barrier(2, timeout=10)
        lock_lot = LedgerMovements._lock_lot

        def lock_then_wait(cls, lot, expected_version=None):
            locked = lock_lot(lot, expected_version)
            barrier.wait()
            return locked

        monkeypatch.setattr(LedgerMovements, '_lock_lot', classmethod(lock_then_wait))

        def attempt():
            try:
                ledger.pick(100, widget_lot.pk)
                return 'ok'
            except ConflictError:
                return 'conflict'
            finally:
                connection.close()

        with ThreadPoolExecutor(max_workers=2) as pool:
            results = sorted(pool.map(lambda _: attempt(), range(2)))

        assert results == ['conflict', 'ok']
        widget_lot.refresh_from_db()
        assert widget_lot.quantity == Decimal('50')
        assert widget_lot.movements.filter(type=MovementType.OUT).count() == 1
