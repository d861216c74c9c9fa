"""
Pytest fixtures for LotLedger tests.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model

from lotledger import ledger
from lotledger.adapters import reset_label_codec
from lotledger.models import Customer, LocationType, Supplier


User = get_user_model()


@pytest.fixture(autouse=True)
def _fresh_label_codec():
    """The codec is cached per process; settings may change between tests."""
    reset_label_codec()
    yield
    reset_label_codec()


@pytest.fixture
def user(db):
    """Create a test user."""
    return User.objects.create_user(
        username='picker',
        password='testpass123'
    )


@pytest.fixture
def supplier(db):
    return Supplier.objects.create(name='Acme Corp', email='sales@acme.com')


@pytest.fixture
def customer(db):
    return Customer.objects.create(name='Tech Store', email='orders@techstore.com')


@pytest.fixture
def warehouse(db):
    return ledger.create_location('Warehouse A', type=LocationType.WAREHOUSE)


@pytest.fixture
def bin_a(db, warehouse):
    """Bin A-1-1-A inside Warehouse A."""
    return ledger.create_location('A-1-1-A', parent=warehouse)


@pytest.fixture
def bin_b(db, warehouse):
    """Bin A-1-1-B inside Warehouse A."""
    return ledger.create_location('A-1-1-B', parent=warehouse)


@pytest.fixture
def widget(db, supplier):
    """Item with a low-stock threshold of 50."""
    return ledger.create_item(
        'WIDGET-001',
        'Blue Widget',
        min_stock_threshold=Decimal('50'),
        reorder_point=Decimal('50'),
        reorder_quantity=Decimal('200'),
        category='Widgets',
        supplier=supplier,
    )


@pytest.fixture
def cable(db):
    """Item without a threshold (never low on stock)."""
    return ledger.create_item('CABLE-USB-C', 'USB-C Cable', category='Cables')


@pytest.fixture
def widget_lot(widget, bin_a, supplier):
    """150 widgets at 5.99 in bin A."""
    return ledger.receive(
        Decimal('150'),
        widget,
        bin_a,
        unit_cost=Decimal('5.99'),
        lot_number='LOT-001',
        supplier=supplier,
    )


@pytest.fixture
def today():
    """Return today's date."""
    return date.today()


@pytest.fixture
def in_three_days(today):
    return today + timedelta(days=3)


@pytest.fixture
def quiet_ledger(settings):
    """Ledger writes without automatic alert evaluation."""
    settings.LOTLEDGER = {'EVALUATE_ALERTS_ON_MUTATION': False}
    return settings
