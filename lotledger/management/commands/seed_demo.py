"""
Management command to load demo data.

Every lot is recorded through the ledger, so the demo starts with
a consistent movement history and alerts.

Usage:
    python manage.py seed_demo
    python manage.py seed_demo --user admin
"""

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from lotledger import ledger
from lotledger.models import Customer, Item, LocationType, Supplier

SUPPLIERS = [
    {'name': 'Acme Corp', 'email': 'sales@acme.com', 'phone': '555-0100'},
    {'name': 'Global Supplies', 'email': 'info@global.com', 'phone': '555-0200'},
]

CUSTOMERS = [
    {'name': 'Tech Store', 'email': 'orders@techstore.com', 'phone': '555-1000'},
    {'name': 'Retail Chain', 'email': 'purchasing@retail.com', 'phone': '555-2000'},
]

# (name, type, parent, description)
LOCATIONS = [
    ('Warehouse A', LocationType.WAREHOUSE, None, 'Main warehouse'),
    ('A-1', LocationType.AISLE, 'Warehouse A', 'Aisle 1 in Warehouse A'),
    ('A-1-1', LocationType.RACK, 'A-1', 'Rack 1 in Aisle 1'),
    ('A-1-1-A', LocationType.BIN, 'A-1-1', 'Bin A'),
    ('A-1-1-B', LocationType.BIN, 'A-1-1', 'Bin B'),
    ('A-2-1-A', LocationType.BIN, 'Warehouse A', 'Bin A in Rack 1, Aisle 2'),
]

ITEMS = [
    {
        'sku': 'WIDGET-001', 'name': 'Blue Widget', 'description': 'High-quality blue widget',
        'category': 'Widgets', 'supplier': 'Acme Corp',
        'min_stock_threshold': 50, 'reorder_point': 50, 'reorder_quantity': 200,
    },
    {
        'sku': 'GADGET-002', 'name': 'Red Gadget', 'description': 'Premium red gadget',
        'category': 'Gadgets', 'supplier': 'Global Supplies',
        'min_stock_threshold': 100, 'reorder_point': 30, 'reorder_quantity': 100,
    },
    {
        'sku': 'CABLE-USB-C', 'name': 'USB-C Cable', 'description': '1m USB-C cable',
        'category': 'Cables', 'supplier': None,
        'min_stock_threshold': 100, 'reorder_point': 100, 'reorder_quantity': 500,
    },
]

# (sku, lot_number, location, quantity, unit_cost, supplier)
LOTS = [
    ('WIDGET-001', 'LOT-001', 'A-1-1-A', 150, '5.99', 'Acme Corp'),
    ('GADGET-002', 'LOT-002', 'A-1-1-B', 75, '12.50', 'Global Supplies'),
    ('CABLE-USB-C', 'LOT-003', 'A-2-1-A', 200, '2.99', None),
]


class Command(BaseCommand):
    """Seed demo data command."""

    help = 'Loads demo suppliers, customers, locations, items and stock'

    def add_arguments(self, parser):
        parser.add_argument(
            '--user',
            help='Username recorded on the initial movements'
        )

    def handle(self, *args, **options):
        if Item.objects.filter(sku=ITEMS[0]['sku']).exists():
            self.stdout.write('Demo data already loaded')
            return

        user = None
        if options['user']:
            try:
                user = get_user_model().objects.get_by_natural_key(options['user'])
            except get_user_model().DoesNotExist as exc:
                raise CommandError(f"Unknown user: {options['user']}") from exc

        with transaction.atomic():
            suppliers = {s['name']: Supplier.objects.create(**s) for s in SUPPLIERS}
            for customer in CUSTOMERS:
                Customer.objects.create(**customer)

            locations = {}
            for name, kind, parent, description in LOCATIONS:
                locations[name] = ledger.create_location(
                    name, type=kind, parent=locations.get(parent), description=description,
                )

            items = {}
            for row in ITEMS:
                fields = dict(row, supplier=suppliers.get(row['supplier']))
                items[row['sku']] = ledger.create_item(**fields)

            for sku, lot_number, location, quantity, unit_cost, supplier in LOTS:
                ledger.receive(
                    quantity,
                    items[sku],
                    locations[location],
                    unit_cost=Decimal(unit_cost),
                    lot_number=lot_number,
                    supplier=suppliers.get(supplier),
                    user=user,
                    reason='Initial stock',
                )

        self.stdout.write(self.style.SUCCESS(
            f'{len(ITEMS)} item(s), {len(LOCATIONS)} location(s) and {len(LOTS)} lot(s) loaded'
        ))
