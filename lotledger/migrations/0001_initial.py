"""
Initial migration for LotLedger models.
"""

import datetime
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create LotLedger models: Supplier, Customer, Location, Item, StockLot, Movement, Alert."""

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Supplier',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('contact_name', models.CharField(blank=True, default='', max_length=200, verbose_name='Contact')),
                ('email', models.EmailField(blank=True, default='', max_length=254, verbose_name='Email')),
                ('phone', models.CharField(blank=True, default='', max_length=50, verbose_name='Phone')),
                ('address', models.TextField(blank=True, default='', verbose_name='Address')),
                ('notes', models.TextField(blank=True, default='', verbose_name='Notes')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'verbose_name': 'Supplier',
                'verbose_name_plural': 'Suppliers',
                'ordering': ['name'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='Customer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('contact_name', models.CharField(blank=True, default='', max_length=200, verbose_name='Contact')),
                ('email', models.EmailField(blank=True, default='', max_length=254, verbose_name='Email')),
                ('phone', models.CharField(blank=True, default='', max_length=50, verbose_name='Phone')),
                ('address', models.TextField(blank=True, default='', verbose_name='Address')),
                ('notes', models.TextField(blank=True, default='', verbose_name='Notes')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'verbose_name': 'Customer',
                'verbose_name_plural': 'Customers',
                'ordering': ['name'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='Location',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100, unique=True, verbose_name='Name')),
                ('type', models.CharField(choices=[('warehouse', 'Warehouse'), ('aisle', 'Aisle'), ('rack', 'Rack'), ('bin', 'Bin')], default='bin', max_length=20, verbose_name='Type')),
                ('capacity', models.DecimalField(blank=True, decimal_places=3, max_digits=12, null=True, verbose_name='Capacity')),
                ('description', models.TextField(blank=True, default='', verbose_name='Description')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('parent', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='children', to='lotledger.location', verbose_name='Parent')),
            ],
            options={
                'verbose_name': 'Location',
                'verbose_name_plural': 'Locations',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Item',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sku', models.CharField(max_length=64, unique=True, verbose_name='SKU')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('description', models.TextField(blank=True, default='', verbose_name='Description')),
                ('unit', models.CharField(default='pcs', help_text='Unit of measure (pcs, kg, m, ...)', max_length=20, verbose_name='Unit')),
                ('category', models.CharField(blank=True, default='', max_length=100, verbose_name='Category')),
                ('barcode', models.CharField(blank=True, default='', max_length=64, verbose_name='Barcode')),
                ('min_stock_threshold', models.DecimalField(decimal_places=3, default=Decimal('0'), help_text='low_stock alert fires while on-hand is below this value', max_digits=12, verbose_name='Minimum stock')),
                ('reorder_point', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=12, verbose_name='Reorder point')),
                ('reorder_quantity', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=12, verbose_name='Reorder quantity')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('supplier', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='items', to='lotledger.supplier', verbose_name='Default supplier')),
            ],
            options={
                'verbose_name': 'Item',
                'verbose_name_plural': 'Items',
                'ordering': ['sku'],
            },
        ),
        migrations.CreateModel(
            name='StockLot',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('lot_number', models.CharField(max_length=64, verbose_name='Lot number')),
                ('quantity', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=12, verbose_name='Quantity')),
                ('unit_cost', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=12, verbose_name='Unit cost')),
                ('expiry_date', models.DateField(blank=True, db_index=True, null=True, verbose_name='Expiry date')),
                ('received_date', models.DateField(default=datetime.date.today, verbose_name='Received date')),
                ('notes', models.TextField(blank=True, default='', verbose_name='Notes')),
                ('version', models.PositiveIntegerField(default=0, editable=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='lots', to='lotledger.item', verbose_name='Item')),
                ('location', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='lots', to='lotledger.location', verbose_name='Location')),
                ('parent', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='splits', to='lotledger.stocklot', verbose_name='Split from')),
                ('supplier', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='lots', to='lotledger.supplier', verbose_name='Supplier')),
            ],
            options={
                'verbose_name': 'Stock lot',
                'verbose_name_plural': 'Stock lots',
                'ordering': ['item', 'lot_number'],
                'indexes': [models.Index(fields=['item', 'location'], name='lotledger_lot_item_loc_idx')],
                'constraints': [
                    models.UniqueConstraint(fields=('item', 'lot_number'), name='unique_lot_number_per_item'),
                    models.CheckConstraint(condition=models.Q(('quantity__gte', 0)), name='stock_lot_quantity_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Movement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('in', 'In'), ('out', 'Out'), ('transfer', 'Transfer'), ('adjust', 'Adjust')], db_index=True, max_length=10, verbose_name='Type')),
                ('quantity', models.DecimalField(decimal_places=3, help_text='Magnitude for in/out/transfer, signed delta for adjust', max_digits=12, verbose_name='Quantity')),
                ('unit_cost', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=12, verbose_name='Unit cost')),
                ('reason', models.CharField(max_length=255, verbose_name='Reason')),
                ('reference_number', models.CharField(blank=True, default='', max_length=100, verbose_name='Reference')),
                ('notes', models.TextField(blank=True, default='', verbose_name='Notes')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Created at')),
                ('customer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='lotledger.customer', verbose_name='Customer')),
                ('from_location', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='+', to='lotledger.location', verbose_name='From')),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='lotledger.item', verbose_name='Item')),
                ('lot', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='lotledger.stocklot', verbose_name='Lot')),
                ('source_lot', models.ForeignKey(blank=True, help_text='Set on partial transfers: the lot the quantity was split from', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='split_movements', to='lotledger.stocklot', verbose_name='Source lot')),
                ('supplier', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='lotledger.supplier', verbose_name='Supplier')),
                ('to_location', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='+', to='lotledger.location', verbose_name='To')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='User')),
            ],
            options={
                'verbose_name': 'Movement',
                'verbose_name_plural': 'Movements',
                'ordering': ['created_at', 'pk'],
                'indexes': [
                    models.Index(fields=['item', 'created_at'], name='lotledger_mv_item_ts_idx'),
                    models.Index(fields=['lot', 'created_at'], name='lotledger_mv_lot_ts_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Alert',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('low_stock', 'Low stock'), ('expiry_warning', 'Expiry warning'), ('negative_balance', 'Negative balance')], max_length=20, verbose_name='Type')),
                ('severity', models.CharField(choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High')], default='medium', max_length=10, verbose_name='Severity')),
                ('message', models.CharField(max_length=255, verbose_name='Message')),
                ('status', models.CharField(choices=[('active', 'Active'), ('dismissed', 'Dismissed'), ('resolved', 'Resolved')], db_index=True, default='active', max_length=10, verbose_name='Status')),
                ('resolved_at', models.DateTimeField(blank=True, null=True, verbose_name='Resolved at')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
                ('item', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='alerts', to='lotledger.item', verbose_name='Item')),
                ('lot', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='alerts', to='lotledger.stocklot', verbose_name='Lot')),
                ('resolved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Resolved by')),
            ],
            options={
                'verbose_name': 'Alert',
                'verbose_name_plural': 'Alerts',
                'ordering': ['-created_at', '-pk'],
                'indexes': [
                    models.Index(fields=['type', 'status'], name='lotledger_alert_type_idx'),
                    models.Index(fields=['item', 'status'], name='lotledger_alert_item_idx'),
                ],
            },
        ),
    ]
