"""
Tests for management commands.
"""

from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from lotledger import ledger
from lotledger.models import Alert, AlertType, Item, Movement, MovementType, StockLot


pytestmark = pytest.mark.django_db


def run(*args):
    out = StringIO()
    call_command(*args, stdout=out)
    return out.getvalue()


class TestEvaluateAlerts:

    def test_raises_alerts(self, quiet_ledger, widget, bin_a):
        ledger.receive(10, widget, bin_a)

        output = run('evaluate_alerts')

        assert '1 alert(s) raised' in output
        assert Alert.objects.active().filter(type=AlertType.LOW_STOCK).count() == 1

    def test_dry_run_saves_nothing(self, quiet_ledger, widget, bin_a):
        ledger.receive(10, widget, bin_a)

        output = run('evaluate_alerts', '--dry-run')

        assert '1 alert(s) would be raised' in output
        assert not Alert.objects.exists()

    def test_reference_date(self, quiet_ledger, cable, bin_a, today):
        ledger.receive(5, cable, bin_a, expiry_date=today + timedelta(days=40))

        run('evaluate_alerts', '--date', (today + timedelta(days=20)).isoformat())

        assert Alert.objects.active().filter(type=AlertType.EXPIRY_WARNING).count() == 1

    def test_bad_date(self, db):
        with pytest.raises(CommandError):
            run('evaluate_alerts', '--date', 'tomorrow')


class TestExportReport:

    def test_onhand_to_stdout(self, widget_lot):
        output = run('export_report', 'onhand')

        assert output.startswith('"SKU","Item","Lot"')
        assert '"WIDGET-001","Blue Widget","LOT-001","150.000"' in output

    def test_movements_to_file(self, widget_lot, tmp_path):
        target = tmp_path / 'movements.csv'

        output = run('export_report', 'movements', '--output', str(target))

        assert 'Report written' in output
        content = target.read_text(encoding='utf-8')
        assert '"Stock received"' in content

    def test_unknown_report(self, db):
        with pytest.raises(CommandError):
            run('export_report', 'valuation')


class TestSeedDemo:

    def test_loads_through_the_ledger(self):
        output = run('seed_demo')

        assert '3 item(s)' in output
        assert Item.objects.count() == 3
        assert StockLot.objects.count() == 3
        assert Movement.objects.filter(type=MovementType.IN).count() == 3
        gadget = Item.objects.get(sku='GADGET-002')
        assert Alert.objects.active().filter(item=gadget, type=AlertType.LOW_STOCK).exists()
        for item in Item.objects.all():
            assert ledger.reconcile(item)['balanced']

    def test_runs_once(self):
        run('seed_demo')

        assert 'already loaded' in run('seed_demo')
        assert Item.objects.count() == 3

    def test_records_user(self, user):
        run('seed_demo', '--user', 'picker')

        assert Movement.objects.filter(user=user).count() == 3

    def test_unknown_user(self):
        with pytest.raises(CommandError):
            run('seed_demo', '--user', 'nobody')
