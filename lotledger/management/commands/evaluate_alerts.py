"""
Management command to re-evaluate inventory alerts.

Expiry warnings depend on the calendar, not only on ledger writes,
so this is meant to run daily (cron).

Usage:
    python manage.py evaluate_alerts
    python manage.py evaluate_alerts --dry-run
    python manage.py evaluate_alerts --date 2026-01-31
"""

from datetime import date

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from lotledger import ledger
from lotledger.models import Alert


class Command(BaseCommand):
    """Evaluate alerts command."""

    help = 'Re-evaluates low-stock, expiry and negative-balance alerts for every item'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Shows what would be raised without saving'
        )
        parser.add_argument(
            '--date',
            help='Reference date for expiry checks (YYYY-MM-DD, default today)'
        )

    def handle(self, *args, **options):
        today = None
        if options['date']:
            try:
                today = date.fromisoformat(options['date'])
            except ValueError as exc:
                raise CommandError(f"Invalid --date: {options['date']}") from exc

        if options['dry_run']:
            with transaction.atomic():
                raised = ledger.evaluate_alerts(today=today)
                active = Alert.objects.active().count()
                transaction.set_rollback(True)

            self.stdout.write(f'{len(raised)} alert(s) would be raised, {active} would be active')
        else:
            raised = ledger.evaluate_alerts(today=today)
            active = Alert.objects.active().count()
            self.stdout.write(
                self.style.SUCCESS(f'{len(raised)} alert(s) raised, {active} active')
            )
