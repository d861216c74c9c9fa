"""
Management command to export CSV reports.

Usage:
    python manage.py export_report onhand
    python manage.py export_report movements --output stock-movements.csv
    python manage.py export_report movements --limit 0   # full history
"""

from django.core.management.base import BaseCommand

from lotledger.reports import movement_report, on_hand_report


class Command(BaseCommand):
    """Export report command."""

    help = 'Exports the on-hand or movement report as CSV'

    def add_arguments(self, parser):
        parser.add_argument('report', choices=['onhand', 'movements'])
        parser.add_argument(
            '--output', '-o',
            help='Write to this file instead of stdout'
        )
        parser.add_argument(
            '--limit',
            type=int,
            help='Max movements (default MOVEMENT_HISTORY_LIMIT, 0 = all)'
        )

    def handle(self, *args, **options):
        if options['report'] == 'onhand':
            content = on_hand_report()
        else:
            content = movement_report(limit=options['limit'])

        if options['output']:
            with open(options['output'], 'w', newline='', encoding='utf-8') as fh:
                fh.write(content)
            self.stdout.write(self.style.SUCCESS(f"Report written to {options['output']}"))
        else:
            self.stdout.write(content, ending='')
