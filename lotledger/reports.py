"""
CSV reports.

Columns are dot paths resolved against each record, so the same
function exports model instances and plain dicts:

    export_csv(lots, ['item.sku', 'lot_number', 'quantity'])

Every field is quoted. None renders as an empty cell.
"""

import csv
import io
import logging
from datetime import date, datetime

from lotledger.services.queries import LedgerQueries

logger = logging.getLogger('lotledger')

ON_HAND_COLUMNS = [
    'item.sku', 'item.name', 'lot_number', 'quantity',
    'item.unit', 'location.name', 'unit_cost',
]

ON_HAND_HEADERS = ['SKU', 'Item', 'Lot', 'Quantity', 'Unit', 'Location', 'Unit cost']

MOVEMENT_COLUMNS = [
    'created_at', 'item.sku', 'item.name', 'type',
    'quantity', 'reason', 'user.username',
]

MOVEMENT_HEADERS = ['Date', 'SKU', 'Item', 'Type', 'Quantity', 'Reason', 'User']


def lookup(record, path: str):
    """Follow a dot path through dict keys or attributes; None when broken."""
    value = record
    for part in path.split('.'):
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


def _cell(value) -> str:
    if value is None:
        return ''
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def export_csv(records, columns: list[str], headers: list[str] | None = None) -> str:
    """
    Render records as CSV text.

    Args:
        records: Iterable of dicts or objects
        columns: Dot paths, one per column
        headers: Header row (defaults to the column paths)
    """
    if headers is not None and len(headers) != len(columns):
        from lotledger.exceptions import ValidationError
        raise ValidationError('INVALID', field='headers', expected=len(columns), got=len(headers))

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator='\n')
    writer.writerow(headers or columns)

    rows = 0
    for record in records:
        writer.writerow([_cell(lookup(record, path)) for path in columns])
        rows += 1

    logger.debug("ledger.report.exported", extra={"rows": rows, "columns": len(columns)})
    return buffer.getvalue()


def on_hand_report(item=None, location=None) -> str:
    """On-hand inventory by lot (non-empty lots only)."""
    lots = LedgerQueries.lots(item=item, location=location).order_by('item__sku', 'lot_number')
    return export_csv(lots, ON_HAND_COLUMNS, ON_HAND_HEADERS)


def movement_report(item=None, since=None, until=None, limit: int | None = None) -> str:
    """Movement history, newest first."""
    movements = LedgerQueries.movements(item=item, since=since, until=until, limit=limit)
    return export_csv(movements, MOVEMENT_COLUMNS, MOVEMENT_HEADERS)
