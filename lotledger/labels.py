"""
Scannable labels for items and lots.

A label carries a small JSON document:
    {"type": "lot", "id": "17", "name": "Widget", "qty": 150,
     "lot": "LOT-1718000000000", "expiry": "2026-01-31"}

Usage:
    from lotledger.labels import lot_label, encode_label, resolve_label

    svg = encode_label(lot_label(lot))
    record = resolve_label(scanned_text)  # Item, StockLot or None
"""

import json
import logging

from lotledger.adapters import get_label_codec
from lotledger.exceptions import ValidationError
from lotledger.protocols.labels import LABEL_TYPES, LabelData

logger = logging.getLogger('lotledger')


def item_label(item) -> LabelData:
    return LabelData(type='item', id=str(item.pk), name=item.name)


def lot_label(lot) -> LabelData:
    return LabelData(
        type='lot',
        id=str(lot.pk),
        name=lot.item.name,
        qty=LabelData.number(lot.quantity),
        lot=lot.lot_number,
        expiry=lot.expiry_date.isoformat() if lot.expiry_date else None,
    )


def label_payload(record: LabelData | dict) -> str:
    """
    Serialize a label record to its JSON payload.

    Raises:
        ValidationError('INVALID'): If type is unknown or id is missing
    """
    data = record.as_dict() if isinstance(record, LabelData) else dict(record)

    if data.get('type') not in LABEL_TYPES:
        raise ValidationError('INVALID', field='type', value=data.get('type'))
    if data.get('id') in (None, ''):
        raise ValidationError('FIELD_REQUIRED', field='id')

    data['id'] = str(data['id'])
    return json.dumps(data, separators=(',', ':'))


def encode_label(record: LabelData | dict) -> bytes:
    """Render a label image with the configured codec."""
    return get_label_codec().encode(label_payload(record))


def decode_label(text: str) -> LabelData | None:
    """
    Parse a scanned payload.

    Returns None for anything that is not a JSON object with a
    known ``type`` and a non-empty ``id``.
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        return None

    if not isinstance(data, dict):
        return None
    if data.get('type') not in LABEL_TYPES or data.get('id') in (None, ''):
        return None

    return LabelData(
        type=data['type'],
        id=str(data['id']),
        name=data.get('name'),
        qty=data.get('qty'),
        expiry=data.get('expiry'),
        lot=data.get('lot'),
    )


def resolve_label(text: str):
    """Look up the Item or StockLot a scanned label points to."""
    from lotledger.models import Item, StockLot

    data = decode_label(text)
    if data is None:
        return None

    model = Item if data.type == 'item' else StockLot
    try:
        return model.objects.get(pk=int(data.id))
    except (ValueError, model.DoesNotExist):
        logger.info("ledger.label.unresolved", extra={"type": data.type, "id": data.id})
        return None
