"""
LotLedger — lot-tracked inventory ledger for Django.

Usage:
    from lotledger import ledger, InsufficientStockError

    lot = ledger.receive(150, item, bin_a1, unit_cost='5.99')
    ledger.pick(20, lot)
    ledger.on_hand(item)  # 130
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name in ('ledger', 'Ledger'):
        from lotledger.service import Ledger
        return Ledger
    elif name in _ERRORS:
        from lotledger import exceptions
        return getattr(exceptions, name)
    elif name in _MODELS:
        from lotledger import models
        return getattr(models, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


_ERRORS = (
    'LedgerError',
    'ValidationError',
    'NotFoundError',
    'InsufficientStockError',
    'ConflictError',
    'StorageError',
)

_MODELS = (
    'Item',
    'Location',
    'StockLot',
    'Movement',
    'Alert',
    'Supplier',
    'Customer',
    'MovementType',
    'LocationType',
    'AlertType',
    'AlertSeverity',
    'AlertStatus',
)

__all__ = ['ledger', 'Ledger', *_ERRORS, *_MODELS]

__version__ = '0.1.0'
