"""
Exceptions for LotLedger.

Every error is a LedgerError subclass with a structured code for
programmatic handling. Callers catch by type, then branch on ``code``.

Usage:
    try:
        ledger.pick(Decimal('10'), lot)
    except InsufficientStockError as e:
        print(f"Only {e.available} left")
    except ConflictError:
        # re-read the lot and retry
        ...
"""

from decimal import Decimal
from typing import Any


class LedgerError(Exception):
    """
    Structured exception for ledger operations.

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    default_code = 'LEDGER_ERROR'

    _default_messages = {
        'LEDGER_ERROR': 'Ledger operation failed',
    }

    def __init__(self, code: str | None = None, message: str | None = None, **data):
        self.code = code or self.default_code
        self.message = message or self._default_messages.get(self.code, self.code)
        self.data = data
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.data:
            details = ', '.join(f'{k}={v}' for k, v in self.data.items())
            return f"[{self.code}] {self.message} ({details})"
        return f"[{self.code}] {self.message}"

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {
                k: str(v) if isinstance(v, Decimal) else v
                for k, v in self.data.items()
            }
        }


class ValidationError(LedgerError):
    """Bad or missing input, or a precondition on the entity itself."""

    default_code = 'INVALID'

    _default_messages = {
        'INVALID': 'Invalid input',
        'INVALID_QUANTITY': 'Quantity must be a positive number within ledger precision',
        'INVALID_COST': 'Unit cost must be a non-negative number within ledger precision',
        'INVALID_DELTA': 'Adjustment delta must be a non-zero number within ledger precision',
        'INVALID_STATUS': 'Invalid status for this operation',
        'REASON_REQUIRED': 'A reason is required',
        'FIELD_REQUIRED': 'Required field is missing',
        'SAME_LOCATION': 'Cannot transfer to the same location',
        'DUPLICATE_SKU': 'An item with this SKU already exists',
        'DUPLICATE_LOCATION': 'A location with this name already exists',
        'DUPLICATE_LOT_NUMBER': 'Lot number already used for this item',
        'SKU_IMMUTABLE': 'SKU cannot be changed once created',
        'ITEM_UNDELETABLE': 'Items are never deleted',
        'LOCATION_IN_USE': 'Location is still referenced',
    }


class NotFoundError(LedgerError):
    """Referenced item, location, lot or alert does not exist."""

    default_code = 'NOT_FOUND'

    _default_messages = {
        'NOT_FOUND': 'Record not found',
        'ITEM_NOT_FOUND': 'Item not found',
        'LOCATION_NOT_FOUND': 'Location not found',
        'LOT_NOT_FOUND': 'Stock lot not found',
    }


class InsufficientStockError(LedgerError):
    """Requested quantity exceeds what the lot holds."""

    default_code = 'INSUFFICIENT_STOCK'

    _default_messages = {
        'INSUFFICIENT_STOCK': 'Not enough stock in lot',
    }

    @property
    def available(self) -> Decimal:
        """Shortcut for data['available']."""
        return self.data.get('available', Decimal('0'))

    @property
    def requested(self) -> Decimal:
        """Shortcut for data['requested']."""
        return self.data.get('requested', Decimal('0'))


class ConflictError(LedgerError):
    """A concurrent change invalidated a precondition. Retry with fresh data."""

    default_code = 'CONCURRENT_MODIFICATION'

    _default_messages = {
        'CONCURRENT_MODIFICATION': 'Concurrent modification detected',
        'INTEGRITY_VIOLATION': 'Write rejected by a database constraint',
    }


class StorageError(LedgerError):
    """Transport or commit failure in the database."""

    default_code = 'STORAGE_FAILURE'

    _default_messages = {
        'STORAGE_FAILURE': 'Storage operation failed',
    }
