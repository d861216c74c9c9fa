"""
LotLedger configuration.

Usage in settings.py:
    LOTLEDGER = {
        "LOT_NUMBER_PREFIX": "LOT",
        "EXPIRY_WARNING_DAYS": 30,
        "EXPIRY_CRITICAL_DAYS": 7,
        "LABEL_CODEC": "lotledger.adapters.qr.QrLabelCodec",
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class LedgerSettings:
    """LotLedger configuration settings."""

    # Prefix for auto-generated lot numbers (LOT-<timestamp>)
    LOT_NUMBER_PREFIX: str = "LOT"

    # Lots expiring within this many days raise an expiry_warning
    EXPIRY_WARNING_DAYS: int = 30

    # At or below this many days the warning is medium instead of low
    EXPIRY_CRITICAL_DAYS: int = 7

    # Re-run the alert evaluator inside every ledger transaction
    EVALUATE_ALERTS_ON_MUTATION: bool = True

    # Default row limit for movement history reads (0 = unlimited)
    MOVEMENT_HISTORY_LIMIT: int = 100

    # Label codec backend (dotted path)
    LABEL_CODEC: str = "lotledger.adapters.qr.QrLabelCodec"

    # QR rendering
    QR_BOX_SIZE: int = 10
    QR_BORDER: int = 2


def get_ledger_settings() -> LedgerSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "LOTLEDGER", {})
    return LedgerSettings(**{
        k: v for k, v in user_settings.items()
        if k in LedgerSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_ledger_settings(), name)


ledger_settings = _LazySettings()
