"""
LotLedger Adapters.

Loads the configured label codec from settings.

Usage:
    from lotledger.adapters import get_label_codec

    codec = get_label_codec()
    svg = codec.encode('{"type": "item", "id": "1"}')

Settings:
    LOTLEDGER = {
        "LABEL_CODEC": "lotledger.adapters.qr.QrLabelCodec",
    }
"""

from __future__ import annotations

import logging
import threading

from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from lotledger.conf import ledger_settings
from lotledger.protocols.labels import LabelCodec

logger = logging.getLogger(__name__)


# Cached codec instance
_lock = threading.Lock()
_label_codec: LabelCodec | None = None


def get_label_codec() -> LabelCodec:
    """
    Return the configured label codec.

    Raises:
        ImproperlyConfigured: If LABEL_CODEC is empty or cannot be imported
    """
    global _label_codec

    if _label_codec is None:
        with _lock:
            if _label_codec is None:  # double-checked
                codec_path = ledger_settings.LABEL_CODEC

                if not codec_path:
                    raise ImproperlyConfigured(
                        "LOTLEDGER['LABEL_CODEC'] must be configured. "
                        "Example: 'lotledger.adapters.qr.QrLabelCodec'"
                    )

                try:
                    codec_class = import_string(codec_path)
                except ImportError as e:
                    raise ImproperlyConfigured(
                        f"Failed to import label codec '{codec_path}': {e}"
                    ) from e

                _label_codec = codec_class()
                logger.debug("Loaded label codec: %s", codec_path)

    return _label_codec


def reset_label_codec() -> None:
    """Reset the cached codec. Useful for testing."""
    global _label_codec
    _label_codec = None


__all__ = [
    "get_label_codec",
    "reset_label_codec",
]
