"""
Label Codec Protocol — Interface for rendering scannable labels.

LotLedger builds the label payload (a JSON string); a codec turns it into
an image. The default codec renders QR codes as SVG (lotledger.adapters.qr).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Protocol, runtime_checkable

LABEL_TYPES = ("item", "lot")


@dataclass(frozen=True)
class LabelData:
    """Decoded label contents."""

    type: str  # "item" or "lot"
    id: str
    name: str | None = None
    qty: int | float | None = None
    expiry: str | None = None  # ISO date
    lot: str | None = None  # lot number

    def as_dict(self) -> dict:
        """Serialize without empty keys."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    @staticmethod
    def number(value: Decimal | None) -> int | float | None:
        if value is None:
            return None
        value = Decimal(value)
        if value == value.to_integral_value():
            return int(value)
        return float(value)


@runtime_checkable
class LabelCodec(Protocol):
    """
    Protocol for label rendering.

    Implementations receive the serialized payload and return
    the encoded image.
    """

    content_type: str

    def encode(self, payload: str) -> bytes:
        """
        Render the payload.

        Args:
            payload: JSON text to embed in the label

        Returns:
            Encoded image bytes (e.g. SVG document)
        """
        ...
