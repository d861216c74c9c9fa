"""
QR Label Codec — renders label payloads as SVG QR codes.

Settings:
    LOTLEDGER = {
        "LABEL_CODEC": "lotledger.adapters.qr.QrLabelCodec",
        "QR_BOX_SIZE": 10,
        "QR_BORDER": 2,
    }
"""

from __future__ import annotations

from io import BytesIO

import qrcode
from qrcode.image.svg import SvgPathImage

from lotledger.conf import ledger_settings


class QrLabelCodec:
    """QR code as a standalone SVG document."""

    content_type = "image/svg+xml"

    def __init__(self, box_size: int | None = None, border: int | None = None):
        self.box_size = box_size or ledger_settings.QR_BOX_SIZE
        self.border = ledger_settings.QR_BORDER if border is None else border

    def encode(self, payload: str) -> bytes:
        qr = qrcode.QRCode(
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=self.box_size,
            border=self.border,
            image_factory=SvgPathImage,
        )
        qr.add_data(payload)
        qr.make(fit=True)

        buffer = BytesIO()
        qr.make_image().save(buffer)
        return buffer.getvalue()
