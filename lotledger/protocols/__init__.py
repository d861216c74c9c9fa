"""
LotLedger Protocols.

Defines interfaces for pluggable backends.
"""

from lotledger.protocols.labels import LABEL_TYPES, LabelCodec, LabelData

__all__ = [
    "LABEL_TYPES",
    "LabelCodec",
    "LabelData",
]
