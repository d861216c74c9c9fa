"""
LotLedger Models.

Core models for inventory tracking:
- Item: What is stocked (SKU)
- Location: Where lots are kept
- Supplier / Customer: Counterparties of in/out movements
- StockLot: Quantity of one receipt of an item at a location
- Movement: Immutable ledger of changes
- Alert: Derived low-stock / expiry / negative-balance facts
"""

from lotledger.models.alert import Alert
from lotledger.models.enums import (
    AlertSeverity,
    AlertStatus,
    AlertType,
    LocationType,
    MovementType,
)
from lotledger.models.item import Item
from lotledger.models.location import Location
from lotledger.models.lot import StockLot
from lotledger.models.movement import Movement
from lotledger.models.party import Customer, Supplier

__all__ = [
    'LocationType',
    'MovementType',
    'AlertType',
    'AlertSeverity',
    'AlertStatus',
    'Item',
    'Location',
    'Supplier',
    'Customer',
    'StockLot',
    'Movement',
    'Alert',
]
