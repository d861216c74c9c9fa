"""
Ledger services — modular organization of ledger operations.

Re-exports the service classes combined by lotledger.service.Ledger:
    from lotledger.services import LedgerMovements, LedgerQueries, LedgerCatalog
"""

from lotledger.services.catalog import LedgerCatalog
from lotledger.services.movements import LedgerMovements
from lotledger.services.queries import LedgerQueries

__all__ = [
    'LedgerMovements',
    'LedgerQueries',
    'LedgerCatalog',
]
