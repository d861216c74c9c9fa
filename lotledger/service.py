"""
Ledger Service — The single public interface for all inventory operations.

Usage:
    from lotledger import ledger, InsufficientStockError

    lot = ledger.receive(150, item, bin_a1, unit_cost='5.99')
    ledger.pick(20, lot, reference_number='SO-1001')
    ledger.on_hand(item)  # Decimal('130')
"""

from lotledger.services import alerts
from lotledger.services.catalog import LedgerCatalog
from lotledger.services.movements import LedgerMovements
from lotledger.services.queries import LedgerQueries


class Ledger(LedgerMovements, LedgerCatalog, LedgerQueries):
    """
    Single interface for all ledger operations.

    Parameter convention: (quantity, lot-or-item, ...)
    Follows natural language: "Pick 20 from lot 7"

    IMPORTANT: All state-changing methods use atomic transactions
    with row locks on the lot. See each method's docstring.
    """

    @classmethod
    def evaluate_alerts(cls, item=None, today=None):
        """Re-check alert conditions for one item, or for every item."""
        if item is None:
            return alerts.evaluate_all(today)
        return alerts.evaluate_item(item, today)

    @classmethod
    def dismiss_alert(cls, alert, user=None):
        return alerts.dismiss(alert, user=user)


ledger = Ledger
