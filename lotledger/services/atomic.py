"""
Transaction boundary for ledger writes.

Wraps transaction.atomic() and turns database failures into ledger
errors, so callers only ever see the LedgerError taxonomy.
"""

import logging
from contextlib import contextmanager

from django.db import DatabaseError, IntegrityError, OperationalError, transaction

from lotledger.exceptions import ConflictError, StorageError

logger = logging.getLogger('lotledger')

# serialization_failure, deadlock_detected, lock_not_available
CONTENTION_SQLSTATES = frozenset({'40001', '40P01', '55P03'})


def is_contention(exc: DatabaseError) -> bool:
    """True when the database refused a write because another transaction holds the lock."""
    cause = exc.__cause__
    sqlstate = getattr(cause, 'pgcode', None) or getattr(cause, 'sqlstate', None)
    if sqlstate in CONTENTION_SQLSTATES:
        return True
    if isinstance(exc, OperationalError):
        message = str(exc).lower()
        return 'database is locked' in message or 'database table is locked' in message
    return False


@contextmanager
def ledger_atomic():
    """
    Run the block as one unit: everything commits or nothing does.

    Raises:
        ConflictError('INTEGRITY_VIOLATION'): A constraint rejected a write
            (duplicate lot number from a concurrent receive, negative quantity)
        ConflictError('CONCURRENT_MODIFICATION'): Another transaction holds the
            lock (SQLite "database is locked", PostgreSQL serialization failure
            or deadlock); the caller may retry
        StorageError: Any other database failure
    """
    try:
        with transaction.atomic():
            yield
    except IntegrityError as exc:
        logger.warning("ledger.integrity_violation", extra={"error": str(exc)})
        raise ConflictError('INTEGRITY_VIOLATION', detail=str(exc)) from exc
    except DatabaseError as exc:
        if is_contention(exc):
            logger.warning("ledger.lock_contention", extra={"error": str(exc)})
            raise ConflictError(detail=str(exc)) from exc
        logger.error("ledger.storage_failure", extra={"error": str(exc)})
        raise StorageError(detail=str(exc)) from exc
