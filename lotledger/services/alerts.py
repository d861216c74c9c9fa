"""
Ledger alerts — derive low-stock, expiry and negative-balance alerts.

Usage:
    from lotledger.services.alerts import evaluate_item, evaluate_all, dismiss

    # Runs automatically inside every ledger mutation; call directly
    # (or via `manage.py evaluate_alerts`) for time-driven expiry checks
    raised = evaluate_item(item)
    dismiss(raised[0], user=request.user)

Each condition keeps at most one ACTIVE alert per (type, item, lot).
Alerts resolve automatically when the condition clears. A dismissed
alert does not suppress detection: the next evaluation raises a fresh one.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum
from django.db.models.functions import Coalesce
from django.utils import timezone
from django.utils.text import Truncator

from lotledger.conf import ledger_settings
from lotledger.exceptions import NotFoundError, ValidationError
from lotledger.models.alert import Alert
from lotledger.models.enums import AlertSeverity, AlertStatus, AlertType
from lotledger.models.item import Item
from lotledger.models.lot import StockLot

logger = logging.getLogger('lotledger')


def evaluate_item(item, today: date | None = None) -> list[Alert]:
    """
    Re-check every alert condition for one item.

    Args:
        item: Item instance
        today: Reference date for expiry checks (None = today)

    Returns:
        Alerts newly raised by this evaluation (kept ones are not included).
    """
    today = today or date.today()
    raised = []
    raised.extend(_check_low_stock(item))
    raised.extend(_check_expiry(item, today))
    raised.extend(_check_negative_balance(item))
    return raised


def evaluate_all(today: date | None = None) -> list[Alert]:
    """Evaluate every item, one transaction per item."""
    raised = []
    for item in Item.objects.all().iterator():
        with transaction.atomic():
            raised.extend(evaluate_item(item, today))
    return raised


def dismiss(alert, user=None) -> Alert:
    """
    Acknowledge an alert.

    Transition: ACTIVE -> DISMISSED. The underlying condition is untouched.

    Raises:
        NotFoundError: If the alert does not exist
        ValidationError('INVALID_STATUS'): If the alert is not ACTIVE
    """
    pk = getattr(alert, 'pk', alert)

    with transaction.atomic():
        try:
            locked = Alert.objects.select_for_update().get(pk=pk)
        except Alert.DoesNotExist:
            raise NotFoundError(alert_id=pk)

        if locked.status != AlertStatus.ACTIVE:
            raise ValidationError(
                'INVALID_STATUS',
                current=locked.status,
                expected=AlertStatus.ACTIVE,
            )

        locked.status = AlertStatus.DISMISSED
        locked.resolved_by = user
        locked.resolved_at = timezone.now()
        locked.save(update_fields=['status', 'resolved_by', 'resolved_at', 'updated_at'])

    logger.info("ledger.alert.dismissed", extra={"alert_id": locked.pk, "type": locked.type})
    return locked


# ══════════════════════════════════════════════════════════════
# CONDITIONS
# ══════════════════════════════════════════════════════════════


def _check_low_stock(item) -> list[Alert]:
    on_hand = StockLot.objects.filter(item=item).aggregate(
        t=Coalesce(Sum('quantity'), Decimal('0'))
    )['t']

    if on_hand < item.min_stock_threshold:
        alert = _raise(
            AlertType.LOW_STOCK,
            AlertSeverity.MEDIUM,
            item,
            message=(
                f"{item.name} ({item.sku}) is low on stock: "
                f"{on_hand} {item.unit} on hand, minimum {item.min_stock_threshold}"
            ),
        )
        return [alert] if alert else []

    _resolve(AlertType.LOW_STOCK, item)
    return []


def _check_expiry(item, today: date) -> list[Alert]:
    horizon = today + timedelta(days=ledger_settings.EXPIRY_WARNING_DAYS)
    expiring = StockLot.objects.filter(item=item).in_stock().expiring_before(horizon)

    raised, flagged = [], []
    for lot in expiring:
        flagged.append(lot.pk)
        days = lot.days_to_expiry(today)
        if days < 0:
            message = f"Lot {lot.lot_number} of {item.name} expired {-days} day(s) ago"
        elif days == 0:
            message = f"Lot {lot.lot_number} of {item.name} expires today"
        else:
            message = f"Lot {lot.lot_number} of {item.name} expires in {days} day(s)"

        if days <= ledger_settings.EXPIRY_CRITICAL_DAYS:
            severity = AlertSeverity.MEDIUM
        else:
            severity = AlertSeverity.LOW

        alert = _raise(AlertType.EXPIRY_WARNING, severity, item, lot=lot, message=message)
        if alert:
            raised.append(alert)

    _resolve(AlertType.EXPIRY_WARNING, item, keep_lots=flagged)
    return raised


def _check_negative_balance(item) -> list[Alert]:
    # The ledger and the database both refuse negative lots;
    # this only fires if rows were written around them.
    raised, flagged = [], []
    for lot in StockLot.objects.filter(item=item, quantity__lt=0):
        flagged.append(lot.pk)
        alert = _raise(
            AlertType.NEGATIVE_BALANCE,
            AlertSeverity.HIGH,
            item,
            lot=lot,
            message=f"Lot {lot.lot_number} of {item.name} has negative quantity {lot.quantity}",
        )
        if alert:
            raised.append(alert)

    _resolve(AlertType.NEGATIVE_BALANCE, item, keep_lots=flagged)
    return raised


# ══════════════════════════════════════════════════════════════
# INTERNALS
# ══════════════════════════════════════════════════════════════


def _raise(alert_type, severity, item, message, lot=None) -> Alert | None:
    """Create an ACTIVE alert unless one already exists; returns the new one."""
    message = Truncator(message).chars(Alert._meta.get_field('message').max_length)

    active = Alert.objects.filter(
        type=alert_type, item=item, lot=lot, status=AlertStatus.ACTIVE,
    ).first()

    if active is not None:
        if active.severity != severity or active.message != message:
            active.severity = severity
            active.message = message
            active.save(update_fields=['severity', 'message', 'updated_at'])
        return None

    alert = Alert.objects.create(
        type=alert_type,
        severity=severity,
        item=item,
        lot=lot,
        message=message,
    )
    logger.warning(
        "ledger.alert.raised",
        extra={
            "alert_id": alert.pk,
            "type": alert_type,
            "severity": severity,
            "sku": item.sku,
            "lot_id": lot.pk if lot else None,
        },
    )
    return alert


def _resolve(alert_type, item, keep_lots=None) -> int:
    """Resolve ACTIVE alerts whose condition no longer holds."""
    qs = Alert.objects.filter(type=alert_type, item=item, status=AlertStatus.ACTIVE)
    if keep_lots:
        qs = qs.exclude(lot_id__in=keep_lots)

    now = timezone.now()
    count = qs.update(status=AlertStatus.RESOLVED, resolved_at=now, updated_at=now)
    if count:
        logger.info(
            "ledger.alert.resolved",
            extra={"type": alert_type, "sku": item.sku, "count": count},
        )
    return count
