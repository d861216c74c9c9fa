"""
Alert model — derived facts about stock that need attention.

Alerts are raised and resolved by the evaluator in
lotledger.services.alerts. Users only dismiss them.

Usage:
    from lotledger.services.alerts import evaluate_item, dismiss

    raised = evaluate_item(item)
    dismiss(raised[0], user=request.user)
"""

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from lotledger.models.enums import AlertSeverity, AlertStatus, AlertType


class AlertQuerySet(models.QuerySet):

    def active(self):
        return self.filter(status=AlertStatus.ACTIVE)

    def for_item(self, item):
        return self.filter(item=item)


class Alert(models.Model):
    """
    A detected stock condition.

    Dismissing an alert does not suppress detection: if the condition
    still holds on the next evaluation, a fresh ACTIVE alert is raised.
    """

    type = models.CharField(max_length=20, choices=AlertType.choices, verbose_name=_('Type'))
    severity = models.CharField(
        max_length=10,
        choices=AlertSeverity.choices,
        default=AlertSeverity.MEDIUM,
        verbose_name=_('Severity'),
    )
    item = models.ForeignKey(
        'lotledger.Item',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='alerts',
        verbose_name=_('Item'),
    )
    lot = models.ForeignKey(
        'lotledger.StockLot',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='alerts',
        verbose_name=_('Lot'),
    )
    message = models.CharField(max_length=255, verbose_name=_('Message'))
    status = models.CharField(
        max_length=10,
        choices=AlertStatus.choices,
        default=AlertStatus.ACTIVE,
        db_index=True,
        verbose_name=_('Status'),
    )

    resolved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Resolved by'),
    )
    resolved_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Resolved at'))
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_('Created at'))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_('Updated at'))

    objects = AlertQuerySet.as_manager()

    class Meta:
        verbose_name = _('Alert')
        verbose_name_plural = _('Alerts')
        ordering = ['-created_at', '-pk']
        indexes = [
            models.Index(fields=['type', 'status'], name='lotledger_alert_type_idx'),
            models.Index(fields=['item', 'status'], name='lotledger_alert_item_idx'),
        ]

    @property
    def is_active(self) -> bool:
        return self.status == AlertStatus.ACTIVE

    def __str__(self) -> str:
        return f"[{self.severity}] {self.message}"
