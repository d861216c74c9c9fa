"""Django app configuration for LotLedger."""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class LotLedgerConfig(AppConfig):
    """Configuration for LotLedger app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "lotledger"
    verbose_name = _("Inventory Ledger")
