from django.apps import AppConfig


class LotLedgerUnfoldAdminConfig(AppConfig):
    name = 'lotledger.contrib.admin_unfold'
    label = 'lotledger_admin_unfold'
    verbose_name = 'Inventory Ledger (Unfold admin)'
