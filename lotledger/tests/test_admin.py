"""
Tests for the basic admin registrations.
"""

import pytest
from django.urls import reverse

from lotledger.models import AlertStatus
from lotledger.services.alerts import evaluate_item


pytestmark = pytest.mark.django_db


@pytest.mark.parametrize('model', ['item', 'location', 'stocklot', 'movement', 'alert'])
def test_changelists_render(admin_client, widget_lot, model):
    response = admin_client.get(reverse(f'admin:lotledger_{model}_changelist'))

    assert response.status_code == 200


def test_ledger_records_are_read_only(admin_client, widget_lot):
    response = admin_client.get(reverse('admin:lotledger_stocklot_add'))

    assert response.status_code == 403


def test_dismiss_action(admin_client, widget, admin_user):
    alert = evaluate_item(widget)[0]

    response = admin_client.post(
        reverse('admin:lotledger_alert_changelist'),
        {'action': 'dismiss_alerts', '_selected_action': [alert.pk]},
    )

    assert response.status_code == 302
    alert.refresh_from_db()
    assert alert.status == AlertStatus.DISMISSED
    assert alert.resolved_by == admin_user


def test_export_lots_action(admin_client, widget_lot):
    response = admin_client.post(
        reverse('admin:lotledger_stocklot_changelist'),
        {'action': 'export_lots_csv', '_selected_action': [widget_lot.pk]},
    )

    assert response.status_code == 200
    assert response['Content-Type'] == 'text/csv'
    assert b'"LOT-001"' in response.content


def test_in_use_location_cannot_be_deleted(admin_client, widget_lot, bin_a):
    response = admin_client.get(reverse('admin:lotledger_location_delete', args=[bin_a.pk]))

    assert response.status_code == 403
