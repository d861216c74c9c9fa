"""
Base classes for Unfold admin in LotLedger.

Textarea fields (notes, descriptions, alert messages) are rendered at
half height and aligned with the other form fields.
"""

from decimal import Decimal

from django import forms
from django.contrib.admin.widgets import AdminTextareaWidget
from unfold.admin import ModelAdmin, TabularInline
from unfold.widgets import UnfoldAdminTextareaWidget

TEXTAREA_WIDGETS = (forms.Textarea, AdminTextareaWidget, UnfoldAdminTextareaWidget)


def format_quantity(value: Decimal | None, unit: str = '', decimal_places: int = 3) -> str:
    """
    Format a lot or movement quantity, trimming trailing zeros.

    format_quantity(Decimal('150.000'), 'pcs') -> "150 pcs"
    format_quantity(Decimal('2.500'))          -> "2.5"
    """
    if value is None:
        return "-"
    text = f"{value:.{decimal_places}f}"
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return f"{text} {unit}".strip()


def compact_textareas(fields) -> None:
    """Halve textarea rows and cap their width."""
    for field in fields.values():
        widget = field.widget
        if not isinstance(widget, TEXTAREA_WIDGETS):
            continue

        style = [
            s for s in widget.attrs.get("style", "").split(";")
            if s.strip() and "height" not in s.lower() and "width" not in s.lower()
        ]
        style.append("width: 100%; max-width: 42rem")
        widget.attrs["style"] = "; ".join(s.strip() for s in style)

        try:
            widget.attrs["rows"] = max(1, int(widget.attrs.get("rows", 4)) // 2)
        except (ValueError, TypeError):
            widget.attrs["rows"] = 2


class BaseTabularInline(TabularInline):
    """Read-only tabular inline for ledger-owned rows."""

    extra = 0
    can_delete = False
    show_change_link = True

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False


class BaseModelAdmin(ModelAdmin):
    """ModelAdmin base with compact textareas and Unfold defaults."""

    compressed_fields = True

    def get_form(self, request, obj=None, **kwargs):
        form = super().get_form(request, obj, **kwargs)
        compact_textareas(form.base_fields)
        return form
