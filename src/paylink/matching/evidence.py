from __future__ import annotations

"""
Text evidence checks against a payment's free-text purpose.

Pure functions, no state. Only exact token and exact date matching; no fuzzy logic.
"""

import re
from datetime import date, datetime

# Date format used by payers when quoting an invoice date ("от 19.02.2025")
PURPOSE_DATE_FORMAT = "%d.%m.%Y"


def number_forms(invoice_number: str) -> list[str]:
    """The invoice number as written, plus its unpadded form for "00102"-style names."""
    number = (invoice_number or "").strip()
    if not number:
        return []
    forms = [number]
    unpadded = number.lstrip("0")
    if number.isdigit() and unpadded and unpadded != number:
        forms.append(unpadded)
    return forms


def invoice_number_referenced(invoice_number: str, purpose: str) -> bool:
    """True when invoice_number occurs in purpose as a whole token.

    "102" matches "сч 102 от" but not "сч 1020 от". A zero-padded "00102" also
    matches a bare "102". Lookarounds are used instead of a plain \\b so numbers
    with punctuation at either end ("A-17/") still work.
    """
    if not purpose:
        return False
    for form in number_forms(invoice_number):
        pattern = r"(?<!\w)" + re.escape(form) + r"(?!\w)"
        if re.search(pattern, purpose):
            return True
    return False


def format_purpose_date(moment: date | datetime) -> str:
    return moment.strftime(PURPOSE_DATE_FORMAT)


def invoice_date_referenced(invoice_date: date | datetime, purpose: str) -> bool:
    """True when the invoice date, formatted as dd.mm.yyyy, appears in purpose."""
    if not purpose:
        return False
    return format_purpose_date(invoice_date) in purpose


__all__ = [
    "PURPOSE_DATE_FORMAT",
    "invoice_number_referenced",
    "invoice_date_referenced",
    "format_purpose_date",
    "number_forms",
]
