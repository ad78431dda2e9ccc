from __future__ import annotations

"""
Invoice pool with per-run capacity tracking.

The pool is loaded once per run. Every reservation goes through the ledger, so a
second payment sees the remaining balance left by the first one.
"""

from typing import Dict, Iterable, Iterator, List

from paylink.errors import CapacityExceeded
from paylink.model.documents import Invoice


class CapacityLedger:
    """Running amount_paid per invoice, seeded from the persisted values."""

    def __init__(self, invoices: Iterable[Invoice] = ()):
        self._paid: Dict[str, int] = {}
        for inv in invoices:
            self.seed(inv.invoice_id, inv.amount_paid)

    def seed(self, invoice_id: str, amount_paid: int) -> None:
        self._paid[invoice_id] = amount_paid

    def amount_paid(self, invoice_id: str) -> int:
        return self._paid[invoice_id]

    def add(self, invoice_id: str, amount: int) -> int:
        self._paid[invoice_id] += amount
        return self._paid[invoice_id]

    def __contains__(self, invoice_id: object) -> bool:
        return invoice_id in self._paid


class InvoicePool:
    """Unpaid invoices for one run plus the capacity ledger that guards them."""

    def __init__(self, invoices: Iterable[Invoice]):
        # Materialized once; order of the source is kept for deterministic tie-breaks
        self._invoices: List[Invoice] = [inv for inv in invoices if inv.is_unpaid]
        self._by_id: Dict[str, Invoice] = {inv.invoice_id: inv for inv in self._invoices}
        self.ledger = CapacityLedger(self._invoices)

    def __len__(self) -> int:
        return len(self._invoices)

    def unpaid_invoices(self) -> Iterator[Invoice]:
        """Invoices that were unpaid at load time, in source order.

        Returns a fresh iterator on every call.
        """
        return iter(self._invoices)

    def get(self, invoice_id: str) -> Invoice:
        return self._by_id[invoice_id]

    def amount_paid(self, invoice_id: str) -> int:
        """Live paid amount including reservations made in this run."""
        return self.ledger.amount_paid(invoice_id)

    def remaining_capacity(self, invoice_id: str) -> int:
        return self._by_id[invoice_id].total_amount - self.ledger.amount_paid(invoice_id)

    def reserve(self, invoice_id: str, amount: int) -> int:
        """Book amount against the invoice and return the new paid amount.

        Raises CapacityExceeded (leaving the ledger untouched) when the invoice
        would end up paid above its total.
        """
        if amount < 0:
            raise ValueError(f"Cannot reserve a negative amount: {amount}")
        remaining = self.remaining_capacity(invoice_id)
        if amount > remaining:
            raise CapacityExceeded(invoice_id, requested=amount, remaining=remaining)
        return self.ledger.add(invoice_id, amount)


__all__ = ["CapacityLedger", "InvoicePool"]
