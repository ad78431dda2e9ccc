from __future__ import annotations

"""
Update batch builder.

Collects the two outbound record sets of a run:
- payment updates keyed by payment id (attachment flag + link to the invoice)
- invoice updates keyed by invoice id; a later write replaces an earlier one so
  every invoice goes out once, carrying its final paid amount.
"""

from dataclasses import dataclass, field
from typing import Any, Dict

from paylink.model.documents import AttachmentAttribute, Invoice, Payment

PAYMENT_ENTITY = "paymentin"
INVOICE_ENTITY = "invoiceout"

Record = Dict[str, Any]


@dataclass
class UpdateBatch:
    payment_updates: Dict[str, Record] = field(default_factory=dict)
    invoice_updates: Dict[str, Record] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.payment_updates and not self.invoice_updates

    def by_entity(self) -> Dict[str, Dict[str, Record]]:
        """Non-empty update sets keyed by entity type, payments first."""
        out: Dict[str, Dict[str, Record]] = {}
        if self.payment_updates:
            out[PAYMENT_ENTITY] = self.payment_updates
        if self.invoice_updates:
            out[INVOICE_ENTITY] = self.invoice_updates
        return out


class UpdateBatchBuilder:
    def __init__(self, attribute: AttachmentAttribute, payed_sum_scale: int = 1):
        self.attribute = attribute
        self.payed_sum_scale = payed_sum_scale
        self._payments: Dict[str, Record] = {}
        self._invoices: Dict[str, Record] = {}

    def add_payment_update(self, payment: Payment, invoice: Invoice) -> Record:
        record = {
            "meta": payment.meta,
            "attributes": [self.attribute.as_attached()],
            "operations": [{"meta": invoice.meta}],
        }
        self._payments[payment.payment_id] = record
        return record

    def add_invoice_update(self, invoice: Invoice, amount_paid: int) -> Record:
        record = {
            "meta": invoice.meta,
            "payedSum": self._to_source_unit(amount_paid),
        }
        self._invoices[invoice.invoice_id] = record
        return record

    def _to_source_unit(self, amount_paid: int) -> int | float:
        if self.payed_sum_scale == 1:
            return amount_paid
        value = amount_paid / self.payed_sum_scale
        return int(value) if value.is_integer() else value

    def build(self) -> UpdateBatch:
        return UpdateBatch(payment_updates=dict(self._payments), invoice_updates=dict(self._invoices))


__all__ = [
    "PAYMENT_ENTITY",
    "INVOICE_ENTITY",
    "UpdateBatch",
    "UpdateBatchBuilder",
]
