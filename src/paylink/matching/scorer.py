from __future__ import annotations

"""
Payment-to-invoice scoring (no I/O, no printing).

- Hard filter: organization, agent and bank account must equal the payment's, and the
  invoice must still have capacity left in this run.
- Score 2: invoice number quoted in the purpose as a whole token.
- Score 1: exact amount and invoice date quoted in the purpose.
- Every eligible invoice is scored before picking; the first hit never wins by default.
- Ties: earliest invoice moment, then pool order.
"""

from dataclasses import dataclass
from typing import List, Optional

from paylink.matching.evidence import invoice_date_referenced, invoice_number_referenced
from paylink.matching.pool import InvoicePool
from paylink.model.documents import Invoice, Payment

SCORE_NUMBER = 2
SCORE_AMOUNT_DATE = 1
SCORE_NONE = 0

METHOD_BY_SCORE = {
    SCORE_NUMBER: "number_in_purpose",
    SCORE_AMOUNT_DATE: "amount_and_date",
}


@dataclass
class MatchCandidate:
    payment: Payment
    invoice: Invoice
    score: int
    position: int  # index of the invoice in pool order

    @property
    def method(self) -> str:
        return METHOD_BY_SCORE.get(self.score, "none")

    def sort_key(self) -> tuple:
        return (-self.score, self.invoice.moment, self.position)


def _same_parties(payment: Payment, invoice: Invoice) -> bool:
    return (
        invoice.organization_href == payment.organization_href
        and invoice.agent_href == payment.agent_href
        and invoice.account_href == payment.account_href
    )


def eligible_invoices(payment: Payment, pool: InvoicePool) -> List[tuple[int, Invoice]]:
    """(position, invoice) pairs that pass the hard filter for this payment."""
    return [
        (pos, inv)
        for pos, inv in enumerate(pool.unpaid_invoices())
        if _same_parties(payment, inv) and pool.remaining_capacity(inv.invoice_id) > 0
    ]


def score_invoice(payment: Payment, invoice: Invoice) -> int:
    if invoice_number_referenced(invoice.number, payment.purpose):
        return SCORE_NUMBER
    if invoice.total_amount == payment.amount and invoice_date_referenced(
        invoice.moment, payment.purpose
    ):
        return SCORE_AMOUNT_DATE
    return SCORE_NONE


def collect_candidates(payment: Payment, pool: InvoicePool) -> List[MatchCandidate]:
    """All invoices with score >= 1, best first."""
    candidates: List[MatchCandidate] = []
    for pos, inv in eligible_invoices(payment, pool):
        score = score_invoice(payment, inv)
        if score > SCORE_NONE:
            candidates.append(MatchCandidate(payment=payment, invoice=inv, score=score, position=pos))
    candidates.sort(key=MatchCandidate.sort_key)
    return candidates


def best_match(payment: Payment, pool: InvoicePool) -> Optional[MatchCandidate]:
    candidates = collect_candidates(payment, pool)
    return candidates[0] if candidates else None


__all__ = [
    "MatchCandidate",
    "SCORE_NUMBER",
    "SCORE_AMOUNT_DATE",
    "eligible_invoices",
    "score_invoice",
    "collect_candidates",
    "best_match",
]
