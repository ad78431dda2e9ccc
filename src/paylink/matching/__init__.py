from .batch import INVOICE_ENTITY, PAYMENT_ENTITY, UpdateBatch, UpdateBatchBuilder
from .evidence import invoice_date_referenced, invoice_number_referenced
from .pool import CapacityLedger, InvoicePool
from .scorer import MatchCandidate, best_match, collect_candidates, score_invoice

__all__ = [
    "INVOICE_ENTITY",
    "PAYMENT_ENTITY",
    "UpdateBatch",
    "UpdateBatchBuilder",
    "invoice_date_referenced",
    "invoice_number_referenced",
    "CapacityLedger",
    "InvoicePool",
    "MatchCandidate",
    "best_match",
    "collect_candidates",
    "score_invoice",
]
