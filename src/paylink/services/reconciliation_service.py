"""
Reconciliation service - attaches a batch of payments to unpaid invoices.

Run lifecycle:
- All reads (payments, invoices) happen before matching. A failing source aborts
  the run with CollaboratorFetchError and nothing is sent.
- Matching is strictly sequential. Each reservation goes through the InvoicePool
  ledger, so an invoice is never booked above its total within a run.
- All writes happen after matching, at most once per entity type, and only for
  non-empty update sets.

NO IMPORTS FROM:
- rich (console, table, prompt)
- typer

Retries are batch-level only (reconcile_with_retry); the engine never retries.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

from pydantic import ValidationError

from paylink.errors import (
    CapacityExceeded,
    CollaboratorFetchError,
    DuplicatePayment,
    IneligiblePayment,
    NoMatchFound,
    SendError,
    SkippablePaymentError,
)
from paylink.matching.batch import UpdateBatch, UpdateBatchBuilder
from paylink.matching.pool import InvoicePool
from paylink.matching.scorer import best_match
from paylink.model.documents import AttachmentAttribute, Invoice, Payment

log = logging.getLogger(__name__)

INVOICE_EXPAND = ("organizationAccount", "agent")


class PaymentSource(Protocol):
    def fetch_payments(self) -> Iterable[dict]: ...


class InvoiceSource(Protocol):
    def fetch_unpaid_candidates(self, expand: Iterable[str]) -> Iterable[dict]: ...


class Sender(Protocol):
    def send_entity(self, entity_type: str, records: Dict[str, dict]) -> Any: ...


class EngineState(StrEnum):
    IDLE = "idle"
    PROCESSING = "processing"
    CLOSED = "closed"


@dataclass
class Attachment:
    payment_id: str
    invoice_id: str
    invoice_number: str
    amount: int
    score: int
    amount_paid: int  # invoice paid amount after this reservation


@dataclass
class SkippedPayment:
    payment_id: str
    reason: str
    detail: str = ""


@dataclass
class ReconciliationReport:
    attachments: List[Attachment] = field(default_factory=list)
    skipped: List[SkippedPayment] = field(default_factory=list)
    batch: UpdateBatch = field(default_factory=UpdateBatch)
    sent: bool = False

    def skip_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for s in self.skipped:
            counts[s.reason] = counts.get(s.reason, 0) + 1
        return counts


class ReconciliationEngine:
    """
    Drives one batch run: Idle -> Processing -> Closed.

    Args:
        attribute: Attachment attribute descriptor set to true on matched payments
        sender: Receives the update sets after matching; None builds the batch
            without sending (dry-run)
        payed_sum_scale: Factor between the source's payedSum unit and minor units
    """

    def __init__(
        self,
        attribute: AttachmentAttribute,
        sender: Optional[Sender] = None,
        payed_sum_scale: int = 1,
    ):
        self.attribute = attribute
        self.sender = sender
        self.payed_sum_scale = payed_sum_scale
        self.state = EngineState.IDLE

    def run(self, payments: Iterable[Payment], invoices: Iterable[Invoice]) -> ReconciliationReport:
        if self.state is not EngineState.IDLE:
            raise RuntimeError(f"Engine already used (state: {self.state})")
        self.state = EngineState.PROCESSING

        pool = InvoicePool(invoices)
        builder = UpdateBatchBuilder(self.attribute, payed_sum_scale=self.payed_sum_scale)
        report = ReconciliationReport()
        log.info("Matching against %d unpaid invoices", len(pool))

        seen: set[str] = set()
        for payment in payments:
            try:
                if payment.payment_id in seen:
                    raise DuplicatePayment(payment.payment_id, "already processed in this run")
                seen.add(payment.payment_id)
                report.attachments.append(self._attach(payment, pool, builder))
            except SkippablePaymentError as e:
                log.debug("Skipping payment %s: %s", payment.payment_id, e)
                report.skipped.append(
                    SkippedPayment(payment_id=payment.payment_id, reason=e.reason, detail=str(e))
                )

        report.batch = builder.build()
        self.state = EngineState.CLOSED
        log.info(
            "Attached %d payments, skipped %d %s",
            len(report.attachments),
            len(report.skipped),
            report.skip_counts(),
        )

        if self.sender is not None:
            report.sent = send_batch(self.sender, report.batch)
        return report

    def _attach(self, payment: Payment, pool: InvoicePool, builder: UpdateBatchBuilder) -> Attachment:
        if not payment.is_eligible:
            raise IneligiblePayment(
                payment.payment_id, "non-positive amount or missing bank account or purpose"
            )

        candidate = best_match(payment, pool)
        if candidate is None:
            raise NoMatchFound(payment.payment_id)

        invoice = candidate.invoice
        try:
            amount_paid = pool.reserve(invoice.invoice_id, payment.amount)
        except CapacityExceeded as e:
            # No second-best retry within a run
            e.payment_id = payment.payment_id
            raise

        builder.add_payment_update(payment, invoice)
        builder.add_invoice_update(invoice, amount_paid)
        log.info(
            "Payment %s -> invoice %s (%s, score %d)",
            payment.payment_id,
            invoice.number,
            candidate.method,
            candidate.score,
        )
        return Attachment(
            payment_id=payment.payment_id,
            invoice_id=invoice.invoice_id,
            invoice_number=invoice.number,
            amount=payment.amount,
            score=candidate.score,
            amount_paid=amount_paid,
        )


def send_batch(sender: Sender, batch: UpdateBatch) -> bool:
    """Hand non-empty update sets to the sender. Returns True if anything was sent.

    Payments go first. If the invoiceout send fails after paymentin succeeded, the
    payments stay linked remotely while the invoices keep their old payedSum, and
    a rerun skips those payments as already linked.
    """
    sent = False
    for entity_type, records in batch.by_entity().items():
        try:
            sender.send_entity(entity_type, records)
        except SendError:
            raise
        except Exception as e:
            raise SendError(entity_type, str(e)) from e
        log.info("Sent %d %s updates", len(records), entity_type)
        sent = True
    return sent


def unattached(payments: Iterable[Payment]) -> List[Payment]:
    """Payments not yet linked to any document."""
    return [p for p in payments if not p.is_linked]


def load_payments(source: PaymentSource) -> List[Payment]:
    try:
        return [Payment.from_api_row(row) for row in source.fetch_payments()]
    except CollaboratorFetchError:
        raise
    except (ValidationError, KeyError, TypeError, ValueError) as e:
        raise CollaboratorFetchError(f"Malformed payment record: {e}") from e


def load_invoices(source: InvoiceSource, payed_sum_scale: int = 1) -> List[Invoice]:
    try:
        rows = source.fetch_unpaid_candidates(expand=INVOICE_EXPAND)
        return [Invoice.from_api_row(row, payed_sum_scale=payed_sum_scale) for row in rows]
    except CollaboratorFetchError:
        raise
    except (ValidationError, KeyError, TypeError, ValueError) as e:
        raise CollaboratorFetchError(f"Malformed invoice record: {e}") from e


def reconcile(
    payment_source: PaymentSource,
    invoice_source: InvoiceSource,
    attribute: AttachmentAttribute,
    sender: Optional[Sender] = None,
    payed_sum_scale: int = 1,
) -> ReconciliationReport:
    """Fetch everything, match, then send. Fetch failures abort before any write."""
    payments = unattached(load_payments(payment_source))
    invoices = load_invoices(invoice_source, payed_sum_scale=payed_sum_scale)
    log.info("Loaded %d unattached payments and %d invoices", len(payments), len(invoices))

    engine = ReconciliationEngine(attribute, sender=sender, payed_sum_scale=payed_sum_scale)
    return engine.run(payments, invoices)


def reconcile_with_retry(
    payment_source: PaymentSource,
    invoice_source: InvoiceSource,
    attribute: AttachmentAttribute,
    sender: Optional[Sender] = None,
    payed_sum_scale: int = 1,
    *,
    attempts: int = 3,
    backoff: float = 2.0,
    max_backoff: float = 30.0,
    sleep: Callable[[float], None] = time.sleep,
) -> ReconciliationReport:
    """Rerun the whole pipeline on fetch/send failures with exponential backoff.

    Matches are recomputed from fresh reads on every attempt.
    """
    attempt = 1
    delay = backoff
    while True:
        try:
            return reconcile(
                payment_source,
                invoice_source,
                attribute,
                sender=sender,
                payed_sum_scale=payed_sum_scale,
            )
        except (CollaboratorFetchError, SendError) as e:
            if attempt >= attempts:
                raise
            jitter = random.uniform(0, delay / 4)
            log.warning(
                "[Retry %d/%d] %s: %s", attempt, attempts - 1, type(e).__name__, e
            )
            sleep(delay + jitter)
            delay = min(delay * 2, max_backoff)
            attempt += 1


__all__ = [
    "PaymentSource",
    "InvoiceSource",
    "Sender",
    "EngineState",
    "Attachment",
    "SkippedPayment",
    "ReconciliationReport",
    "ReconciliationEngine",
    "send_batch",
    "unattached",
    "load_payments",
    "load_invoices",
    "reconcile",
    "reconcile_with_retry",
]
