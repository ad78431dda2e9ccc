"""
Exception taxonomy for reconciliation runs.

- SkippablePaymentError and its subclasses concern a single payment. The engine
  catches them, records the skip and moves on to the next payment.
- CollaboratorFetchError and SendError are fatal to a run and propagate to the caller.
- ConfigurationError is raised before a run starts (bad settings, missing token).
"""

from __future__ import annotations


class PaylinkError(Exception):
    """Base class for all paylink errors."""


class SkippablePaymentError(PaylinkError):
    """A payment cannot be attached in this run; it stays unattached."""

    reason = "skipped"

    def __init__(self, payment_id: str, message: str = ""):
        self.payment_id = payment_id
        super().__init__(message or f"payment {payment_id} skipped ({self.reason})")


class IneligiblePayment(SkippablePaymentError):
    reason = "ineligible"


class NoMatchFound(SkippablePaymentError):
    reason = "no_match"


class DuplicatePayment(SkippablePaymentError):
    """The same payment id was already processed earlier in this run."""

    reason = "duplicate"


class CapacityExceeded(SkippablePaymentError):
    """Reserving the payment would push an invoice's paid amount above its total."""

    reason = "capacity_exhausted"

    def __init__(self, invoice_id: str, requested: int, remaining: int, payment_id: str = ""):
        self.invoice_id = invoice_id
        self.requested = requested
        self.remaining = remaining
        super().__init__(
            payment_id,
            f"invoice {invoice_id}: cannot reserve {requested}, remaining capacity {remaining}",
        )


class CollaboratorFetchError(PaylinkError):
    """Payments or invoices could not be read; nothing is sent for this run."""


class SendError(PaylinkError):
    """The accounting system rejected an update batch."""

    def __init__(self, entity_type: str, message: str):
        self.entity_type = entity_type
        super().__init__(f"sending {entity_type} failed: {message}")


class ConfigurationError(PaylinkError):
    """Settings are missing or invalid."""


__all__ = [
    "PaylinkError",
    "SkippablePaymentError",
    "IneligiblePayment",
    "NoMatchFound",
    "DuplicatePayment",
    "CapacityExceeded",
    "CollaboratorFetchError",
    "SendError",
    "ConfigurationError",
]
