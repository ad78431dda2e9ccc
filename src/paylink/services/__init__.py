"""
Service layer for paylink.

Functional core of a reconciliation run, separated from the CLI shell.
Collaborators (sources, sender) are injected; results come back as data.
"""

from paylink.services.reconciliation_service import (
    Attachment,
    EngineState,
    ReconciliationEngine,
    ReconciliationReport,
    SkippedPayment,
    reconcile,
    reconcile_with_retry,
)

__all__ = [
    "Attachment",
    "EngineState",
    "ReconciliationEngine",
    "ReconciliationReport",
    "SkippedPayment",
    "reconcile",
    "reconcile_with_retry",
]
