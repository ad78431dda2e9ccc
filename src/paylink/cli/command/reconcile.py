from __future__ import annotations

from contextlib import ExitStack
from typing import Optional

from rich.table import Table

from paylink.config import load_settings
from paylink.errors import PaylinkError
from paylink.matching.scorer import METHOD_BY_SCORE
from paylink.moysklad.client import MoyskladClient, token_from_env
from paylink.services.reconciliation_service import ReconciliationReport, reconcile_with_retry
from paylink.storage.document_store import JsonDocumentSource, OutboxSender
from paylink.workspace import Workspace

from .util import console, fmt_minor

SOURCES = ("api", "files")


def _display_report(report: ReconciliationReport, write: bool) -> None:
    table = Table(title="Attachments" if write else "Planned Attachments (dry-run)", show_lines=False)
    table.add_column("Payment", style="cyan", no_wrap=True)
    table.add_column("Invoice", style="blue", no_wrap=True)
    table.add_column("Method", style="white")
    table.add_column("Amount", style="yellow", justify="right")
    table.add_column("Paid After", style="green", justify="right")

    for a in report.attachments:
        table.add_row(
            a.payment_id[:8],
            a.invoice_number,
            METHOD_BY_SCORE.get(a.score, str(a.score)),
            fmt_minor(a.amount),
            fmt_minor(a.amount_paid),
        )
    console.print(table)

    counts = report.skip_counts()
    if counts:
        parts = ", ".join(f"{reason}: {n}" for reason, n in sorted(counts.items()))
        console.print(f"[yellow]Skipped {len(report.skipped)} payments[/] ({parts})")

    batch = report.batch
    console.print(
        f"Update sets: {len(batch.payment_updates)} paymentin, "
        f"{len(batch.invoice_updates)} invoiceout"
    )
    if batch.is_empty:
        console.print("[dim]Nothing to send.[/dim]")
    elif not write:
        console.print("[dim]Dry-run only. Use --write to send updates.[/dim]")
    elif report.sent:
        console.print("[green]Updates sent.[/]")


def run(
    *,
    workspace: Workspace,
    source: str = "api",
    write: bool = False,
    retries: int = 1,
    client: Optional[MoyskladClient] = None,
) -> int:
    """Attach unattached payments to unpaid invoices.

    source="api" reads and writes through the JSON API; source="files" reads
    data/*.json and writes outbox/*.json. Dry-run unless write=True.

    Returns an exit code (0 for success, 1 for a failed run).
    """
    if source not in SOURCES:
        console.print(f"[red]Error:[/red] Unknown source '{source}' (expected one of {', '.join(SOURCES)})")
        return 1

    try:
        settings = load_settings(workspace.settings_path)
        attribute = settings.require_attribute()

        with ExitStack() as stack:
            if source == "files":
                reader = JsonDocumentSource(workspace.data_dir)
                payment_source = invoice_source = reader
                sender = OutboxSender(workspace.outbox_dir) if write else None
            else:
                if client is None:
                    client = stack.enter_context(
                        MoyskladClient(
                            token=token_from_env(settings.token_env),
                            base_url=settings.api_url,
                            page_size=settings.page_size,
                        )
                    )
                payment_source = invoice_source = client
                sender = client if write else None

            report = reconcile_with_retry(
                payment_source,
                invoice_source,
                attribute,
                sender=sender,
                payed_sum_scale=settings.payed_sum_scale,
                attempts=max(1, retries),
            )
    except PaylinkError as e:
        console.print(f"[red]Error:[/red] {e}")
        return 1

    _display_report(report, write=write)
    return 0
