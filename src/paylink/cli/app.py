from __future__ import annotations

"""
paylink CLI (Typer + Rich)

Attaches incoming payments to the unpaid sales invoices they settle.

All paths are resolved from a single workspace root:
  --data-dir / PAYLINK_DATA env var / current working directory
"""

from pathlib import Path
from typing import Optional

import typer

from paylink.workspace import Workspace

HELP_WRITE = "Send updates (default: dry-run)"

APP_HELP = "paylink: payment-to-invoice reconciliation"

app = typer.Typer(no_args_is_help=True, add_completion=False, help=APP_HELP)


@app.callback()
def main(
    ctx: typer.Context,
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data-dir",
        envvar="PAYLINK_DATA",
        help="Workspace root directory (default: current directory)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every skipped payment"),
):
    """paylink: all paths resolved from a single workspace root."""
    from paylink.cli.command.util import configure_logging

    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["workspace"] = Workspace.resolve(data_dir)


def _ws(ctx: typer.Context) -> Workspace:
    return ctx.obj["workspace"]


@app.command()
def init(ctx: typer.Context):
    """Initialize a workspace with config/, data/, outbox/ and a starter paylink.yml.

    Safe to run on an existing workspace; skips anything that already exists.

    Examples:
      paylink --data-dir ~/paylink init
      paylink init
    """
    from paylink.cli.command import init as cmd_init

    code = cmd_init.run(workspace=_ws(ctx))
    raise typer.Exit(code=code)


@app.command()
def reconcile(
    ctx: typer.Context,
    source: str = typer.Option("api", "--source", "-s", help="Where to read documents: api or files"),
    retries: int = typer.Option(1, "--retries", "-r", min=1, help="Attempts for the whole run on fetch/send failure"),
    write: bool = typer.Option(False, "--write", help=HELP_WRITE),
):
    """Attach unattached payments to unpaid invoices.

    Matches on the invoice number quoted in the payment purpose, falling back to
    exact amount plus invoice date. Each invoice is booked at most up to its total.

    Examples:
      paylink reconcile
      paylink reconcile --write --retries 3
      paylink reconcile --source files --write

    Safety: dry-run by default. Use --write to send updates.
    """
    from paylink.cli.command import reconcile as cmd_reconcile

    code = cmd_reconcile.run(
        workspace=_ws(ctx),
        source=source,
        write=write,
        retries=retries,
    )
    raise typer.Exit(code=code)


if __name__ == "__main__":
    app()
