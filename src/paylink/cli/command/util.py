from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

console = Console()


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def fmt_minor(amount: int) -> Text:
    """Render a minor-unit amount as 40,487.50."""
    s = f"{amount / 100:,.2f}"
    if amount < 0:
        return Text(s, style="bold red")
    return Text(s)
