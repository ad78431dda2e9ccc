"""Initialize a new paylink workspace directory."""

from __future__ import annotations

from paylink.workspace import Workspace

from .util import console

_STARTER_SETTINGS_YML = """\
# paylink settings
#
# api_url: base URL of the JSON API
# token_env: environment variable holding the API token
# payed_sum_scale: 1 when payedSum is in minor units (kopecks), 100 when in rubles
# attachment_attribute: the paymentin custom attribute marking a payment as attached.
#   Copy it from GET /entity/paymentin/metadata/attributes.
#
# Example:
#   attachment_attribute:
#     meta:
#       href: https://api.moysklad.ru/api/remap/1.2/entity/paymentin/metadata/attributes/<id>
#       type: attributemetadata
#       mediaType: application/json
#     id: <id>
#     name: Attached to invoice
#     type: boolean

api_url: https://api.moysklad.ru/api/remap/1.2
token_env: PAYLINK_TOKEN
page_size: 100
payed_sum_scale: 1
"""


def run(*, workspace: Workspace) -> int:
    """Create config/, data/, outbox/ and a starter paylink.yml.

    Skips anything that already exists.

    Returns:
        Exit code (0 = success)
    """
    root = workspace.root
    console.print(f"[bold cyan]Initializing workspace:[/] {root}\n")

    created = []
    skipped = []

    for directory in [workspace.config_dir, workspace.data_dir, workspace.outbox_dir]:
        rel = str(directory.relative_to(root)) + "/"
        if directory.exists():
            skipped.append(rel)
        else:
            directory.mkdir(parents=True, exist_ok=True)
            created.append(rel)

    settings = workspace.settings_path
    if settings.exists():
        skipped.append(str(settings.relative_to(root)))
    else:
        settings.write_text(_STARTER_SETTINGS_YML, encoding="utf-8")
        created.append(str(settings.relative_to(root)))

    if created:
        console.print("[green]Created:[/]")
        for c in created:
            console.print(f"  {c}")
    if skipped:
        console.print("[dim]Already exists (skipped):[/dim]")
        for s in skipped:
            console.print(f"  [dim]{s}[/dim]")

    if not created:
        console.print("[green]Workspace already fully initialized.[/]")
    else:
        console.print(f"\n[green]Workspace ready at {root}[/]")
        console.print("\n[dim]Next steps:[/dim]")
        console.print("  1. Add attachment_attribute to config/paylink.yml")
        console.print("  2. export PAYLINK_TOKEN=...")
        console.print("  3. Run: paylink reconcile (dry-run), then paylink reconcile --write")
    return 0
