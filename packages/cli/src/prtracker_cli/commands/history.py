"""history command — display the review history of one pull request."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from prtracker_cli.render import format_ts
from prtracker_core.errors import RecordNotFound

console = Console()

_ACTION_STYLE = {
    "approved": "green",
    "rescored": "green",
    "archived": "dim",
    "status": "cyan",
}


@click.command("history")
@click.argument("pr_id", type=int)
@click.option("--limit", default=20, show_default=True, help="Maximum number of entries to show.")
@click.pass_context
def history_cmd(ctx, pr_id: int, limit: int):
    """Show every workflow change recorded for a pull request."""
    store = ctx.obj["store"]
    pr = store.get_pull_request(pr_id)
    if pr is None:
        raise RecordNotFound("pull request", pr_id)

    entries = store.list_history(pr_id)
    if not entries:
        console.print("[yellow]No review history recorded yet.[/yellow]")
        return

    # Show most recent first, capped at --limit.
    entries = list(reversed(entries))[:limit]

    table = Table(
        title=f"Review History — {pr.repo_full_name}#{pr.pr_number}", show_header=True, header_style="bold cyan"
    )
    table.add_column("When", width=16)
    table.add_column("Action")

    for entry in entries:
        kind = entry.action.split(":", 1)[0]
        style = _ACTION_STYLE.get(kind, "white")
        table.add_row(format_ts(entry.performed_at), f"[{style}]{entry.action}[/{style}]")

    console.print(table)
