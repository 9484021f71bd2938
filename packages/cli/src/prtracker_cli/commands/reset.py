"""reset command — wipe every tracked record."""

from __future__ import annotations

import click
from rich.console import Console

console = Console()


@click.command("reset")
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_context
def reset_cmd(ctx, yes: bool):
    """Delete all pull requests, team members, projects and review history."""
    if not yes:
        click.confirm("Delete ALL tracked data? This cannot be undone", abort=True)
    ctx.obj["store"].clear_all()
    console.print("[green]All data cleared.[/green]")
