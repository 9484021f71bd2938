"""status / approve / archive commands — drive a PR through the review workflow."""

from __future__ import annotations

import click
from rich.console import Console

from prtracker_cli.render import score_label, styled_status
from prtracker_core.workflow import OPEN_STATES, WorkflowEngine

console = Console()

_OPEN_CHOICES = click.Choice(sorted(s.value for s in OPEN_STATES), case_sensitive=False)


def _report(pr) -> None:
    console.print(
        f"PR {pr.id} ([bold]#{pr.pr_number}[/bold] {pr.title or ''}) is now {styled_status(pr.status)}"
        + (f" with score {score_label(pr.score)}" if pr.score is not None else "")
    )


@click.command("status")
@click.argument("pr_id", type=int)
@click.argument("status", type=_OPEN_CHOICES)
@click.pass_context
def status_cmd(ctx, pr_id: int, status: str):
    """Move a pull request to Waiting, Reviewing or Action.

    Use `prtracker approve` to approve with a score and `prtracker archive`
    to archive.
    """
    pr = WorkflowEngine(ctx.obj["store"]).transition(pr_id, status)
    _report(pr)


@click.command("approve")
@click.argument("pr_id", type=int)
@click.argument("score", type=int)
@click.pass_context
def approve_cmd(ctx, pr_id: int, score: int):
    """Approve a pull request with a SCORE from 1 to 10.

    Approving an already approved PR updates its score.
    """
    pr = WorkflowEngine(ctx.obj["store"]).approve_with_score(pr_id, score)
    _report(pr)


@click.command("archive")
@click.argument("pr_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_context
def archive_cmd(ctx, pr_id: int, yes: bool):
    """Archive a pull request. Archived PRs cannot change status again."""
    if not yes:
        click.confirm(f"Archive PR {pr_id}? This cannot be undone", abort=True)
    pr = WorkflowEngine(ctx.obj["store"]).archive(pr_id)
    _report(pr)
