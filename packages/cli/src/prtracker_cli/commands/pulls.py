"""list / show / assign commands — read and re-file tracked pull requests."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from prtracker_cli.render import author_label, format_ts, score_label, styled_status
from prtracker_core.errors import RecordNotFound
from prtracker_core.workflow import coerce_status
from prtracker_store.models import PRStatus

console = Console()

_STATUS_CHOICES = click.Choice([s.value for s in PRStatus], case_sensitive=False)


def _project_id_for(store, name: str | None) -> int | None:
    if name is None:
        return None
    project = store.get_project_by_name(name)
    if project is None:
        raise click.UsageError(f"No project named {name!r}.")
    return project.id


def _parse_repo(value: str | None) -> str | None:
    if value is None:
        return None
    owner, sep, name = value.strip().partition("/")
    if not sep or not owner or not name or "/" in name:
        raise click.BadParameter("expected OWNER/NAME, e.g. octocat/hello-world", param_hint="--repo")
    return f"{owner}/{name}".lower()


def _matches_search(pr, text: str) -> bool:
    """Case-insensitive match on the title, or on the PR number with or without a leading #."""
    needle = text.strip().lower()
    if needle in (pr.title or "").lower():
        return True
    number = needle.lstrip("#")
    return bool(number) and number in str(pr.pr_number)


@click.command("list")
@click.option("--status", "status", type=_STATUS_CHOICES, default=None, help="Only PRs in this status.")
@click.option("--project", "project_name", default=None, help="Only PRs filed under this project.")
@click.option("--repo", "repo", default=None, metavar="OWNER/NAME", help="Only PRs from this repository.")
@click.option("--search", "search", default=None, metavar="TEXT", help="Only PRs whose title or number contains TEXT.")
@click.option("--all", "show_all", is_flag=True, help="Include archived PRs.")
@click.pass_context
def list_cmd(
    ctx, status: str | None, project_name: str | None, repo: str | None, search: str | None, show_all: bool
):
    """List tracked pull requests, most recently updated first.

    Archived PRs are hidden unless --all or --status Archived is given.
    --repo and --search narrow the list further; all filters combine.
    """
    store = ctx.obj["store"]
    wanted = coerce_status(status) if status else None
    repo_name = _parse_repo(repo)
    prs = store.list_pull_requests(status=wanted, project_id=_project_id_for(store, project_name))
    if repo_name is not None:
        prs = [pr for pr in prs if pr.repo_full_name.lower() == repo_name]
    if search:
        prs = [pr for pr in prs if _matches_search(pr, search)]
    if not show_all and wanted is not PRStatus.ARCHIVED:
        prs = [pr for pr in prs if pr.status is not PRStatus.ARCHIVED]

    if not prs:
        console.print("[yellow]No pull requests found.[/yellow]")
        return

    table = Table(title=f"Pull Requests ({len(prs)})", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold", justify="right")
    table.add_column("PR", width=8)
    table.add_column("Repository")
    table.add_column("Title", max_width=40)
    table.add_column("Author")
    table.add_column("Project")
    table.add_column("Status")
    table.add_column("Score", justify="right")
    table.add_column("Updated", width=16)

    for pr in prs:
        table.add_row(
            str(pr.id),
            f"#{pr.pr_number}",
            pr.repo_full_name,
            (pr.title or "")[:40],
            author_label(pr),
            pr.project_name or "-",
            styled_status(pr.status),
            score_label(pr.score),
            format_ts(pr.last_updated_at),
        )

    console.print(table)


@click.command("show")
@click.argument("pr_id", type=int)
@click.pass_context
def show_cmd(ctx, pr_id: int):
    """Show one tracked pull request."""
    store = ctx.obj["store"]
    pr = store.get_pull_request(pr_id)
    if pr is None:
        raise RecordNotFound("pull request", pr_id)

    console.print(f"\n[bold]#{pr.pr_number}[/bold] {pr.title or '(untitled)'}")
    console.print(f"  Repository:   {pr.repo_full_name}")
    console.print(f"  URL:          {pr.html_url}")
    console.print(f"  Branch:       {pr.branch or '-'}")
    console.print(f"  Author:       {author_label(pr)} [dim](@{pr.author_login})[/dim]")
    console.print(f"  Project:      {pr.project_name or '-'}")
    console.print(f"  Status:       {styled_status(pr.status)}")
    console.print(f"  Score:        {score_label(pr.score)}")
    console.print(f"  Last updated: {format_ts(pr.last_updated_at)}")
    console.print(f"  GitHub id:    {pr.github_id}")


@click.command("assign")
@click.argument("pr_id", type=int)
@click.argument("project_name", required=False)
@click.option("--none", "unassign", is_flag=True, help="Remove the PR from its project.")
@click.pass_context
def assign_cmd(ctx, pr_id: int, project_name: str | None, unassign: bool):
    """File a pull request under PROJECT_NAME (or under no project with --none)."""
    if unassign == (project_name is not None):
        raise click.UsageError("Give either a PROJECT_NAME or --none.")

    store = ctx.obj["store"]
    project_id = None if unassign else _project_id_for(store, project_name)
    store.assign_project(pr_id, project_id)

    pr = store.get_pull_request(pr_id)
    console.print(f"[green]PR {pr.id} (#{pr.pr_number}) is now in project {pr.project_name or '-'}.[/green]")
