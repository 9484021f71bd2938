"""add command — track a pull request from its GitHub URL."""

from __future__ import annotations

import click
from rich.console import Console

from prtracker_cli.render import author_label, styled_status
from prtracker_core.gh.pull_request import GitHubFetcher
from prtracker_core.ingestion import IngestionPipeline

console = Console()


def _build_fetcher(config: dict) -> GitHubFetcher:
    return GitHubFetcher(base_url=config["github_api_url"], timeout=config["github_timeout"])


@click.command("add")
@click.argument("reference")
@click.option(
    "--project",
    "project_name",
    default=None,
    help="Project to file the PR under. Defaults to `default_project` from the config file.",
)
@click.pass_context
def add_cmd(ctx, reference: str, project_name: str | None):
    """Track a pull request, or refresh it if it is already tracked.

    REFERENCE is a PR URL (https://github.com/owner/repo/pull/123) or the
    shorthand owner/repo#123. Re-adding a tracked PR updates its title,
    branch and last-updated time but keeps its project and status.
    """
    store = ctx.obj["store"]
    config = ctx.obj["config"]

    project_name = project_name or config.get("default_project")
    project_id = None
    if project_name:
        project = store.get_project_by_name(project_name)
        if project is None:
            raise click.UsageError(
                f"No project named {project_name!r}. Create it with `prtracker project add {project_name!r}`."
            )
        project_id = project.id

    token = config.get("github_token")
    if not token:
        console.print(
            "[yellow]No GitHub token found — private repositories will not be visible. "
            "Run `prtracker token set` or `gh auth login`.[/yellow]"
        )

    pipeline = IngestionPipeline(store, _build_fetcher(config), token=token)
    result = pipeline.ingest(reference, project_id=project_id)
    pr = result.pull_request

    verb = "Added" if result.created else "Refreshed"
    console.print(f"[green]{verb}[/green] [bold]#{pr.pr_number}[/bold] {pr.title or ''} [dim]({pr.repo_full_name})[/dim]")
    console.print(
        f"  id {pr.id} · author {author_label(pr)} · project {pr.project_name or '-'} · {styled_status(pr.status)}"
    )
