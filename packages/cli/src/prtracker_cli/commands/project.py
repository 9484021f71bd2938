"""project commands — create, list, rename and delete projects."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from prtracker_cli.render import format_ts
from prtracker_core.aggregation import AggregationEngine
from prtracker_core.errors import RecordNotFound

console = Console()


@click.group("project")
def project_cmd():
    """Manage the projects pull requests are filed under."""


@project_cmd.command("add")
@click.argument("name")
@click.option("--description", "-d", default=None, help="Optional description.")
@click.pass_context
def project_add_cmd(ctx, name: str, description: str | None):
    """Create a project called NAME."""
    project = ctx.obj["store"].add_project(name, description)
    console.print(f"[green]Created project {project.name!r} (id {project.id}).[/green]")


@project_cmd.command("list")
@click.pass_context
def project_list_cmd(ctx):
    """List projects and whether they can be deleted."""
    store = ctx.obj["store"]
    projects = store.list_projects()
    if not projects:
        console.print("[yellow]No projects yet. Create one with `prtracker project add NAME`.[/yellow]")
        return

    aggregation = AggregationEngine(store)
    table = Table(title="Projects", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold", justify="right")
    table.add_column("Name")
    table.add_column("Description", max_width=40)
    table.add_column("Has PRs")
    table.add_column("Created", width=16)
    for project in projects:
        in_use = aggregation.project_has_pull_requests(project.id)
        table.add_row(
            str(project.id),
            project.name,
            project.description or "",
            "[yellow]yes[/yellow]" if in_use else "[dim]no[/dim]",
            format_ts(project.created_at),
        )
    console.print(table)


@project_cmd.command("rename")
@click.argument("project_id", type=int)
@click.argument("name")
@click.option("--description", "-d", default=None, help="New description. Keeps the current one when omitted.")
@click.pass_context
def project_rename_cmd(ctx, project_id: int, name: str, description: str | None):
    """Rename project PROJECT_ID to NAME."""
    store = ctx.obj["store"]
    current = store.get_project(project_id)
    if current is None:
        raise RecordNotFound("project", project_id)
    project = store.update_project(
        project_id, name, description if description is not None else current.description
    )
    console.print(f"[green]Project {project.id} is now {project.name!r}.[/green]")


@project_cmd.command("delete")
@click.argument("project_id", type=int)
@click.pass_context
def project_delete_cmd(ctx, project_id: int):
    """Delete a project. Refused while any pull request is filed under it."""
    ctx.obj["store"].delete_project(project_id)
    console.print(f"[green]Deleted project {project_id}.[/green]")
