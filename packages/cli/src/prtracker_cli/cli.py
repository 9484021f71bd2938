"""CLI entry point for prtracker.

Commands:
  add       — track a pull request (or refresh one already tracked)
  list      — show tracked pull requests
  show      — details of one pull request
  history   — review history of one pull request
  status    — move a pull request through the review workflow
  approve   — approve (or rescore) a pull request with a 1–10 score
  archive   — archive a pull request
  assign    — move a pull request to another project
  project   — manage projects
  stats     — status counts and author performance ranking
  token     — manage the stored GitHub token
  reset     — delete all tracked data
"""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from prtracker_cli.commands.add import add_cmd
from prtracker_cli.commands.history import history_cmd
from prtracker_cli.commands.project import project_cmd
from prtracker_cli.commands.pulls import assign_cmd, list_cmd, show_cmd
from prtracker_cli.commands.reset import reset_cmd
from prtracker_cli.commands.review import approve_cmd, archive_cmd, status_cmd
from prtracker_cli.commands.stats import stats_cmd
from prtracker_cli.commands.token import token_cmd
from prtracker_store.errors import TrackerError

console = Console()


def _build_store(config: dict):
    """Instantiate the record store from .prtracker.yml settings.

    Lives in cli.py so neither prtracker_core nor prtracker_store know about
    the CLI config format.
    """
    from prtracker_store.sqlite import SQLiteStore

    return SQLiteStore(db_path=config.get("store_path") or ":memory:")


def _build_credentials(config: dict):
    from prtracker_cli.credentials import FileCredentialStore

    return FileCredentialStore(config["credentials_path"])


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


class TrackerGroup(click.Group):
    """Click group that reports every typed tracker failure as a clean CLI error."""

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except TrackerError as e:
            raise click.ClickException(str(e)) from e


@click.group(cls=TrackerGroup)
@click.version_option(
    package_name="prtracker",
    prog_name="prtracker",
)
@click.option(
    "--config",
    "config_path",
    default=".prtracker.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRTRACKER_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Track the GitHub pull requests you need to review."""
    from prtracker_core.config import load_config
    from prtracker_cli.auth import resolve_github_token

    _configure_logging(verbose)
    ctx.ensure_object(dict)

    try:
        config = load_config(config_path)
    except ValueError as e:
        raise click.UsageError(str(e)) from e

    credentials = _build_credentials(config)

    # Resolve token early so all subcommands share the same resolution.
    token = resolve_github_token(credentials)
    if token:
        config["github_token"] = token

    store = _build_store(config)
    ctx.obj["store"] = store
    ctx.obj["config"] = config
    ctx.obj["credentials"] = credentials
    ctx.call_on_close(store.close)


main.add_command(add_cmd)
main.add_command(list_cmd)
main.add_command(show_cmd)
main.add_command(history_cmd)
main.add_command(status_cmd)
main.add_command(approve_cmd)
main.add_command(archive_cmd)
main.add_command(assign_cmd)
main.add_command(project_cmd)
main.add_command(stats_cmd)
main.add_command(token_cmd)
main.add_command(reset_cmd)
