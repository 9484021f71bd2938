"""token commands — store, inspect and forget the GitHub token."""

from __future__ import annotations

import os

import click
from rich.console import Console

from prtracker_core.gh.pull_request import GitHubFetcher

console = Console()


def _describe(info) -> None:
    name = f" ({info.display_name})" if info.display_name else ""
    console.print(f"  User:        [bold]{info.login}[/bold]{name}")
    if info.scopes:
        console.print(f"  Scopes:      {', '.join(info.scopes)}")
    if info.rate_limit_remaining is not None:
        console.print(f"  Rate limit:  {info.rate_limit_remaining}/{info.rate_limit_total}")


@click.group("token")
def token_cmd():
    """Manage the GitHub token used to fetch pull requests."""


@token_cmd.command("set")
@click.argument("token", required=False)
@click.option("--no-verify", is_flag=True, help="Store the token without checking it against GitHub.")
@click.pass_context
def token_set_cmd(ctx, token: str | None, no_verify: bool):
    """Save a GitHub personal access token.

    Prompts (without echo) when TOKEN is omitted. The token is checked
    against GitHub before it is saved unless --no-verify is given.
    """
    if token is None:
        token = click.prompt("GitHub token", hide_input=True)
    token = token.strip()
    if not token:
        raise click.UsageError("The token is empty.")

    if not no_verify:
        config = ctx.obj["config"]
        info = GitHubFetcher(base_url=config["github_api_url"], timeout=config["github_timeout"]).verify_token(token)
        console.print("[green]Token verified.[/green]")
        _describe(info)

    ctx.obj["credentials"].set(token)
    console.print("[green]GitHub token saved.[/green]")


@token_cmd.command("status")
@click.pass_context
def token_status_cmd(ctx):
    """Show where the active token comes from and who it belongs to."""
    config = ctx.obj["config"]
    token = config.get("github_token")
    if not token:
        console.print("[yellow]No GitHub token configured. Run `prtracker token set` or `gh auth login`.[/yellow]")
        return

    if os.environ.get("GITHUB_TOKEN"):
        source = "GITHUB_TOKEN environment variable"
    elif ctx.obj["credentials"].get() == token:
        source = "stored credentials"
    else:
        source = "gh CLI session"
    console.print(f"Token source: {source}")

    info = GitHubFetcher(base_url=config["github_api_url"], timeout=config["github_timeout"]).verify_token(token)
    _describe(info)


@token_cmd.command("delete")
@click.pass_context
def token_delete_cmd(ctx):
    """Forget the stored token."""
    ctx.obj["credentials"].delete()
    console.print("[green]Stored GitHub token deleted.[/green]")
