"""stats command — status counts and author performance across tracked PRs."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from prtracker_cli.render import STATUS_STYLE
from prtracker_core.aggregation import AggregationEngine

console = Console()


@click.command("stats")
@click.option("--top", default=10, show_default=True, help="Number of authors to show in the ranking.")
@click.pass_context
def stats_cmd(ctx, top: int):
    """Show active PR counts per status and rank authors by average score.

    Authors without any scored PR are listed after every scored author.
    """
    aggregation = AggregationEngine(ctx.obj["store"])

    counts = aggregation.status_counts()
    total_active = sum(counts.values())
    if total_active == 0 and not aggregation.performance_ranking():
        console.print("[yellow]No pull requests tracked yet. Add one with `prtracker add URL`.[/yellow]")
        return

    # --- Summary ---
    overall = aggregation.overall_average_score()
    console.print("\n[bold]Review stats[/bold]")
    console.print(f"  Active PRs:     {total_active}")
    console.print(f"  Average score:  {overall if overall is not None else 'N/A'}")

    # --- Status breakdown ---
    status_table = Table(title="Active by Status", show_header=True)
    status_table.add_column("Status", style="bold")
    status_table.add_column("Count", justify="right")
    status_table.add_column("% of active", justify="right")
    for status, count in counts.items():
        pct = f"{count / total_active * 100:.1f}%" if total_active else "0%"
        style = STATUS_STYLE.get(status, "white")
        status_table.add_row(f"[{style}]{status.value}[/{style}]", str(count), pct)
    console.print(status_table)

    # --- Performance ranking ---
    ranking = aggregation.performance_ranking()[:top]
    if ranking:
        perf_table = Table(title=f"Top {top} Authors by Average Score", show_header=True)
        perf_table.add_column("#", justify="right")
        perf_table.add_column("Author")
        perf_table.add_column("Approved", justify="right")
        perf_table.add_column("Scored", justify="right")
        perf_table.add_column("Avg score", justify="right")
        for rank, row in enumerate(ranking, start=1):
            if row.avg_score is None:
                avg = "[dim]N/A[/dim]"
            elif row.avg_score >= 9:
                avg = f"[green]{row.avg_score:.1f}[/green]"
            else:
                avg = f"{row.avg_score:.1f}"
            perf_table.add_row(str(rank), row.author, str(row.approved_count), str(row.scored_count), avg)
        console.print(perf_table)
