"""Small formatting helpers shared by the commands."""

from __future__ import annotations

from datetime import datetime, timezone

from prtracker_store.models import PRStatus, PullRequestView

STATUS_STYLE = {
    PRStatus.WAITING: "yellow",
    PRStatus.REVIEWING: "blue",
    PRStatus.ACTION: "red",
    PRStatus.APPROVED: "green",
    PRStatus.ARCHIVED: "dim",
}


def styled_status(status: PRStatus) -> str:
    style = STATUS_STYLE.get(status, "white")
    return f"[{style}]{status.value}[/{style}]"


def format_ts(ts: int | None) -> str:
    if ts is None:
        return ""
    return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%d %H:%M")


def author_label(pr: PullRequestView) -> str:
    return pr.author_display_name or pr.author_login or "Unknown"


def score_label(score: int | None) -> str:
    return f"{score}/10" if score is not None else "-"
