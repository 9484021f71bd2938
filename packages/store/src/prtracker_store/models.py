"""Tracker data models.

Plain dataclasses shared by the store and the engine in prtracker_core.
Timestamps are integer Unix seconds (UTC) throughout, the same unit the
SQLite schema stores.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PRStatus(str, Enum):
    """Review workflow states. Values are what the pull_requests.status column holds."""

    WAITING = "Waiting"
    REVIEWING = "Reviewing"
    ACTION = "Action"
    APPROVED = "Approved"
    ARCHIVED = "Archived"

    def __str__(self) -> str:
        return self.value


@dataclass
class TeamMember:
    """A tracked PR author. github_login is immutable once created."""

    id: int
    github_login: str
    avatar_url: str | None
    display_name: str | None
    created_at: int


@dataclass
class Project:
    """A user-defined grouping for pull requests."""

    id: int
    name: str
    description: str | None
    created_at: int


@dataclass
class PullRequestUpsert:
    """Everything the ingestion pipeline writes for one PR.

    project_id is only honoured when the row is first inserted (or when the
    stored row has no project yet).
    """

    github_id: int
    pr_number: int
    title: str | None
    author_id: int
    repository_owner: str
    repository_name: str
    branch: str | None
    last_updated_at: int
    project_id: int | None = None


@dataclass
class PullRequestView:
    """A pull_requests row joined with its author and project for display."""

    id: int
    github_id: int
    pr_number: int
    title: str | None
    author_id: int
    project_id: int | None
    repository_owner: str
    repository_name: str
    branch: str | None
    last_updated_at: int
    status: PRStatus
    score: int | None
    author_login: str | None = None
    author_avatar: str | None = None
    author_display_name: str | None = None
    project_name: str | None = None

    @property
    def repo_full_name(self) -> str:
        return f"{self.repository_owner}/{self.repository_name}"

    @property
    def html_url(self) -> str:
        return f"https://github.com/{self.repo_full_name}/pull/{self.pr_number}"


@dataclass
class ReviewHistoryEntry:
    """One append-only audit row written on each workflow transition."""

    id: int
    pr_id: int
    action: str
    performed_at: int
