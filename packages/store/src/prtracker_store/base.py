"""Abstract record store interface.

The engine in prtracker_core and the CLI depend on BaseStore, not on a
concrete backend. The store owns every uniqueness and referential rule of
the data model; callers never re-implement a check the store already makes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prtracker_store.models import (
        Project,
        PRStatus,
        PullRequestUpsert,
        PullRequestView,
        ReviewHistoryEntry,
        TeamMember,
    )


class BaseStore(ABC):
    """Relational persistence for team members, projects, pull requests and review history."""

    # ------------------------------------------------------------------ #
    # Projects                                                             #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def add_project(self, name: str, description: str | None = None) -> Project:
        """Create a project. The name is stripped; raises InvalidProjectName if blank
        and DuplicateConflict if taken."""

    @abstractmethod
    def update_project(self, project_id: int, name: str, description: str | None) -> Project:
        """Rename / re-describe a project. Same name rules as add_project."""

    @abstractmethod
    def get_project(self, project_id: int) -> Project | None: ...

    @abstractmethod
    def get_project_by_name(self, name: str) -> Project | None: ...

    @abstractmethod
    def list_projects(self) -> list[Project]: ...

    @abstractmethod
    def delete_project(self, project_id: int) -> None:
        """Delete a project nothing references.

        Raises ProjectInUse when at least one pull request is assigned to it.
        The reference check and the delete must not interleave with another
        write.
        """

    @abstractmethod
    def project_has_pull_requests(self, project_id: int) -> bool:
        """The one query behind both delete_project's guard and the UI's delete gating."""

    # ------------------------------------------------------------------ #
    # Team members                                                         #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def get_team_member_by_login(self, github_login: str) -> TeamMember | None: ...

    @abstractmethod
    def insert_team_member_if_absent(
        self, github_login: str, avatar_url: str | None, display_name: str | None
    ) -> TeamMember:
        """Create the member unless the login exists; return whichever row is stored.

        Must rely on the login uniqueness constraint so that two concurrent
        callers end up with the same row.
        """

    @abstractmethod
    def list_team_members(self) -> list[TeamMember]: ...

    # ------------------------------------------------------------------ #
    # Pull requests                                                        #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def upsert_pull_request(self, data: PullRequestUpsert) -> tuple[PullRequestView, bool]:
        """Insert or refresh the row keyed by data.github_id.

        Returns the stored row and True when it was newly inserted. On update
        only title, branch, last_updated_at, author and (if currently unset)
        project change.
        """

    @abstractmethod
    def get_pull_request(self, pr_id: int) -> PullRequestView | None: ...

    @abstractmethod
    def get_pull_request_by_github_id(self, github_id: int) -> PullRequestView | None: ...

    @abstractmethod
    def list_pull_requests(
        self, status: PRStatus | None = None, project_id: int | None = None
    ) -> list[PullRequestView]:
        """Return joined rows, most recently updated first."""

    @abstractmethod
    def set_status(self, pr_id: int, status: PRStatus) -> None: ...

    @abstractmethod
    def set_score(self, pr_id: int, score: int | None) -> None: ...

    @abstractmethod
    def assign_project(self, pr_id: int, project_id: int | None) -> None: ...

    # ------------------------------------------------------------------ #
    # Review history                                                       #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def append_history(self, pr_id: int, action: str) -> ReviewHistoryEntry: ...

    @abstractmethod
    def list_history(self, pr_id: int) -> list[ReviewHistoryEntry]: ...

    # ------------------------------------------------------------------ #
    # Housekeeping                                                         #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """Group several writes into one atomic unit (commit on exit, roll back on error)."""

    @abstractmethod
    def clear_all(self) -> None:
        """Delete every row of every table."""

    def close(self) -> None:
        """Release any resources held by the store (connections, file handles).

        Optional — subclasses that need cleanup should override this.
        Default is a no-op so callers can always call close() safely.
        """
