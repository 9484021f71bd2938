"""SQLiteStore — the local file-based record store.

Schema:
  team_members    — one row per distinct GitHub login (UNIQUE github_login)
  projects        — user-defined groupings (UNIQUE name)
  pull_requests   — tracked PRs, keyed for ingestion by UNIQUE github_id;
                    author_id → team_members, project_id → projects (nullable)
  review_history  — append-only audit rows, one per workflow transition

The connection runs in autocommit mode; multi-statement units go through
transaction(), which opens BEGIN IMMEDIATE so the write lock is taken before
the first read. Every read-then-write (upsert, project delete, re-assignment)
happens inside one such unit.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from prtracker_store.base import BaseStore
from prtracker_store.errors import DuplicateConflict, InvalidProjectName, ProjectInUse, RecordNotFound
from prtracker_store.models import (
    Project,
    PRStatus,
    PullRequestUpsert,
    PullRequestView,
    ReviewHistoryEntry,
    TeamMember,
)

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

_SCHEMA = """
CREATE TABLE IF NOT EXISTS team_members (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    github_login    TEXT NOT NULL UNIQUE,
    avatar_url      TEXT,
    display_name    TEXT,
    created_at      INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS projects (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    name            TEXT NOT NULL UNIQUE,
    description     TEXT,
    created_at      INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS pull_requests (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    github_id         INTEGER NOT NULL UNIQUE,
    pr_number         INTEGER NOT NULL,
    title             TEXT,
    author_id         INTEGER NOT NULL REFERENCES team_members (id),
    project_id        INTEGER REFERENCES projects (id),
    repository_owner  TEXT NOT NULL,
    repository_name   TEXT NOT NULL,
    branch            TEXT,
    last_updated_at   INTEGER NOT NULL,
    status            TEXT NOT NULL DEFAULT 'Waiting',
    score             INTEGER
);
CREATE INDEX IF NOT EXISTS idx_pull_requests_project ON pull_requests (project_id);
CREATE INDEX IF NOT EXISTS idx_pull_requests_status  ON pull_requests (status);

CREATE TABLE IF NOT EXISTS review_history (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    pr_id           INTEGER NOT NULL REFERENCES pull_requests (id),
    action          TEXT NOT NULL,
    performed_at    INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_review_history_pr ON review_history (pr_id);
"""

_SELECT_PR = """
SELECT
    pr.id, pr.github_id, pr.pr_number, pr.title, pr.author_id, pr.project_id,
    pr.repository_owner, pr.repository_name, pr.branch, pr.last_updated_at,
    pr.status, pr.score,
    tm.github_login  AS author_login,
    tm.avatar_url    AS author_avatar,
    tm.display_name  AS author_display_name,
    p.name           AS project_name
FROM pull_requests pr
JOIN team_members tm ON pr.author_id = tm.id
LEFT JOIN projects p ON pr.project_id = p.id
"""

_UPSERT_PR = """
INSERT INTO pull_requests
  (github_id, pr_number, title, author_id, project_id, repository_owner,
   repository_name, branch, last_updated_at, status)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT (github_id) DO UPDATE SET
    title           = excluded.title,
    branch          = excluded.branch,
    author_id       = excluded.author_id,
    last_updated_at = MAX(pull_requests.last_updated_at, excluded.last_updated_at),
    project_id      = COALESCE(pull_requests.project_id, excluded.project_id)
"""


def _now() -> int:
    return int(datetime.now(timezone.utc).timestamp())


def _clean_project_name(name: str) -> str:
    cleaned = name.strip() if isinstance(name, str) else ""
    if not cleaned:
        raise InvalidProjectName(name)
    return cleaned


class SQLiteStore(BaseStore):
    """Stores tracker state in a local SQLite database file.

    The path comes from `store_path` in .prtracker.yml (or PRTRACKER_DB);
    parent directories are created on first use. The connection is shared
    across threads behind a re-entrant lock.
    """

    def __init__(self, db_path: str | Path = ":memory:"):
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).expanduser().parent.mkdir(parents=True, exist_ok=True)
            self.db_path = str(Path(self.db_path).expanduser())
        self._lock = threading.RLock()
        self._depth = 0
        self._conn = sqlite3.connect(self.db_path, isolation_level=None, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")
        self._conn.execute("PRAGMA busy_timeout=5000")
        self._init_schema()
        logger.debug("Opened SQLite store at %s", self.db_path)

    def _init_schema(self) -> None:
        version = self._conn.execute("PRAGMA user_version").fetchone()[0]
        if version > SCHEMA_VERSION:
            raise RuntimeError(
                f"Database {self.db_path} has schema version {version}; this prtracker understands {SCHEMA_VERSION}."
            )
        self._conn.executescript(_SCHEMA)
        if version < SCHEMA_VERSION:
            self._conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")

    # ------------------------------------------------------------------ #
    # Transactions                                                         #
    # ------------------------------------------------------------------ #

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            if self._depth:
                # Nested unit joins the enclosing transaction.
                self._depth += 1
                try:
                    yield
                finally:
                    self._depth -= 1
                return

            self._conn.execute("BEGIN IMMEDIATE")
            self._depth = 1
            try:
                yield
            except BaseException:
                self._conn.execute("ROLLBACK")
                raise
            else:
                self._conn.execute("COMMIT")
            finally:
                self._depth = 0

    # ------------------------------------------------------------------ #
    # Projects                                                             #
    # ------------------------------------------------------------------ #

    def add_project(self, name: str, description: str | None = None) -> Project:
        name = _clean_project_name(name)
        with self.transaction():
            try:
                cur = self._conn.execute(
                    "INSERT INTO projects (name, description, created_at) VALUES (?, ?, ?)",
                    (name, description, _now()),
                )
            except sqlite3.IntegrityError:
                raise DuplicateConflict("project", "name", name) from None
            project = self.get_project(cur.lastrowid)
        logger.info("Created project %r (id=%d)", name, project.id)
        return project

    def update_project(self, project_id: int, name: str, description: str | None) -> Project:
        name = _clean_project_name(name)
        with self.transaction():
            try:
                cur = self._conn.execute(
                    "UPDATE projects SET name = ?, description = ? WHERE id = ?",
                    (name, description, project_id),
                )
            except sqlite3.IntegrityError:
                raise DuplicateConflict("project", "name", name) from None
            if cur.rowcount == 0:
                raise RecordNotFound("project", project_id)
            return self.get_project(project_id)

    def get_project(self, project_id: int) -> Project | None:
        with self._lock:
            row = self._conn.execute("SELECT * FROM projects WHERE id = ?", (project_id,)).fetchone()
        return self._row_to_project(row) if row else None

    def get_project_by_name(self, name: str) -> Project | None:
        with self._lock:
            row = self._conn.execute("SELECT * FROM projects WHERE name = ?", (name,)).fetchone()
        return self._row_to_project(row) if row else None

    def list_projects(self) -> list[Project]:
        with self._lock:
            rows = self._conn.execute("SELECT * FROM projects ORDER BY name").fetchall()
        return [self._row_to_project(r) for r in rows]

    def delete_project(self, project_id: int) -> None:
        with self.transaction():
            if self.get_project(project_id) is None:
                raise RecordNotFound("project", project_id)
            count = self._count_project_pull_requests(project_id)
            if count:
                raise ProjectInUse(project_id, count)
            self._conn.execute("DELETE FROM projects WHERE id = ?", (project_id,))
        logger.info("Deleted project id=%d", project_id)

    def project_has_pull_requests(self, project_id: int) -> bool:
        with self._lock:
            return self._count_project_pull_requests(project_id) > 0

    def _count_project_pull_requests(self, project_id: int) -> int:
        return self._conn.execute(
            "SELECT COUNT(*) FROM pull_requests WHERE project_id = ?", (project_id,)
        ).fetchone()[0]

    # ------------------------------------------------------------------ #
    # Team members                                                         #
    # ------------------------------------------------------------------ #

    def get_team_member_by_login(self, github_login: str) -> TeamMember | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT * FROM team_members WHERE github_login = ?", (github_login,)
            ).fetchone()
        return self._row_to_member(row) if row else None

    def insert_team_member_if_absent(
        self, github_login: str, avatar_url: str | None, display_name: str | None
    ) -> TeamMember:
        with self.transaction():
            cur = self._conn.execute(
                """
                INSERT INTO team_members (github_login, avatar_url, display_name, created_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT (github_login) DO NOTHING
                """,
                (github_login, avatar_url, display_name, _now()),
            )
            if cur.rowcount:
                logger.info("Created team member %r", github_login)
            return self.get_team_member_by_login(github_login)

    def list_team_members(self) -> list[TeamMember]:
        with self._lock:
            rows = self._conn.execute("SELECT * FROM team_members ORDER BY github_login").fetchall()
        return [self._row_to_member(r) for r in rows]

    # ------------------------------------------------------------------ #
    # Pull requests                                                        #
    # ------------------------------------------------------------------ #

    def upsert_pull_request(self, data: PullRequestUpsert) -> tuple[PullRequestView, bool]:
        with self.transaction():
            if data.project_id is not None and self.get_project(data.project_id) is None:
                raise RecordNotFound("project", data.project_id)
            existing = self._conn.execute(
                "SELECT id FROM pull_requests WHERE github_id = ?", (data.github_id,)
            ).fetchone()
            self._conn.execute(
                _UPSERT_PR,
                (
                    data.github_id,
                    data.pr_number,
                    data.title,
                    data.author_id,
                    data.project_id,
                    data.repository_owner,
                    data.repository_name,
                    data.branch,
                    data.last_updated_at,
                    PRStatus.WAITING.value,
                ),
            )
            view = self.get_pull_request_by_github_id(data.github_id)
        return view, existing is None

    def get_pull_request(self, pr_id: int) -> PullRequestView | None:
        with self._lock:
            row = self._conn.execute(_SELECT_PR + " WHERE pr.id = ?", (pr_id,)).fetchone()
        return self._row_to_view(row) if row else None

    def get_pull_request_by_github_id(self, github_id: int) -> PullRequestView | None:
        with self._lock:
            row = self._conn.execute(_SELECT_PR + " WHERE pr.github_id = ?", (github_id,)).fetchone()
        return self._row_to_view(row) if row else None

    def list_pull_requests(
        self, status: PRStatus | None = None, project_id: int | None = None
    ) -> list[PullRequestView]:
        clauses: list[str] = []
        params: list[object] = []
        if status is not None:
            clauses.append("pr.status = ?")
            params.append(PRStatus(status).value)
        if project_id is not None:
            clauses.append("pr.project_id = ?")
            params.append(project_id)
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        with self._lock:
            rows = self._conn.execute(
                _SELECT_PR + where + " ORDER BY pr.last_updated_at DESC, pr.id DESC", params
            ).fetchall()
        return [self._row_to_view(r) for r in rows]

    def set_status(self, pr_id: int, status: PRStatus) -> None:
        self._update_pull_request(pr_id, "status", PRStatus(status).value)

    def set_score(self, pr_id: int, score: int | None) -> None:
        self._update_pull_request(pr_id, "score", score)

    def assign_project(self, pr_id: int, project_id: int | None) -> None:
        with self.transaction():
            if project_id is not None and self.get_project(project_id) is None:
                raise RecordNotFound("project", project_id)
            self._update_pull_request(pr_id, "project_id", project_id)

    def _update_pull_request(self, pr_id: int, column: str, value: object) -> None:
        with self._lock:
            cur = self._conn.execute(f"UPDATE pull_requests SET {column} = ? WHERE id = ?", (value, pr_id))
        if cur.rowcount == 0:
            raise RecordNotFound("pull request", pr_id)

    # ------------------------------------------------------------------ #
    # Review history                                                       #
    # ------------------------------------------------------------------ #

    def append_history(self, pr_id: int, action: str) -> ReviewHistoryEntry:
        performed_at = _now()
        with self._lock:
            try:
                cur = self._conn.execute(
                    "INSERT INTO review_history (pr_id, action, performed_at) VALUES (?, ?, ?)",
                    (pr_id, action, performed_at),
                )
            except sqlite3.IntegrityError:
                raise RecordNotFound("pull request", pr_id) from None
        return ReviewHistoryEntry(id=cur.lastrowid, pr_id=pr_id, action=action, performed_at=performed_at)

    def list_history(self, pr_id: int) -> list[ReviewHistoryEntry]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT * FROM review_history WHERE pr_id = ? ORDER BY performed_at, id", (pr_id,)
            ).fetchall()
        return [
            ReviewHistoryEntry(id=r["id"], pr_id=r["pr_id"], action=r["action"], performed_at=r["performed_at"])
            for r in rows
        ]

    # ------------------------------------------------------------------ #
    # Housekeeping                                                         #
    # ------------------------------------------------------------------ #

    def clear_all(self) -> None:
        # Children before parents so foreign keys never dangle mid-way.
        with self.transaction():
            for table in ("review_history", "pull_requests", "team_members", "projects"):
                self._conn.execute(f"DELETE FROM {table}")
        logger.warning("Cleared all data from %s", self.db_path)

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @staticmethod
    def _row_to_project(row: sqlite3.Row) -> Project:
        return Project(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            created_at=row["created_at"],
        )

    @staticmethod
    def _row_to_member(row: sqlite3.Row) -> TeamMember:
        return TeamMember(
            id=row["id"],
            github_login=row["github_login"],
            avatar_url=row["avatar_url"],
            display_name=row["display_name"],
            created_at=row["created_at"],
        )

    @staticmethod
    def _row_to_view(row: sqlite3.Row) -> PullRequestView:
        return PullRequestView(
            id=row["id"],
            github_id=row["github_id"],
            pr_number=row["pr_number"],
            title=row["title"],
            author_id=row["author_id"],
            project_id=row["project_id"],
            repository_owner=row["repository_owner"],
            repository_name=row["repository_name"],
            branch=row["branch"],
            last_updated_at=row["last_updated_at"],
            status=PRStatus(row["status"]),
            score=row["score"],
            author_login=row["author_login"],
            author_avatar=row["author_avatar"],
            author_display_name=row["author_display_name"],
            project_name=row["project_name"],
        )
