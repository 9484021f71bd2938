"""Error taxonomy for the ingestion and workflow engine.

Store conditions are re-exported here so callers import one module for every
typed failure. Nothing in prtracker_core retries on any of these; retry
policy belongs to the caller.
"""

from __future__ import annotations

from enum import Enum

from prtracker_store.errors import (
    DuplicateConflict,
    InvalidProjectName,
    ProjectInUse,
    RecordNotFound,
    TrackerError,
)

__all__ = [
    "DuplicateConflict",
    "FetchErrorKind",
    "InvalidLogin",
    "InvalidProjectName",
    "InvalidReference",
    "InvalidScore",
    "InvalidTransition",
    "ProjectInUse",
    "RecordNotFound",
    "TrackerError",
    "UpstreamFetchError",
]


class InvalidReference(TrackerError):
    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(
            f"Invalid pull request reference {reference!r}. "
            "Expected https://github.com/owner/repo/pull/123, owner/repo/pull/123 or owner/repo#123."
        )


class FetchErrorKind(str, Enum):
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    NETWORK = "network"


class UpstreamFetchError(TrackerError):
    """The GitHub call failed. `kind` says why; `status` is the HTTP status when there was one."""

    def __init__(self, kind: FetchErrorKind, message: str, status: int | None = None):
        self.kind = FetchErrorKind(kind)
        self.status = status
        super().__init__(message)


class InvalidTransition(TrackerError):
    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move a pull request from {current} to {target}.")


class InvalidScore(TrackerError):
    pass


class InvalidLogin(TrackerError):
    """A GitHub author login was missing or blank."""

    def __init__(self, login: object):
        self.login = login
        super().__init__(f"GitHub login {login!r} is not valid: a non-empty login is required.")
