"""GitHub access via PyGithub.

GitHubFetcher is the concrete "fetch a PR" collaborator the ingestion
pipeline consumes. It normalises a PyGithub PullRequest into PullRequestData
and turns every PyGithub / transport failure into an UpstreamFetchError. It
never retries; the client is built with retry=None and a bounded timeout.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

import requests
from github import Auth, Github, GithubException, RateLimitExceededException

from prtracker_core.errors import FetchErrorKind, UpstreamFetchError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 15


@dataclass
class PullRequestData:
    """Normalised PR metadata — exactly what ingestion needs, nothing PyGithub-specific."""

    github_id: int
    number: int
    title: str | None
    author_login: str
    author_avatar: str | None
    author_display_name: str | None
    branch: str | None
    last_updated_at: int


@dataclass
class TokenInfo:
    login: str
    display_name: str | None = None
    scopes: list[str] = field(default_factory=list)
    rate_limit_remaining: int | None = None
    rate_limit_total: int | None = None


class PullRequestFetcher(Protocol):
    def fetch(self, owner: str, repo: str, number: int, token: str | None) -> PullRequestData: ...


def get_client(token: str | None, base_url: str = DEFAULT_API_URL, timeout: int = DEFAULT_TIMEOUT) -> Github:
    auth = Auth.Token(token) if token else None
    return Github(auth=auth, base_url=base_url, timeout=timeout, retry=None)


def get_repo(client: Github, repo_name: str):
    return client.get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def _to_timestamp(value: datetime | None) -> int:
    if value is None:
        return int(datetime.now(timezone.utc).timestamp())
    if value.tzinfo is None:
        # Older PyGithub releases hand back naive UTC datetimes.
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def to_pull_request_data(pr) -> PullRequestData:
    """Map a PyGithub PullRequest onto PullRequestData."""
    user = pr.user
    return PullRequestData(
        github_id=int(pr.id),
        number=int(pr.number),
        title=pr.title,
        author_login=user.login,
        author_avatar=user.avatar_url,
        author_display_name=user.name,
        branch=pr.head.ref if pr.head is not None else None,
        last_updated_at=_to_timestamp(pr.updated_at),
    )


def translate_error(exc: Exception, what: str) -> UpstreamFetchError:
    """Classify a PyGithub or requests failure into an UpstreamFetchError."""
    if isinstance(exc, RateLimitExceededException):
        return UpstreamFetchError(
            FetchErrorKind.RATE_LIMITED, f"GitHub rate limit exceeded while fetching {what}.", exc.status
        )

    if isinstance(exc, GithubException):
        status = exc.status
        message = ""
        if isinstance(exc.data, dict):
            message = str(exc.data.get("message") or "")

        if status == 401:
            return UpstreamFetchError(
                FetchErrorKind.UNAUTHORIZED,
                "GitHub token is invalid or expired. Update it with `prtracker token set`.",
                status,
            )
        if status == 404:
            return UpstreamFetchError(
                FetchErrorKind.NOT_FOUND,
                f"{what} not found. Check the reference, and that your token can read this repository "
                "(fine-grained tokens need 'Pull requests: read').",
                status,
            )
        if status == 429 or (status == 403 and "rate limit" in message.lower()):
            return UpstreamFetchError(FetchErrorKind.RATE_LIMITED, f"GitHub rate limit exceeded while fetching {what}.", status)
        if status == 403:
            return UpstreamFetchError(
                FetchErrorKind.UNAUTHORIZED,
                f"Access to {what} is forbidden: {message or 'token lacks permission'}.",
                status,
            )
        return UpstreamFetchError(FetchErrorKind.NETWORK, f"GitHub API error {status} while fetching {what}: {message}", status)

    return UpstreamFetchError(FetchErrorKind.NETWORK, f"Could not reach GitHub while fetching {what}: {exc}")


class GitHubFetcher:
    """Fetches single pull requests from the GitHub REST API."""

    def __init__(self, base_url: str = DEFAULT_API_URL, timeout: int = DEFAULT_TIMEOUT):
        self.base_url = base_url
        self.timeout = timeout

    def fetch(self, owner: str, repo: str, number: int, token: str | None) -> PullRequestData:
        what = f"{owner}/{repo}#{number}"
        logger.debug("Fetching %s from %s", what, self.base_url)
        try:
            client = get_client(token, base_url=self.base_url, timeout=self.timeout)
            pr = get_pull(get_repo(client, f"{owner}/{repo}"), number)
            data = to_pull_request_data(pr)
        except (GithubException, requests.RequestException) as e:
            raise translate_error(e, what) from e
        logger.debug("Fetched %s (github_id=%d, author=%s)", what, data.github_id, data.author_login)
        return data

    def verify_token(self, token: str) -> TokenInfo:
        """Check a token against /user and report who it belongs to and its limits."""
        try:
            client = get_client(token, base_url=self.base_url, timeout=self.timeout)
            user = client.get_user()
            login = user.login
            remaining, total = client.rate_limiting
            return TokenInfo(
                login=login,
                display_name=user.name,
                scopes=list(client.oauth_scopes or []),
                rate_limit_remaining=remaining,
                rate_limit_total=total,
            )
        except (GithubException, requests.RequestException) as e:
            raise translate_error(e, "the authenticated user") from e
