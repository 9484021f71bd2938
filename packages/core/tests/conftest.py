"""Shared fixtures for prtracker_core tests."""

import pytest

from prtracker_core.gh.pull_request import PullRequestData
from prtracker_store.sqlite import SQLiteStore


class FakeFetcher:
    """Serves canned PullRequestData keyed by (owner, repo, number)."""

    def __init__(self):
        self.pulls: dict[tuple[str, str, int], PullRequestData] = {}
        self.error: Exception | None = None
        self.calls: list[tuple[str, str, int, str | None]] = []

    def add(self, owner, repo, number, **overrides) -> PullRequestData:
        fields = dict(
            github_id=9001,
            number=number,
            title="Fix auth bug",
            author_login="octocat",
            author_avatar="https://avatars.githubusercontent.com/octocat",
            author_display_name="The Octocat",
            branch="fix/auth",
            last_updated_at=1_700_000_000,
        )
        fields.update(overrides)
        data = PullRequestData(**fields)
        self.pulls[(owner, repo, number)] = data
        return data

    def fetch(self, owner, repo, number, token):
        self.calls.append((owner, repo, number, token))
        if self.error is not None:
            raise self.error
        return self.pulls[(owner, repo, number)]


@pytest.fixture
def store(tmp_path):
    s = SQLiteStore(db_path=str(tmp_path / "tracker.db"))
    yield s
    s.close()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def make_pr(store):
    """Insert a pull request directly through the store and return its view."""
    counter = {"n": 0}

    def _make(login="octocat", display_name="The Octocat", project_id=None, updated=1_700_000_000):
        from prtracker_store.models import PullRequestUpsert

        counter["n"] += 1
        author = store.insert_team_member_if_absent(login, None, display_name)
        pr, _ = store.upsert_pull_request(
            PullRequestUpsert(
                github_id=1000 + counter["n"],
                pr_number=counter["n"],
                title=f"PR {counter['n']}",
                author_id=author.id,
                repository_owner="octocat",
                repository_name="hello-world",
                branch="main",
                last_updated_at=updated + counter["n"],
                project_id=project_id,
            )
        )
        return pr

    return _make
