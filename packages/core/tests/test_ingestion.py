"""Tests for the ingestion pipeline."""

import pytest

from prtracker_core.errors import FetchErrorKind, InvalidLogin, InvalidReference, RecordNotFound, UpstreamFetchError
from prtracker_core.ingestion import IngestionPipeline
from prtracker_store.models import PRStatus

REF = "https://github.com/octocat/hello-world/pull/42"


@pytest.fixture
def pipeline(store, fetcher):
    return IngestionPipeline(store, fetcher, token="ghp_test")


# ---------------------------------------------------------------------------
# First ingestion
# ---------------------------------------------------------------------------


class TestFirstIngest:
    def test_creates_pull_request_and_author(self, pipeline, store, fetcher):
        fetcher.add("octocat", "hello-world", 42)

        result = pipeline.ingest(REF)

        assert result.created is True
        assert str(result.reference) == "octocat/hello-world#42"
        pr = result.pull_request
        assert pr.github_id == 9001
        assert pr.pr_number == 42
        assert pr.repository_owner == "octocat"
        assert pr.repository_name == "hello-world"
        assert pr.status is PRStatus.WAITING
        assert pr.score is None
        assert pr.author_login == "octocat"
        assert len(store.list_team_members()) == 1

    def test_passes_token_to_fetcher(self, pipeline, fetcher):
        fetcher.add("octocat", "hello-world", 42)
        pipeline.ingest("octocat/hello-world#42")
        assert fetcher.calls == [("octocat", "hello-world", 42, "ghp_test")]

    def test_assigns_project(self, pipeline, store, fetcher):
        project = store.add_project("Backend API")
        fetcher.add("octocat", "hello-world", 42)

        result = pipeline.ingest(REF, project_id=project.id)

        assert result.pull_request.project_id == project.id
        assert result.pull_request.project_name == "Backend API"

    def test_reuses_existing_author(self, pipeline, store, fetcher):
        fetcher.add("octocat", "hello-world", 1, github_id=1)
        fetcher.add("octocat", "hello-world", 2, github_id=2)

        a = pipeline.ingest("octocat/hello-world#1").pull_request
        b = pipeline.ingest("octocat/hello-world#2").pull_request

        assert a.author_id == b.author_id
        assert len(store.list_team_members()) == 1


# ---------------------------------------------------------------------------
# Re-ingestion
# ---------------------------------------------------------------------------


class TestReingest:
    def test_refreshes_in_place(self, pipeline, store, fetcher):
        fetcher.add("octocat", "hello-world", 42, title="Old", last_updated_at=100)
        first = pipeline.ingest(REF)

        fetcher.add("octocat", "hello-world", 42, title="New", branch="fix/auth-2", last_updated_at=200)
        second = pipeline.ingest(REF)

        assert second.created is False
        assert second.pull_request.id == first.pull_request.id
        assert second.pull_request.title == "New"
        assert second.pull_request.branch == "fix/auth-2"
        assert second.pull_request.last_updated_at == 200
        assert len(store.list_pull_requests()) == 1

    def test_keeps_workflow_state(self, pipeline, store, fetcher):
        fetcher.add("octocat", "hello-world", 42)
        pr = pipeline.ingest(REF).pull_request
        store.set_status(pr.id, PRStatus.APPROVED)
        store.set_score(pr.id, 8)

        refreshed = pipeline.ingest(REF).pull_request

        assert refreshed.status is PRStatus.APPROVED
        assert refreshed.score == 8

    def test_does_not_move_project(self, pipeline, store, fetcher):
        a = store.add_project("A")
        b = store.add_project("B")
        fetcher.add("octocat", "hello-world", 42)
        pipeline.ingest(REF, project_id=a.id)

        refreshed = pipeline.ingest(REF, project_id=b.id).pull_request

        assert refreshed.project_id == a.id

    def test_reference_shapes_resolve_to_same_row(self, pipeline, store, fetcher):
        fetcher.add("octocat", "hello-world", 42)
        pipeline.ingest(REF)
        pipeline.ingest("octocat/hello-world/pull/42")
        pipeline.ingest("octocat/hello-world#42")
        assert len(store.list_pull_requests()) == 1


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFailures:
    def test_invalid_reference_never_fetches(self, pipeline, fetcher):
        with pytest.raises(InvalidReference):
            pipeline.ingest("not a reference")
        assert fetcher.calls == []

    def test_unknown_project_never_fetches(self, pipeline, fetcher):
        fetcher.add("octocat", "hello-world", 42)
        with pytest.raises(RecordNotFound):
            pipeline.ingest(REF, project_id=404)
        assert fetcher.calls == []

    @pytest.mark.parametrize("kind", list(FetchErrorKind))
    def test_fetch_error_surfaced_and_nothing_written(self, pipeline, store, fetcher, kind):
        fetcher.error = UpstreamFetchError(kind, "upstream said no")

        with pytest.raises(UpstreamFetchError) as exc_info:
            pipeline.ingest(REF)

        assert exc_info.value.kind is kind
        assert store.list_pull_requests() == []
        assert store.list_team_members() == []

    def test_missing_display_name_allowed(self, pipeline, fetcher):
        fetcher.add("octocat", "hello-world", 42, author_display_name=None)
        assert pipeline.ingest(REF).pull_request.author_display_name is None

    def test_blank_author_login_writes_nothing(self, pipeline, store, fetcher):
        fetcher.add("octocat", "hello-world", 42, author_login="")
        with pytest.raises(InvalidLogin):
            pipeline.ingest(REF)
        assert store.list_pull_requests() == []
        assert store.list_team_members() == []
