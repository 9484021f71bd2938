"""Tests for status counts and the author performance ranking."""

import pytest

from prtracker_core.aggregation import UNKNOWN_AUTHOR, AggregationEngine
from prtracker_core.workflow import WorkflowEngine
from prtracker_store.models import PRStatus


@pytest.fixture
def agg(store):
    return AggregationEngine(store)


@pytest.fixture
def workflow(store):
    return WorkflowEngine(store)


class TestStatusCounts:
    def test_empty_store_reports_zeroes(self, agg):
        assert agg.status_counts() == {
            PRStatus.WAITING: 0,
            PRStatus.REVIEWING: 0,
            PRStatus.ACTION: 0,
            PRStatus.APPROVED: 0,
        }

    def test_counts_exclude_archived(self, agg, workflow, make_pr):
        make_pr()
        make_pr()
        workflow.transition(make_pr().id, PRStatus.REVIEWING)
        workflow.approve_with_score(make_pr().id, 7)
        workflow.archive(make_pr().id)

        counts = agg.status_counts()

        assert counts[PRStatus.WAITING] == 2
        assert counts[PRStatus.REVIEWING] == 1
        assert counts[PRStatus.ACTION] == 0
        assert counts[PRStatus.APPROVED] == 1
        assert PRStatus.ARCHIVED not in counts


class TestProjectHasPullRequests:
    def test_tracks_assignment(self, agg, store, make_pr):
        project = store.add_project("P")
        assert agg.project_has_pull_requests(project.id) is False
        pr = make_pr(project_id=project.id)
        assert agg.project_has_pull_requests(project.id) is True
        store.assign_project(pr.id, None)
        assert agg.project_has_pull_requests(project.id) is False


class TestPerformanceRanking:
    def test_empty(self, agg):
        assert agg.performance_ranking() == []
        assert agg.overall_average_score() is None

    def test_ranked_by_average_descending(self, agg, workflow, make_pr):
        workflow.approve_with_score(make_pr(login="alice", display_name="Alice").id, 6)
        workflow.approve_with_score(make_pr(login="alice", display_name="Alice").id, 7)
        workflow.approve_with_score(make_pr(login="bob", display_name="Bob").id, 9)
        make_pr(login="carol", display_name="Carol")

        ranking = agg.performance_ranking()

        assert [r.author for r in ranking] == ["Bob", "Alice", "Carol"]
        assert ranking[0].avg_score == 9.0
        assert ranking[1].avg_score == 6.5
        assert ranking[1].approved_count == 2
        assert ranking[1].scored_count == 2
        assert ranking[2].avg_score is None
        assert ranking[2].approved_count == 0

    def test_average_rounded_to_one_decimal(self, agg, workflow, make_pr):
        for score in (7, 8, 8):
            workflow.approve_with_score(make_pr(login="a", display_name="A").id, score)
        assert agg.performance_ranking()[0].avg_score == 7.7

    @pytest.mark.parametrize(
        "scores, expected",
        [
            ((7, 7, 7, 8), 7.3),
            ((6, 6, 6, 7), 6.3),
            ((1, 2, 2, 2), 1.8),
            ((8, 9), 8.5),
            ((6, 6, 7, 7, 7, 7, 7, 7, 7, 7), 6.8),
        ],
    )
    def test_average_rounds_half_up(self, agg, workflow, make_pr, scores, expected):
        for score in scores:
            workflow.approve_with_score(make_pr(login="a", display_name="A").id, score)
        assert agg.performance_ranking()[0].avg_score == expected
        assert agg.overall_average_score() == expected

    def test_missing_display_name_grouped_as_unknown(self, agg, workflow, make_pr):
        workflow.approve_with_score(make_pr(login="x", display_name=None).id, 4)
        workflow.approve_with_score(make_pr(login="y", display_name=None).id, 8)

        ranking = agg.performance_ranking()

        assert len(ranking) == 1
        assert ranking[0].author == UNKNOWN_AUTHOR
        assert ranking[0].avg_score == 6.0

    def test_ties_keep_encounter_order(self, agg, workflow, store, make_pr):
        workflow.approve_with_score(make_pr(login="a", display_name="A").id, 8)
        workflow.approve_with_score(make_pr(login="b", display_name="B").id, 8)

        # list_pull_requests is newest first, so B is encountered before A.
        expected = []
        for pr in store.list_pull_requests():
            if pr.author_display_name not in expected:
                expected.append(pr.author_display_name)

        assert [r.author for r in agg.performance_ranking()] == expected

    def test_archived_pr_score_still_counts(self, agg, workflow, make_pr):
        pr = make_pr(login="a", display_name="A")
        workflow.approve_with_score(pr.id, 9)
        workflow.archive(pr.id)

        row = agg.performance_ranking()[0]

        assert row.author == "A"
        assert row.approved_count == 0
        assert row.avg_score == 9.0
        assert row.scored_count == 1
        assert agg.overall_average_score() == 9.0

    def test_overall_average(self, agg, workflow, make_pr):
        workflow.approve_with_score(make_pr().id, 5)
        workflow.approve_with_score(make_pr().id, 8)
        make_pr()
        assert agg.overall_average_score() == 6.5
