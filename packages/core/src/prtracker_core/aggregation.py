"""Derived views over the stored pull requests.

All views are recomputed from the full current set on every call; nothing is
cached or maintained incrementally.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from prtracker_store.models import PRStatus

if TYPE_CHECKING:
    from prtracker_store.base import BaseStore

UNKNOWN_AUTHOR = "Unknown"


@dataclass
class AuthorPerformance:
    """Per-author ranking row. avg_score is None when the author has no scored PRs."""

    author: str
    approved_count: int
    avg_score: float | None
    scored_count: int


def _mean(values: list[int]) -> float | None:
    if not values:
        return None
    # Half-up on the exact quotient: 29/4 gives 7.3, not 7.2.
    mean = Decimal(sum(values)) / Decimal(len(values))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class AggregationEngine:
    def __init__(self, store: BaseStore):
        self._store = store

    def status_counts(self) -> dict[PRStatus, int]:
        """Active (non-archived) PRs per status; every active status is present."""
        counts = {status: 0 for status in PRStatus if status is not PRStatus.ARCHIVED}
        for pr in self._store.list_pull_requests():
            if pr.status in counts:
                counts[pr.status] += 1
        return counts

    def project_has_pull_requests(self, project_id: int) -> bool:
        # Same query the store's delete guard runs.
        return self._store.project_has_pull_requests(project_id)

    def performance_ranking(self) -> list[AuthorPerformance]:
        """Rank authors by average score, highest first.

        Authors are grouped by display name ("Unknown" when missing). Authors
        without any scored PR come after every scored author; ties keep the
        order in which authors were first seen.
        """
        approved: dict[str, int] = {}
        scores: dict[str, list[int]] = {}
        for pr in self._store.list_pull_requests():
            name = pr.author_display_name or UNKNOWN_AUTHOR
            approved.setdefault(name, 0)
            scores.setdefault(name, [])
            if pr.status is PRStatus.APPROVED:
                approved[name] += 1
            if pr.score is not None:
                scores[name].append(pr.score)

        rows = [
            AuthorPerformance(
                author=name,
                approved_count=approved[name],
                avg_score=_mean(scores[name]),
                scored_count=len(scores[name]),
            )
            for name in approved
        ]
        # sorted() is stable, so equal keys keep encounter order.
        return sorted(rows, key=lambda r: (r.avg_score is None, -(r.avg_score or 0.0)))

    def overall_average_score(self) -> float | None:
        return _mean([pr.score for pr in self._store.list_pull_requests() if pr.score is not None])
