"""Review workflow: validated status transitions and scored approval.

    Waiting ⇄ Reviewing ⇄ Action      (free movement among the open states)
    Waiting | Reviewing | Action → Approved   (score required)
    Approved → Approved                       (rescore)
    Waiting | Reviewing | Action | Approved → Archived   (score kept)
    Archived → nothing                        (terminal)

Every write happens inside one store transaction together with the
review_history row describing it. An open-state PR never carries a score;
an archived PR keeps the score it was approved with.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from prtracker_core.errors import InvalidScore, InvalidTransition, RecordNotFound
from prtracker_store.models import PRStatus

if TYPE_CHECKING:
    from prtracker_store.base import BaseStore
    from prtracker_store.models import PullRequestView

logger = logging.getLogger(__name__)

MIN_SCORE = 1
MAX_SCORE = 10

OPEN_STATES = frozenset({PRStatus.WAITING, PRStatus.REVIEWING, PRStatus.ACTION})

_ALLOWED: dict[PRStatus, frozenset[PRStatus]] = {
    PRStatus.WAITING: OPEN_STATES | {PRStatus.APPROVED, PRStatus.ARCHIVED},
    PRStatus.REVIEWING: OPEN_STATES | {PRStatus.APPROVED, PRStatus.ARCHIVED},
    PRStatus.ACTION: OPEN_STATES | {PRStatus.APPROVED, PRStatus.ARCHIVED},
    PRStatus.APPROVED: frozenset({PRStatus.APPROVED, PRStatus.ARCHIVED}),
    PRStatus.ARCHIVED: frozenset(),
}


def coerce_status(value: PRStatus | str) -> PRStatus:
    """Accept a PRStatus or its name in any case ("reviewing", "Reviewing")."""
    if isinstance(value, PRStatus):
        return value
    for status in PRStatus:
        if status.value.lower() == str(value).strip().lower():
            return status
    raise ValueError(f"Unknown status {value!r}. Choose one of: {', '.join(s.value for s in PRStatus)}.")


def can_transition(current: PRStatus, target: PRStatus) -> bool:
    return target in _ALLOWED[current]


def validate_score(score: object) -> int:
    if isinstance(score, bool) or not isinstance(score, int):
        raise InvalidScore(f"Score must be a whole number from {MIN_SCORE} to {MAX_SCORE}, got {score!r}.")
    if not MIN_SCORE <= score <= MAX_SCORE:
        raise InvalidScore(f"Score must be between {MIN_SCORE} and {MAX_SCORE}, got {score}.")
    return score


class WorkflowEngine:
    def __init__(self, store: BaseStore):
        self._store = store

    def transition(self, pr_id: int, target: PRStatus | str, score: int | None = None) -> PullRequestView:
        """Move a PR to `target`.

        Approved needs a score and is handled by approve_with_score(); a score
        given for any other target is rejected. Entering an open state clears
        the score; archiving keeps it.
        """
        try:
            target = coerce_status(target)
        except ValueError:
            current = self._require(pr_id).status
            raise InvalidTransition(current.value, str(target)) from None

        if target is PRStatus.APPROVED:
            if score is None:
                raise InvalidScore("A score from 1 to 10 is required to approve a pull request.")
            return self.approve_with_score(pr_id, score)
        if score is not None:
            raise InvalidScore(f"A score can only be set together with {PRStatus.APPROVED.value}.")

        with self._store.transaction():
            pr = self._require(pr_id)
            self._check(pr.status, target)
            if pr.status is target:
                return pr
            self._store.set_status(pr_id, target)
            if target in OPEN_STATES and pr.score is not None:
                self._store.set_score(pr_id, None)
            action = "archived" if target is PRStatus.ARCHIVED else f"status:{target.value}"
            self._store.append_history(pr_id, action)
            updated = self._require(pr_id)

        logger.info("PR %d: %s → %s", pr_id, pr.status.value, target.value)
        return updated

    def approve_with_score(self, pr_id: int, score: int) -> PullRequestView:
        """Set status Approved and the score as one unit; re-approving an Approved PR rescores it."""
        score = validate_score(score)
        with self._store.transaction():
            pr = self._require(pr_id)
            self._check(pr.status, PRStatus.APPROVED)
            rescoring = pr.status is PRStatus.APPROVED
            self._store.set_status(pr_id, PRStatus.APPROVED)
            self._store.set_score(pr_id, score)
            self._store.append_history(pr_id, f"{'rescored' if rescoring else 'approved'}:{score}")
            updated = self._require(pr_id)

        logger.info("PR %d %s with score %d", pr_id, "rescored" if rescoring else "approved", score)
        return updated

    def archive(self, pr_id: int) -> PullRequestView:
        return self.transition(pr_id, PRStatus.ARCHIVED)

    def _require(self, pr_id: int) -> PullRequestView:
        pr = self._store.get_pull_request(pr_id)
        if pr is None:
            raise RecordNotFound("pull request", pr_id)
        return pr

    @staticmethod
    def _check(current: PRStatus, target: PRStatus) -> None:
        if not can_transition(current, target):
            raise InvalidTransition(current.value, target.value)
