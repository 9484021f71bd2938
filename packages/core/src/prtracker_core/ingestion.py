"""Ingestion pipeline: PR reference → GitHub fetch → identity → upsert.

    ingest()
      → parse_reference()            InvalidReference
      → store.get_project()          RecordNotFound   (only when project_id given)
      → fetcher.fetch()              UpstreamFetchError, surfaced unchanged
      → IdentityResolver.resolve()   may create a TeamMember
      → store.upsert_pull_request()  creates or refreshes exactly one row

Nothing is written before the fetch succeeds. Identity resolution and the
upsert are each idempotent, so a failure between them leaves at most an
unreferenced TeamMember that the next attempt reuses.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from prtracker_core.errors import RecordNotFound
from prtracker_core.identity import IdentityResolver
from prtracker_core.reference import PRReference, parse_reference
from prtracker_store.models import PullRequestUpsert, PullRequestView

if TYPE_CHECKING:
    from prtracker_core.gh.pull_request import PullRequestFetcher
    from prtracker_store.base import BaseStore

logger = logging.getLogger(__name__)


@dataclass
class IngestResult:
    pull_request: PullRequestView
    created: bool
    reference: PRReference


class IngestionPipeline:
    def __init__(self, store: BaseStore, fetcher: PullRequestFetcher, token: str | None = None):
        self._store = store
        self._fetcher = fetcher
        self._token = token
        self._identities = IdentityResolver(store)

    def ingest(self, reference: str, project_id: int | None = None) -> IngestResult:
        """Fetch the referenced PR and merge it into the store.

        project_id is applied when the PR is first tracked (or has no project
        yet); re-ingesting never moves a PR to another project.
        """
        ref = parse_reference(reference)
        if project_id is not None and self._store.get_project(project_id) is None:
            raise RecordNotFound("project", project_id)

        data = self._fetcher.fetch(ref.owner, ref.repo, ref.number, self._token)

        author = self._identities.resolve(data.author_login, data.author_avatar, data.author_display_name)
        pull_request, created = self._store.upsert_pull_request(
            PullRequestUpsert(
                github_id=data.github_id,
                pr_number=ref.number,
                title=data.title,
                author_id=author.id,
                repository_owner=ref.owner,
                repository_name=ref.repo,
                branch=data.branch,
                last_updated_at=data.last_updated_at,
                project_id=project_id,
            )
        )
        logger.info(
            "%s %s (id=%d, github_id=%d)",
            "Tracking" if created else "Refreshed",
            ref,
            pull_request.id,
            pull_request.github_id,
        )
        return IngestResult(pull_request=pull_request, created=created, reference=ref)
