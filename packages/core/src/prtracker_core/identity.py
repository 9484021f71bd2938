"""Identity resolution: GitHub author login → local TeamMember."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from prtracker_core.errors import InvalidLogin

if TYPE_CHECKING:
    from prtracker_store.base import BaseStore
    from prtracker_store.models import TeamMember

logger = logging.getLogger(__name__)


class IdentityResolver:
    """Maps a GitHub login to exactly one TeamMember row.

    First-seen wins: profile fields of an existing member are never
    overwritten. Concurrent callers for the same login are collapsed by the
    store's uniqueness constraint, so there is no locking here.
    """

    def __init__(self, store: BaseStore):
        self._store = store

    def resolve(self, github_login: str, avatar_url: str | None = None, display_name: str | None = None) -> TeamMember:
        if not github_login or not github_login.strip():
            raise InvalidLogin(github_login)
        member = self._store.get_team_member_by_login(github_login)
        if member is not None:
            return member
        logger.debug("No team member for %r yet; creating one", github_login)
        return self._store.insert_team_member_if_absent(github_login, avatar_url, display_name)
