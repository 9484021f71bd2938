"""Pull request reference parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass

from prtracker_core.errors import InvalidReference

# owner and repo follow GitHub's naming rules loosely: no slashes or whitespace.
_URL_RE = re.compile(
    r"^(?:https?://)?(?:www\.)?github\.com/(?P<owner>[^/\s#?]+)/(?P<repo>[^/\s#?]+)/pull/(?P<number>\d+)(?:[/?#].*)?$"
)
_PATH_RE = re.compile(r"^(?P<owner>[^/\s#?]+)/(?P<repo>[^/\s#?]+)/pull/(?P<number>\d+)/?$")
_SHORT_RE = re.compile(r"^(?P<owner>[^/\s#?]+)/(?P<repo>[^/\s#?]+)#(?P<number>\d+)$")


@dataclass(frozen=True)
class PRReference:
    owner: str
    repo: str
    number: int

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}#{self.number}"


def parse_reference(reference: str) -> PRReference:
    """Split a PR URL or shorthand into owner, repo and number.

    Raises InvalidReference for anything that is not one of the accepted shapes
    or whose PR number is zero.
    """
    text = (reference or "").strip()
    for pattern in (_URL_RE, _PATH_RE, _SHORT_RE):
        match = pattern.match(text)
        if match:
            number = int(match.group("number"))
            if number < 1:
                break
            return PRReference(owner=match.group("owner"), repo=match.group("repo"), number=number)
    raise InvalidReference(reference)
