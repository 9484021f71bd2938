"""GitHub token resolution.

Resolution order (stops at first success):
  1. GITHUB_TOKEN environment variable (explicit override)
  2. The token saved with `prtracker token set`
  3. `gh auth token` (GitHub CLI session — works after `gh auth login`)
"""

from __future__ import annotations

import logging
import os
import subprocess
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prtracker_cli.credentials import CredentialStore

logger = logging.getLogger(__name__)


def resolve_github_token(credentials: CredentialStore | None = None) -> str | None:
    """Return a GitHub token or None if no valid source is available.

    Never raises — callers should check for None and decide whether an
    unauthenticated request is acceptable.
    """
    # 1. Explicit environment variable wins over anything stored.
    token = os.environ.get("GITHUB_TOKEN")
    if token:
        return token

    # 2. Token saved by `prtracker token set`.
    if credentials is not None:
        try:
            stored = credentials.get()
        except (OSError, ValueError) as e:
            logger.warning("Could not read stored GitHub token: %s", e)
            stored = None
        if stored:
            logger.debug("Resolved GitHub token from credential store.")
            return stored

    # 3. GitHub CLI session — reuse the token that `gh auth login` stored.
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        if result.returncode == 0:
            gh_token = result.stdout.strip()
            if gh_token:
                logger.debug("Resolved GitHub token via gh CLI session.")
                return gh_token
    except (FileNotFoundError, subprocess.TimeoutExpired):
        # gh is not installed or timed out — fall through.
        pass

    return None
