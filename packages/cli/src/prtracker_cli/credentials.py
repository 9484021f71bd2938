"""GitHub token storage.

The engine only needs get/set/delete on an opaque token, so the interface is
kept that small. FileCredentialStore keeps the token in a YAML file readable
by the current user only; the path comes from `credentials_path` in
.prtracker.yml.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_TOKEN_KEY = "github_token"


class CredentialStore(ABC):
    @abstractmethod
    def get(self) -> str | None:
        """Return the stored token, or None when nothing is stored."""

    @abstractmethod
    def set(self, token: str) -> None: ...

    @abstractmethod
    def delete(self) -> None:
        """Forget the token. Deleting when nothing is stored is not an error."""


class FileCredentialStore(CredentialStore):
    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()

    def get(self) -> str | None:
        if not self.path.exists():
            return None
        try:
            data = yaml.safe_load(self.path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"{self.path} is not valid YAML") from e
        token = data.get(_TOKEN_KEY) if isinstance(data, dict) else None
        return token or None

    def set(self, token: str) -> None:
        if not token or not token.strip():
            raise ValueError("Refusing to store an empty token.")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Create with 0600 before any secret is written.
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as f:
            yaml.safe_dump({_TOKEN_KEY: token.strip()}, f, default_flow_style=False)
        os.chmod(self.path, 0o600)
        logger.debug("Stored GitHub token in %s", self.path)

    def delete(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.debug("Removed %s", self.path)
