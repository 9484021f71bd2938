"""Store-level error conditions.

TrackerError is the root of every typed failure in prtracker; the engine's
own conditions (prtracker_core.errors) subclass it too, so a caller can catch
one base class at the presentation boundary.
"""

from __future__ import annotations


class TrackerError(Exception):
    """Base class for all typed prtracker failures."""


class RecordNotFound(TrackerError):
    def __init__(self, entity: str, key: object):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} {key!r} not found.")


class DuplicateConflict(TrackerError):
    """A uniqueness constraint rejected a write that could not be collapsed into an update."""

    def __init__(self, entity: str, field: str, value: object):
        self.entity = entity
        self.field = field
        self.value = value
        super().__init__(f"A {entity} with {field} {value!r} already exists.")


class ProjectInUse(TrackerError):
    def __init__(self, project_id: int, pull_request_count: int):
        self.project_id = project_id
        self.pull_request_count = pull_request_count
        super().__init__(
            f"Cannot delete project {project_id}: {pull_request_count} pull request(s) are assigned to it. "
            "Reassign them first."
        )


class InvalidProjectName(TrackerError):
    def __init__(self, name: object):
        self.name = name
        super().__init__(f"Project name {name!r} is not valid: it must contain a non-blank character.")
