"""Data structures shared by the fetcher, the renderer and the application."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterator, Mapping


class JobStatus(str, Enum):
    """Status categories reported by ``showq``."""

    COMPLETED = "completed"
    RUNNING = "running"
    IDLE = "idle"
    BLOCKED = "blocked"

    @property
    def label(self) -> str:
        return self.value.capitalize()


# Keys that identify a record and are never replaced by extra attributes.
IDENTITY_KEYS = frozenset({"id", "status"})


@dataclass
class Job:
    """A single job record.

    ``fields`` holds every displayable attribute other than the identity keys,
    keyed by the names defined in :mod:`showq_tui.ui_config`.  The record can
    be read like a mapping, so ``job["id"]`` and ``job["procs"]`` both work.
    """

    id: str
    status: JobStatus
    fields: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.id = str(self.id)
        self.status = JobStatus(self.status)

    def __getitem__(self, key: str) -> Any:
        if key == "id":
            return self.id
        if key == "status":
            return self.status
        return self.fields[key]

    def __contains__(self, key: object) -> bool:
        return key in IDENTITY_KEYS or key in self.fields

    def get(self, key: str, default: Any = None) -> Any:
        try:
            return self[key]
        except KeyError:
            return default

    def keys(self) -> Iterator[str]:
        yield "id"
        yield "status"
        yield from self.fields

    def merge(self, extra: Mapping[str, Any]) -> None:
        """Overwrite fields with the values in *extra*, leaving others untouched."""

        for key, value in extra.items():
            if key in IDENTITY_KEYS:
                continue
            self.fields[key] = value

    def as_dict(self) -> dict[str, Any]:
        return {"id": self.id, "status": self.status, **self.fields}


@dataclass
class QueueSnapshot:
    """Jobs returned by one refresh along with any problems encountered."""

    jobs: list[Job] = field(default_factory=list)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    source: str = "showq"
    errors: list[str] = field(default_factory=list)


__all__ = ["IDENTITY_KEYS", "Job", "JobStatus", "QueueSnapshot"]
