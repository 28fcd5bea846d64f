"""UI configuration for table layouts and column metadata."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Union

from .data import JobStatus


@dataclass(frozen=True)
class FixedWidth:
    """Column that always occupies *width* cells."""

    width: int


@dataclass(frozen=True)
class FlexWidth:
    """Column that shares the remaining space according to *weight*."""

    min: int
    weight: int


WidthPolicy = Union[FixedWidth, FlexWidth]


@dataclass(frozen=True)
class FieldInfo:
    key: str
    label: str
    width: WidthPolicy

    @property
    def is_flexible(self) -> bool:
        return isinstance(self.width, FlexWidth)


def _field(key: str, label: str, width: int | tuple[int, int]) -> tuple[str, FieldInfo]:
    policy: WidthPolicy
    if isinstance(width, tuple):
        policy = FlexWidth(*width)
    else:
        policy = FixedWidth(width)
    return key, FieldInfo(key, label, policy)


FIELDS: Mapping[str, FieldInfo] = MappingProxyType(
    dict(
        [
            _field("id", "Job ID", 7),
            _field("name", "Job name", (8, 1)),
            _field("procs", "Procs", 5),
            _field("walltime", "Walltime", 12),
            _field("elapsed", "Elapsed time", 12),
            _field("remaining", "Remaining", 12),
            _field("efficacy", "Efficacy", 6),
            _field("xfactor", "X factor", 4),
            _field("rank", "Rank", 7),
            _field("start", "Start time", 20),
            _field("queue", "Queue time", 20),
            _field("estimated", "Est. start time", 20),
            _field("stop", "Completion time", 20),
            _field("state", "State", 8),
            _field("reason", "Reason", (20, 2)),
            _field("exit", "Exit status", 5),
            _field("user", "Username", 8),
            _field("group", "Group", 8),
            _field("class", "Queue", 8),
            _field("priority", "Priority", 5),
        ]
    )
)

# Rendering order of the status groups.
STATUS_ORDER: tuple[JobStatus, ...] = (
    JobStatus.COMPLETED,
    JobStatus.RUNNING,
    JobStatus.IDLE,
    JobStatus.BLOCKED,
)

DISPLAY_FIELDS: Mapping[JobStatus, tuple[str, ...]] = MappingProxyType(
    {
        JobStatus.COMPLETED: ("id", "name", "procs", "exit", "elapsed", "efficacy"),
        JobStatus.RUNNING: ("id", "name", "procs", "remaining", "efficacy", "start"),
        JobStatus.IDLE: ("id", "name", "procs", "rank", "estimated", "xfactor"),
        JobStatus.BLOCKED: ("id", "name", "procs", "walltime", "state"),
    }
)

# Zebra bands: rows alternate between the two styles of their status.
STATUS_COLORS: Mapping[JobStatus, tuple[str, str]] = MappingProxyType(
    {
        JobStatus.COMPLETED: ("color(253) on black", "color(15) on black"),
        JobStatus.RUNNING: ("color(40) on black", "color(46) on black"),
        JobStatus.IDLE: ("color(220) on black", "color(226) on black"),
        JobStatus.BLOCKED: ("color(160) on black", "color(196) on black"),
    }
)


def field_info(key: str) -> FieldInfo:
    """Return the metadata for *key*; unknown keys raise ``KeyError``."""

    return FIELDS[key]


def display_fields(status: JobStatus) -> tuple[str, ...]:
    return DISPLAY_FIELDS[JobStatus(status)]


__all__ = [
    "DISPLAY_FIELDS",
    "FIELDS",
    "FieldInfo",
    "FixedWidth",
    "FlexWidth",
    "STATUS_COLORS",
    "STATUS_ORDER",
    "WidthPolicy",
    "display_fields",
    "field_info",
]
