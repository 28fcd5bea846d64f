"""Built-in fallback data for demonstrating the TUI."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from .data import Job, JobStatus, QueueSnapshot

SAMPLE_MESSAGE = "Displaying bundled sample data instead of querying showq."

# Extra attributes returned for sample jobs when their details are opened.
SAMPLE_DETAILS: dict[str, dict[str, Any]] = {
    "208311": {"state": "completed", "class": "batch", "queue": "Mon Oct 12 08:14:02"},
    "208342": {
        "state": "running",
        "elapsed": "3:12:44",
        "walltime": "12:00:00",
        "group": "climate",
        "class": "batch",
        "queue": "Mon Oct 12 09:55:13",
        "start": "Mon Oct 12 10:02:31",
        "priority": 1044,
    },
    "208350": {"state": "idle", "queue": "Mon Oct 12 11:20:48", "priority": 987},
    "208356": {
        "state": "deferred",
        "group": "climate",
        "class": "long",
        "reason": "job violates class configuration 'wclimit too high for class 'long''",
    },
}


def sample_jobs() -> list[Job]:
    """Return one or more jobs of every status, in ``showq`` query order."""

    return [
        Job(
            id="208311",
            status=JobStatus.COMPLETED,
            fields={
                "name": "ocean_spinup",
                "procs": 64,
                "exit": 0,
                "elapsed": "5:41:07",
                "efficacy": "98.12",
                "xfactor": "1.4",
                "stop": "Mon Oct 12 14:03:55",
                "user": "aurora",
                "group": "climate",
            },
        ),
        Job(
            id="208319",
            status=JobStatus.COMPLETED,
            fields={
                "name": "mesh_refine",
                "procs": 16,
                "exit": 271,
                "elapsed": "0:02:13",
                "efficacy": "12.50",
                "xfactor": "1.0",
                "stop": "Mon Oct 12 14:20:41",
                "user": "aurora",
                "group": "climate",
            },
        ),
        Job(
            id="208342",
            status=JobStatus.RUNNING,
            fields={
                "name": "atmosphere_coupled_run_2040",
                "procs": 256,
                "remaining": "8:47:16",
                "efficacy": "99.70",
                "xfactor": "1.1",
                "start": "Mon Oct 12 10:02:31",
                "user": "aurora",
                "group": "climate",
            },
        ),
        Job(
            id="208350",
            status=JobStatus.IDLE,
            fields={
                "name": "postproc",
                "procs": 8,
                "walltime": "1:00:00",
                "priority": 987,
                "xfactor": "1.2",
                "rank": "3/41",
                "estimated": "00:45:12",
                "user": "aurora",
                "group": "climate",
                "class": "batch",
            },
        ),
        Job(
            id="208356",
            status=JobStatus.BLOCKED,
            fields={
                "name": "ensemble_member_07",
                "procs": 512,
                "walltime": "96:00:00",
                "queue": "Mon Oct 12 12:41:09",
                "user": "aurora",
                "state": "Deferred",
            },
        ),
    ]


def sample_snapshot(now: datetime | None = None) -> QueueSnapshot:
    """Return a representative snapshot used with ``--sample``."""

    return QueueSnapshot(
        jobs=sample_jobs(),
        timestamp=now or datetime.now(timezone.utc),
        source="sample",
        errors=[SAMPLE_MESSAGE],
    )


__all__ = ["SAMPLE_DETAILS", "SAMPLE_MESSAGE", "sample_jobs", "sample_snapshot"]
