"""Selection handling for the job list.

The selection is a job identifier, not a row index.  It is resolved against
the full job list in source order every time it moves, so moving past the end
of one status group continues into the next one.  An identifier that is no
longer present after a refresh counts as no selection.
"""

from __future__ import annotations

from typing import Optional, Sequence

from .data import Job

__all__ = ["Navigator", "select_next", "select_previous"]


def _position(jobs: Sequence[Job], selection: Optional[str]) -> Optional[int]:
    if selection is None:
        return None
    return next((index for index, job in enumerate(jobs) if job.id == selection), None)


def select_next(jobs: Sequence[Job], selection: Optional[str]) -> Optional[str]:
    """Return the id after *selection*, wrapping around, or the first id."""

    if not jobs:
        return None
    index = _position(jobs, selection)
    if index is None:
        return jobs[0].id
    return jobs[(index + 1) % len(jobs)].id


def select_previous(jobs: Sequence[Job], selection: Optional[str]) -> Optional[str]:
    """Return the id before *selection*, wrapping around, or the last id."""

    if not jobs:
        return None
    index = _position(jobs, selection)
    if index is None:
        return jobs[-1].id
    return jobs[(index - 1) % len(jobs)].id


class Navigator:
    """Own the current job list and the selected job id."""

    def __init__(self, jobs: Sequence[Job] = (), selection: Optional[str] = None) -> None:
        self.jobs: list[Job] = list(jobs)
        self.selection = selection

    def next(self) -> Optional[str]:
        self.selection = select_next(self.jobs, self.selection)
        return self.selection

    def previous(self) -> Optional[str]:
        self.selection = select_previous(self.jobs, self.selection)
        return self.selection

    def replace_jobs(self, jobs: Sequence[Job]) -> None:
        # The selection is kept as is and re-resolved on the next move.
        self.jobs = list(jobs)

    def selected_job(self) -> Optional[Job]:
        index = _position(self.jobs, self.selection)
        return None if index is None else self.jobs[index]
