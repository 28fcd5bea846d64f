"""Fetch job records from Moab's ``showq`` and ``checkjob`` commands.

Every query is fail-soft: a missing binary, a non-zero exit status, a timeout
or output that cannot be parsed simply contributes no jobs.  The problem is
logged and recorded in :attr:`QueueSnapshot.errors` so the dashboard can show
it on the status line.
"""

from __future__ import annotations

import asyncio
import contextlib
import getpass
import logging
import os
import re
import shutil
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Sequence

from .data import Job, JobStatus, QueueSnapshot
from .samples import SAMPLE_DETAILS, sample_snapshot

__all__ = ["ShowqCommands", "ShowqFetcher", "run_command"]

logger = logging.getLogger(__name__)

_DATA_LINE = re.compile(r"^[0-9]+")
_SUMMARY_WORD = re.compile(r"jobs?")
_INTEGER = re.compile(r"^-?[0-9]+$")


@dataclass
class ShowqCommands:
    showq: str = "showq"
    checkjob: str = "checkjob"


async def run_command(args: Sequence[str], timeout: float = 30.0) -> tuple[int, str, str]:
    """Run *args* and return ``(returncode, stdout, stderr)``.

    Launch failures are reported as return code 127 and timeouts as 124,
    mirroring the shell conventions.
    """

    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        return 127, "", str(exc)
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
        await proc.wait()
        return 124, "", f"Timeout after {timeout}s for: {' '.join(args)}"
    return proc.returncode or 0, stdout.decode(errors="ignore"), stderr.decode(errors="ignore")


def _column(columns: Sequence[str], number: int) -> str:
    """Return the 1-based *number*-th column, or an empty string."""

    return columns[number - 1] if 0 < number <= len(columns) else ""


def _columns_from(columns: Sequence[str], first: int, last: int) -> str:
    return " ".join(columns[first - 1 : last]).strip()


def _rest_of_line(line: str, number: int) -> str:
    """Return *line* starting at its *number*-th whitespace separated field."""

    parts = line.split(None, number - 1)
    return parts[number - 1].strip() if len(parts) >= number else ""


def _after(value: str, separator: str) -> str:
    return value.split(separator, 1)[1] if separator in value else value


def _number(value: str) -> Any:
    return int(value) if _INTEGER.match(value) else value


def _split_job_token(token: str) -> tuple[str, str]:
    """Split ``id/host/name`` into the job id and the job name."""

    job_id, _, rest = token.partition("/")
    if "/" in rest:
        rest = rest.split("/", 1)[1]
    return job_id, rest


def _job_rows(text: str) -> Iterator[list[str]]:
    """Yield the columns of every job line in ``showq`` output.

    Job lines start with a digit; the per-section totals (``3 active jobs``)
    also do, and are recognised by the word ``job`` in their third column.
    """

    for line in text.splitlines():
        if not _DATA_LINE.match(line):
            continue
        columns = line.split()
        if _SUMMARY_WORD.search(_column(columns, 3)):
            continue
        yield columns


class ShowqFetcher:
    """Collect the current user's jobs from ``showq`` and ``checkjob``."""

    def __init__(
        self,
        *,
        user: Optional[str] = None,
        commands: Optional[ShowqCommands] = None,
        timeout: float = 30.0,
        force_sample: bool = False,
    ) -> None:
        self.user = user or os.environ.get("USER") or getpass.getuser()
        self.commands = commands or ShowqCommands()
        self.timeout = timeout
        self.force_sample = force_sample

    async def fetch_snapshot(self) -> QueueSnapshot:
        if self.force_sample:
            return sample_snapshot()

        snapshot = QueueSnapshot(source="showq")
        if shutil.which(self.commands.showq) is None:
            message = f"{self.commands.showq} not found on PATH"
            logger.warning(message)
            snapshot.errors.append(message)
            return snapshot

        queries: list[tuple[list[str], Callable[[str], list[Job]]]] = [
            (["-w", f"user={self.user}", "-c", "-n", "-v"], self.parse_completed),
            (["-w", f"user={self.user}", "-r", "-n", "-v"], self.parse_running),
            (["-i", "-n", "-v"], self.parse_idle),
            (["-w", f"user={self.user}", "-b", "-n", "-v"], self.parse_blocked),
        ]
        for arguments, parser in queries:
            output = await self._run([self.commands.showq, *arguments], snapshot.errors)
            if output is None:
                continue
            try:
                snapshot.jobs.extend(parser(output))
            except (IndexError, ValueError) as exc:
                message = f"Could not parse output of showq {' '.join(arguments)}: {exc}"
                logger.warning(message)
                snapshot.errors.append(message)
        logger.debug("Fetched %d jobs for %s", len(snapshot.jobs), self.user)
        return snapshot

    async def fetch_jobs(self) -> list[Job]:
        return (await self.fetch_snapshot()).jobs

    async def fetch_details(self, job_id: str) -> dict[str, Any]:
        """Return the extra attributes ``checkjob`` reports for *job_id*."""

        if self.force_sample:
            return dict(SAMPLE_DETAILS.get(job_id, {}))
        errors: list[str] = []
        output = await self._run([self.commands.checkjob, job_id], errors)
        if output is None:
            return {}
        return self.parse_checkjob(output)

    async def _run(self, args: list[str], errors: list[str]) -> Optional[str]:
        logger.debug("Running %s", " ".join(args))
        returncode, stdout, stderr = await run_command(args, timeout=self.timeout)
        if returncode != 0:
            detail = stderr.strip() or f"exit status {returncode}"
            message = f"{' '.join(args)} failed: {detail}"
            logger.warning(message)
            errors.append(message)
            return None
        return stdout

    @staticmethod
    def parse_completed(text: str) -> list[Job]:
        jobs = []
        for columns in _job_rows(text):
            job_id, name = _split_job_token(columns[0])
            jobs.append(
                Job(
                    id=job_id,
                    status=JobStatus.COMPLETED,
                    fields={
                        "name": name,
                        "procs": _number(_column(columns, 12)),
                        "exit": _number(_column(columns, 3)),
                        "elapsed": _column(columns, 13),
                        "efficacy": _column(columns, 6),
                        "xfactor": _column(columns, 7),
                        "stop": _columns_from(columns, 14, 17),
                        "user": _column(columns, 9),
                        "group": _column(columns, 10),
                    },
                )
            )
        return jobs

    @staticmethod
    def parse_running(text: str) -> list[Job]:
        jobs = []
        for columns in _job_rows(text):
            job_id, name = _split_job_token(columns[0])
            jobs.append(
                Job(
                    id=job_id,
                    status=JobStatus.RUNNING,
                    fields={
                        "name": name,
                        "procs": _number(_column(columns, 11)),
                        "remaining": _column(columns, 12),
                        "efficacy": _column(columns, 5),
                        "xfactor": _column(columns, 6),
                        "start": _columns_from(columns, 13, 16),
                        "user": _column(columns, 8),
                        "group": _column(columns, 9),
                    },
                )
            )
        return jobs

    def parse_idle(self, text: str) -> list[Job]:
        """Parse the idle queue of every user and keep the current user's jobs.

        The rank of a job is its position in the whole idle queue, rendered as
        ``rank/total``.
        """

        rows = list(_job_rows(text))
        total = len(rows)
        jobs = []
        for rank, columns in enumerate(rows, start=1):
            owner = _column(columns, 5)
            if self.user not in owner:
                continue
            job_id, name = _split_job_token(columns[0])
            jobs.append(
                Job(
                    id=job_id,
                    status=JobStatus.IDLE,
                    fields={
                        "name": name,
                        "procs": _number(_column(columns, 7)),
                        "walltime": _column(columns, 8),
                        "priority": _number(_column(columns, 2)),
                        "xfactor": _column(columns, 3),
                        "rank": f"{rank}/{total}",
                        "estimated": _column(columns, 10),
                        "user": owner,
                        "group": _column(columns, 6),
                        "class": _column(columns, 9),
                    },
                )
            )
        return jobs

    @staticmethod
    def parse_blocked(text: str) -> list[Job]:
        jobs = []
        for columns in _job_rows(text):
            job_id, name = _split_job_token(columns[0])
            jobs.append(
                Job(
                    id=job_id,
                    status=JobStatus.BLOCKED,
                    fields={
                        "name": name,
                        "procs": _number(_column(columns, 4)),
                        "walltime": _column(columns, 5),
                        "queue": _columns_from(columns, 6, 9),
                        "user": _column(columns, 2),
                        "state": _column(columns, 3),
                    },
                )
            )
        return jobs

    @staticmethod
    def parse_checkjob(text: str) -> dict[str, Any]:
        details: dict[str, Any] = {}
        for line in text.splitlines():
            columns = line.split()
            if line.startswith("AName:"):
                details["name"] = _rest_of_line(line, 2)
            elif line.startswith("WallTime:"):
                details["elapsed"] = _column(columns, 2)
                details["walltime"] = _column(columns, 4)
            elif line.startswith("State:"):
                details["state"] = _column(columns, 2).lower()
            elif line.startswith("Creds:"):
                details["group"] = _after(_column(columns, 3), ":")
                details["class"] = _after(_column(columns, 4), ":")
            elif line.startswith("SubmitTime:"):
                details["queue"] = _rest_of_line(line, 2)
            elif line.startswith("StartTime:"):
                details["start"] = _rest_of_line(line, 2)
            elif line.startswith("Reserved Nodes:"):
                details["estimated"] = _after(_column(columns, 3), "(")
            elif line.startswith("StartPriority:"):
                details["priority"] = _number(_column(columns, 2))
            elif line.startswith("BLOCK MSG:"):
                details["reason"] = _rest_of_line(line, 3)
        return details
