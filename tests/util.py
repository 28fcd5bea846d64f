from __future__ import annotations

from showq_tui.data import Job, JobStatus


def make_job(job_id: str = "1", status: JobStatus = JobStatus.RUNNING, **fields):
    defaults = dict(name="demo", procs=4)
    return Job(id=job_id, status=status, fields=defaults | fields)


def make_jobs(*specs: tuple[str, JobStatus]) -> list[Job]:
    return [make_job(job_id, status) for job_id, status in specs]
