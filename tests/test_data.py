import pytest

from showq_tui.data import Job, JobStatus, QueueSnapshot


def test_merge_overwrites_and_adds_fields():
    job = Job(id="5", status=JobStatus.RUNNING, fields={"name": "foo", "procs": 4})
    job.merge({"name": "bar", "state": "running"})
    assert job.fields == {"name": "bar", "procs": 4, "state": "running"}
    assert job["name"] == "bar"
    assert job["id"] == "5"


def test_merge_with_empty_mapping_leaves_record_unchanged():
    job = Job(id="5", status=JobStatus.IDLE, fields={"name": "foo"})
    job.merge({})
    assert job.as_dict() == {"id": "5", "status": JobStatus.IDLE, "name": "foo"}


def test_merge_keeps_identity():
    job = Job(id="5", status=JobStatus.IDLE)
    job.merge({"id": "6", "status": "completed"})
    assert job.id == "5"
    assert job.status is JobStatus.IDLE


def test_job_behaves_like_a_mapping():
    job = Job(id=42, status="blocked", fields={"walltime": "1:00:00"})
    assert job.id == "42"
    assert job.status is JobStatus.BLOCKED
    assert "walltime" in job
    assert "status" in job
    assert "rank" not in job
    assert job.get("rank") is None
    assert list(job.keys()) == ["id", "status", "walltime"]
    with pytest.raises(KeyError):
        job["rank"]


def test_invalid_status_is_rejected():
    with pytest.raises(ValueError):
        Job(id="1", status="finished")


def test_status_label():
    assert JobStatus.RUNNING.label == "Running"


def test_snapshot_defaults():
    snapshot = QueueSnapshot()
    assert snapshot.jobs == []
    assert snapshot.errors == []
    assert snapshot.source == "showq"
    assert snapshot.timestamp.tzinfo is not None
