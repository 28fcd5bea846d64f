"""Moab showq Textual TUI."""

import logging

from .app import ShowqTUI, run, snapshot_to_text
from .data import Job, JobStatus, QueueSnapshot
from .fetcher import ShowqFetcher

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Job",
    "JobStatus",
    "QueueSnapshot",
    "ShowqFetcher",
    "ShowqTUI",
    "run",
    "snapshot_to_text",
]

__version__ = "0.1.0"
