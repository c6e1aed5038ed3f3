"""
jobworker - recurring interval and cron jobs with persisted state
"""

from __future__ import annotations
from importlib.metadata import PackageNotFoundError, version

from jobworker.errors import FilesystemError, JobWorkerError, ParseError
from jobworker.worker import CronWorker, JobState, Worker


def _get_version() -> str:
    """Read version from the installed distribution metadata."""
    try:
        return version("jobworker")
    except PackageNotFoundError:
        return "0.0.0-unknown"


__version__ = _get_version()

__all__ = [
    "CronWorker",
    "FilesystemError",
    "JobState",
    "JobWorkerError",
    "ParseError",
    "Worker",
]
