"""Worker package.

`worker.types` holds the run-state model exposed for introspection.
Runtime behavior lives in `worker.service` and `worker.registry`.
"""

from jobworker.worker.registry import JobRegistry
from jobworker.worker.schedules import CronSchedule, IntervalSchedule
from jobworker.worker.service import CronWorker, Worker
from jobworker.worker.state import StateFile
from jobworker.worker.types import JobState

__all__ = [
    "CronSchedule",
    "CronWorker",
    "IntervalSchedule",
    "JobRegistry",
    "JobState",
    "StateFile",
    "Worker",
]
