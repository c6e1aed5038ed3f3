"""Worker service: recurring interval and cron jobs plus a persisted state blob."""

from pathlib import Path
from typing import Any

from loguru import logger

from jobworker.config.schema import WorkerConfig
from jobworker.logging_config import setup_logging
from jobworker.worker.registry import JobRegistry, JobTask
from jobworker.worker.schedules import CronSchedule, IntervalSchedule
from jobworker.worker.state import StateFile
from jobworker.worker.types import JobState


class Worker:
    """Process-local worker running named recurring jobs.

    Interval jobs and cron jobs live in two independent registries, so the
    same key may be used once in each. ``state`` is a JSON-serializable blob
    owned by the caller: it is loaded on ``start`` and written on ``stop``.

    Job registration needs a running asyncio event loop.
    """

    def __init__(self, state_path: Path | str):
        self._state_file = StateFile(state_path)
        self.state: Any = {}
        self._jobs = JobRegistry("job")
        self._cron_jobs = JobRegistry("cron job")
        self._running = False

    @classmethod
    def from_config(cls, config: WorkerConfig, configure_logging: bool = False) -> "Worker":
        """Build a worker from settings, optionally applying its log level."""
        if configure_logging:
            setup_logging(config.log_level)
        return cls(config.state_file)

    @property
    def state_path(self) -> Path:
        return self._state_file.path

    @property
    def running(self) -> bool:
        return self._running

    # ========== Lifecycle ==========

    def start(self) -> None:
        """Load persisted state and begin with empty job registries.

        Raises:
            FilesystemError: state directory or file could not be created or read.
            ParseError: the existing state file is not valid JSON.
        """
        # restarting without a stop must not leave old timers behind
        self._cron_jobs.clear()
        self._jobs.clear()

        self.state = self._state_file.load()
        self._jobs = JobRegistry("job")
        self._cron_jobs = JobRegistry("cron job")
        self._running = True
        logger.info(f"Worker started with state from {self.state_path}")

    def stop(self) -> None:
        """Cancel every job (cron first, then interval) and persist state.

        Runs already in flight are not awaited. A worker that was never
        started cancels its jobs but leaves the state file alone. If saving
        fails the worker stays started, so ``stop()`` can be called again.
        """
        for key in self._cron_jobs.keys():
            self.stop_cron_job(key)
        for key in self._jobs.keys():
            self.stop_job(key)

        if not self._running:
            logger.warning("Worker.stop() called on a worker that is not started, state not saved")
            return

        self._state_file.save(self.state)
        self._running = False
        logger.info(f"Worker stopped, state saved to {self.state_path}")

    # ========== Interval jobs ==========

    def add_job(self, key: str, task: JobTask, interval_ms: int, immediate: bool = False) -> bool:
        """Run ``task`` every ``interval_ms`` milliseconds.

        Returns False without touching anything if ``key`` is already
        registered or the interval is not a positive integer. With
        ``immediate`` the task also runs once right away.
        """
        if key in self._jobs:
            return False
        try:
            schedule = IntervalSchedule(interval_ms)
        except ValueError as e:
            logger.warning(f"Job '{key}' rejected: {e}")
            return False

        self._jobs.add(key, task, schedule, immediate)
        logger.info(f"Job '{key}' added: every {interval_ms}ms")
        return True

    def stop_job(self, key: str) -> bool:
        """Stop scheduling ``key``. Returns False if it isn't registered."""
        removed = self._jobs.remove(key)
        if removed:
            logger.info(f"Job '{key}' stopped")
        return removed

    def job_state(self, key: str) -> JobState | None:
        return self._jobs.get_state(key)

    def has_job(self, key: str) -> bool:
        return key in self._jobs

    @property
    def jobs(self) -> list[str]:
        return sorted(self._jobs.keys())

    # ========== Cron jobs ==========

    def add_cron_job(self, key: str, task: JobTask, cron_expr: str, immediate: bool = False) -> bool:
        """Run ``task`` whenever the cron expression ``cron_expr`` fires.

        Five-field (minute first) and six-field (seconds first) expressions
        are accepted. Same return contract as :meth:`add_job`.
        """
        if key in self._cron_jobs:
            return False
        try:
            schedule = CronSchedule(cron_expr)
        except ValueError as e:
            logger.warning(f"Cron job '{key}' rejected: {e}")
            return False

        self._cron_jobs.add(key, task, schedule, immediate)
        logger.info(f"Cron job '{key}' added: {cron_expr}")
        return True

    def stop_cron_job(self, key: str) -> bool:
        """Stop scheduling cron job ``key``; no pending fire runs afterwards."""
        removed = self._cron_jobs.remove(key)
        if removed:
            logger.info(f"Cron job '{key}' stopped")
        return removed

    def cron_job_state(self, key: str) -> JobState | None:
        return self._cron_jobs.get_state(key)

    def has_cron_job(self, key: str) -> bool:
        return key in self._cron_jobs

    @property
    def cron_jobs(self) -> list[str]:
        return sorted(self._cron_jobs.keys())

    # ========== Status ==========

    def status(self) -> dict:
        """Get worker status."""
        return {
            "running": self._running,
            "jobs": len(self._jobs),
            "cron_jobs": len(self._cron_jobs),
            "state_path": str(self.state_path),
        }


# Cron support is built into Worker; the alias names the cron-capable worker.
CronWorker = Worker
