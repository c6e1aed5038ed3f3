"""Keyed registry of scheduled jobs with a per-key re-entrancy guard."""

import asyncio
import contextlib
import inspect
from typing import Any, Awaitable, Callable

from loguru import logger

from jobworker.worker.schedules import CronSchedule, IntervalSchedule, _now_ms
from jobworker.worker.types import JobState

# Zero-argument unit of work; coroutine functions are awaited
JobTask = Callable[[], Awaitable[Any] | None]
Schedule = IntervalSchedule | CronSchedule


class JobRegistry:
    """
    Owns the scheduler task and run-state of every job registered under it.

    Each job gets one long-lived ``asyncio.Task`` that sleeps until the next
    fire time and then hands off to the guarded wrapper. The wrapper runs the
    job's task as a separate task, so a slow run never delays the tick stream;
    while a run is in flight further ticks for that key are dropped.

    All methods must be called from the event loop thread.
    """

    def __init__(self, name: str):
        self.name = name
        self._handles: dict[str, asyncio.Task] = {}
        self._states: dict[str, JobState] = {}
        self._inflight: set[asyncio.Task] = set()

    def __contains__(self, key: str) -> bool:
        return key in self._handles

    def __len__(self) -> int:
        return len(self._handles)

    def keys(self) -> list[str]:
        return list(self._handles)

    def get_state(self, key: str) -> JobState | None:
        """Snapshot of a job's run-state, or None if not registered."""
        state = self._states.get(key)
        return state.model_copy() if state else None

    @property
    def inflight(self) -> int:
        """Number of task invocations currently executing."""
        return len(self._inflight)

    def add(self, key: str, task: JobTask, schedule: Schedule, immediate: bool = False) -> bool:
        """Register ``task`` under ``key``. Returns False if the key is taken."""
        if key in self._handles:
            return False

        loop = asyncio.get_running_loop()
        state = JobState(
            kind=schedule.kind,
            interval=schedule.interval,
            next_run_at_ms=schedule.next_run_ms(_now_ms()),
        )
        self._states[key] = state
        self._handles[key] = loop.create_task(
            self._tick_loop(key, task, schedule, state),
            name=f"{self.name}:{key}",
        )

        if immediate:
            self._fire(key, task)

        return True

    def remove(self, key: str) -> bool:
        """Cancel future ticks for ``key``. A run already in flight finishes."""
        handle = self._handles.pop(key, None)
        if handle is None:
            return False

        handle.cancel()
        self._states.pop(key, None)
        return True

    def clear(self) -> list[str]:
        """Remove every job; returns the keys that were removed."""
        keys = list(self._handles)
        for key in keys:
            self.remove(key)
        return keys

    async def _tick_loop(self, key: str, task: JobTask, schedule: Schedule, state: JobState) -> None:
        while True:
            delay_ms = max(0, state.next_run_at_ms - _now_ms())
            await asyncio.sleep(delay_ms / 1000)

            fired_at = state.next_run_at_ms
            next_run = schedule.next_run_ms(fired_at)
            now = _now_ms()
            if next_run <= now:
                # fell behind by a whole period; missed ticks are not replayed
                next_run = schedule.next_run_ms(now)
            state.next_run_at_ms = next_run

            self._fire(key, task)

    def _fire(self, key: str, task: JobTask) -> None:
        """Guarded wrapper: start one run unless the key is busy or gone."""
        state = self._states.get(key)
        if state is None:
            return
        if state.running:
            state.skip_count += 1
            logger.debug(f"{self.name} '{key}' still running, tick skipped")
            return

        # check and set happen with no await in between
        state.running = True
        state.run_count += 1
        state.last_run_at_ms = _now_ms()

        run = asyncio.get_running_loop().create_task(self._invoke(state, task))
        self._inflight.add(run)
        run.add_done_callback(self._inflight.discard)

    @staticmethod
    async def _invoke(state: JobState, task: JobTask) -> None:
        try:
            # task failures are isolated from the scheduler and not reported
            with contextlib.suppress(Exception):
                result = task()
                if inspect.isawaitable(result):
                    await result
        finally:
            state.running = False
