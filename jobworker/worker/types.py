"""Job run-state types (Pydantic models)."""

from typing import Literal

from pydantic import BaseModel


class JobState(BaseModel):
    """Runtime state of a registered job."""

    kind: Literal["every", "cron"]
    running: bool = False
    interval: int | str  # ms for "every", expression for "cron"
    next_run_at_ms: int | None = None
    last_run_at_ms: int | None = None
    run_count: int = 0
    skip_count: int = 0
