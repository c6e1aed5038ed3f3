"""Fire-time computation for interval and cron schedules."""

import time
from datetime import datetime, tzinfo

from croniter import CroniterBadDateError, croniter


def _now_ms() -> int:
    return int(time.time() * 1000)


def _to_croniter_expr(expr: str) -> str:
    """Normalize a 5/6-field expression to croniter's field order.

    Six-field expressions carry seconds first; croniter wants them last.
    """
    fields = expr.split() if isinstance(expr, str) else []
    if len(fields) == 6:
        fields = fields[1:] + fields[:1]
    elif len(fields) != 5:
        raise ValueError(f"cron expression must have 5 or 6 fields: {expr!r}")

    normalized = " ".join(fields)
    if not croniter.is_valid(normalized):
        raise ValueError(f"invalid cron expression: {expr!r}")
    return normalized


class IntervalSchedule:
    """Fixed period in milliseconds."""

    kind = "every"

    def __init__(self, every_ms: int):
        if isinstance(every_ms, bool) or not isinstance(every_ms, int) or every_ms <= 0:
            raise ValueError(f"interval must be a positive number of ms: {every_ms!r}")
        self.every_ms = every_ms

    @property
    def interval(self) -> int:
        return self.every_ms

    def next_run_ms(self, after_ms: int) -> int:
        return after_ms + self.every_ms


class CronSchedule:
    """Cron expression evaluated against the wall clock.

    Fire times are computed in local time unless ``tz`` is given.
    """

    kind = "cron"

    def __init__(self, expr: str, tz: tzinfo | None = None):
        self._croniter_expr = _to_croniter_expr(expr)
        self.expr = expr
        self.tz = tz
        try:
            self.next_run_ms(_now_ms())
        except CroniterBadDateError as e:
            raise ValueError(f"cron expression never fires: {expr!r}") from e

    @property
    def interval(self) -> str:
        return self.expr

    def next_run_ms(self, after_ms: int) -> int:
        """Return the first fire time strictly after ``after_ms``."""
        base = datetime.fromtimestamp(after_ms / 1000, tz=self.tz)
        if self.tz is None:
            base = base.astimezone()
        next_time = croniter(self._croniter_expr, base).get_next(float)
        return int(next_time * 1000)
