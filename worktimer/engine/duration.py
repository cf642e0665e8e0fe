"""Duration calculator: elapsed and worked time from a TimerSnapshot.

Presentation-agnostic apart from the two small projections at the bottom.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta

from worktimer.models.timer import TimerSnapshot

MS_PER_MINUTE = 60_000
MIN_FINAL_MINUTES = 1


def _ms_between(start: datetime, end: datetime) -> int:
    return (end - start) // timedelta(milliseconds=1)


def _open_pause_ms(snapshot: TimerSnapshot, until: datetime) -> int:
    if snapshot.last_pause_at is None:
        return 0
    return max(0, _ms_between(snapshot.last_pause_at, until))


def live_elapsed_ms(start_time: datetime, now: datetime, snapshot: TimerSnapshot) -> int:
    """Worked milliseconds as of ``now``.

    While a pause is open the result is pinned to the pause instant, so the
    value does not move between ticks until a resume is folded in. For a
    stopped snapshot ``now`` is capped at the stop time.
    """
    if snapshot.stopped_at is not None and snapshot.stopped_at < now:
        now = snapshot.stopped_at
    elapsed = _ms_between(start_time, now) - snapshot.total_paused_ms
    elapsed -= _open_pause_ms(snapshot, now)
    return max(0, elapsed)


def final_duration_minutes(
    start_time: datetime, end_time: datetime, snapshot: TimerSnapshot
) -> int:
    """Billable minutes at stop: ``max(1, round(worked / 1 minute))``.

    Rounds half up. An open pause at stop time is excluded from worked time.
    """
    worked_ms = _ms_between(start_time, end_time) - snapshot.total_paused_ms
    worked_ms -= _open_pause_ms(snapshot, end_time)
    minutes = math.floor(worked_ms / MS_PER_MINUTE + 0.5)
    return max(MIN_FINAL_MINUTES, minutes)


def format_hms(elapsed_ms: int) -> str:
    """``HH:MM:SS`` in whole seconds. Hours are not wrapped at 24."""
    total_seconds = max(0, elapsed_ms) // 1000
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_duration(minutes: int) -> str:
    """``Xh Ym`` as used in stop confirmations."""
    return f"{minutes // 60}h {minutes % 60}m"
