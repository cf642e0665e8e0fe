"""Timeline reducer: fold decoded events into a TimerSnapshot.

The single place where pause/resume status is derived. Every consumer
(live display, board badges, stop-time math) goes through ``reduce``.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta

from worktimer.engine import codec
from worktimer.models.timer import TimerEvent, TimerEventKind, TimerSnapshot, TimerStatus


def _interval_ms(start: datetime, end: datetime) -> int:
    return (end - start) // timedelta(milliseconds=1)


def reduce(events: Sequence[TimerEvent]) -> TimerSnapshot:
    """Derive status, closed paused time and open pause from an event list.

    The i-th pause is matched with the i-th resume. Each matched pair adds
    ``resume - pause`` (clamped at zero) to ``total_paused_ms``. More pauses
    than resumes means PAUSED, with ``last_pause_at`` set to the last
    unmatched pause. A Stopped event makes the snapshot STOPPED whatever
    the pause parity.
    """
    pauses = [e.at for e in events if e.kind == TimerEventKind.PAUSED]
    resumes = [e.at for e in events if e.kind == TimerEventKind.RESUMED]
    stops = [e.at for e in events if e.kind == TimerEventKind.STOPPED]

    total_paused_ms = 0
    for paused_at, resumed_at in zip(pauses, resumes):
        total_paused_ms += max(0, _interval_ms(paused_at, resumed_at))

    last_pause_at = pauses[-1] if len(pauses) > len(resumes) else None

    if stops:
        status = TimerStatus.STOPPED
    elif last_pause_at is not None:
        status = TimerStatus.PAUSED
    else:
        status = TimerStatus.RUNNING

    return TimerSnapshot(
        status=status,
        total_paused_ms=total_paused_ms,
        last_pause_at=last_pause_at,
        stopped_at=stops[0] if stops else None,
    )


def snapshot_session(event_log: str | None, end_time: datetime | None = None) -> TimerSnapshot:
    """Decode and reduce a session's log, honouring a structural end time.

    A session with ``end_time`` set is terminal regardless of what the
    text says; the structured field wins over the log.
    """
    snapshot = reduce(codec.decode(event_log))
    if end_time is None:
        return snapshot
    return TimerSnapshot(
        status=TimerStatus.STOPPED,
        total_paused_ms=snapshot.total_paused_ms,
        last_pause_at=snapshot.last_pause_at,
        stopped_at=end_time,
    )
