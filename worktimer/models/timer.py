"""Timer event and snapshot domain models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


def truncate_to_millis(at: datetime) -> datetime:
    """Drop sub-millisecond precision; the log and MongoDB keep milliseconds."""
    return at.replace(microsecond=at.microsecond - at.microsecond % 1000)


class TimerEventKind(str, Enum):
    PAUSED = "paused"
    RESUMED = "resumed"
    STOPPED = "stopped"


@dataclass(frozen=True)
class TimerEvent:
    """One entry of a session's event log. Ordering is log position."""

    kind: TimerEventKind
    at: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "at", truncate_to_millis(self.at))

    @classmethod
    def paused(cls, at: datetime) -> TimerEvent:
        return cls(kind=TimerEventKind.PAUSED, at=at)

    @classmethod
    def resumed(cls, at: datetime) -> TimerEvent:
        return cls(kind=TimerEventKind.RESUMED, at=at)

    @classmethod
    def stopped(cls, at: datetime) -> TimerEvent:
        return cls(kind=TimerEventKind.STOPPED, at=at)


class TimerStatus(str, Enum):
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"

    @property
    def is_terminal(self) -> bool:
        return self == TimerStatus.STOPPED


@dataclass(frozen=True)
class TimerSnapshot:
    """Derived view of an event log at a point in time.

    ``last_pause_at`` is the start of the unmatched (open) pause, if any.
    It survives a STOPPED status so that stop-time math can exclude a
    pause that was never resumed.
    """

    status: TimerStatus = TimerStatus.RUNNING
    total_paused_ms: int = 0
    last_pause_at: datetime | None = None
    stopped_at: datetime | None = None

    @property
    def is_paused(self) -> bool:
        return self.status == TimerStatus.PAUSED

    @property
    def is_running(self) -> bool:
        return self.status == TimerStatus.RUNNING

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal
