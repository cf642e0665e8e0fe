"""Tests for timer event and snapshot models."""

from datetime import datetime, timezone

from worktimer.models.timer import (
    TimerEvent,
    TimerEventKind,
    TimerSnapshot,
    TimerStatus,
    truncate_to_millis,
)

T0 = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)


class TestTimerEvent:
    def test_constructors(self):
        assert TimerEvent.paused(T0).kind == TimerEventKind.PAUSED
        assert TimerEvent.resumed(T0).kind == TimerEventKind.RESUMED
        assert TimerEvent.stopped(T0).kind == TimerEventKind.STOPPED

    def test_equality(self):
        assert TimerEvent.paused(T0) == TimerEvent(kind=TimerEventKind.PAUSED, at=T0)


class TestTimerSnapshot:
    def test_defaults(self):
        snap = TimerSnapshot()
        assert snap.is_running
        assert snap.total_paused_ms == 0
        assert snap.last_pause_at is None

    def test_terminal_only_when_stopped(self):
        assert TimerStatus.STOPPED.is_terminal
        assert not TimerStatus.PAUSED.is_terminal
        assert not TimerStatus.RUNNING.is_terminal


class TestMillisecondTruncation:
    def test_event_time_truncated_to_millis(self):
        event = TimerEvent.resumed(T0.replace(microsecond=123999))
        assert event.at == T0.replace(microsecond=123000)

    def test_truncate_keeps_whole_millis(self):
        at = T0.replace(microsecond=5000)
        assert truncate_to_millis(at) == at
