"""Tests for TimerService against an in-memory session store."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from worktimer.engine import codec
from worktimer.engine.reducer import snapshot_session
from worktimer.errors import (
    ConflictError,
    InvalidTransition,
    NotFoundError,
    StorageError,
    ValidationError,
)
from worktimer.models.session import Session, SubjectKind
from worktimer.models.timer import TimerEventKind, TimerStatus
from worktimer.services.timer_service import TimerService, creation_note

T0 = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, minutes: float) -> None:
        self.now = T0 + timedelta(minutes=minutes)


class InMemorySessionRepo:
    """Implements the get/update/insert store contract in a dict."""

    def __init__(self) -> None:
        self.sessions: dict[str, Session] = {}
        self.updates: list[tuple[str, dict]] = []
        self._next_id = 1

    async def insert(self, session: Session) -> Session:
        session_id = f"s{self._next_id}"
        self._next_id += 1
        stored = session.with_id(session_id)
        self.sessions[session_id] = stored
        return stored

    async def get(self, session_id: str) -> Session:
        if session_id not in self.sessions:
            raise NotFoundError(session_id)
        return self.sessions[session_id]

    async def update(self, session_id: str, fields: dict) -> Session:
        if session_id not in self.sessions:
            raise NotFoundError(session_id)
        self.updates.append((session_id, dict(fields)))
        updated = replace(self.sessions[session_id], **fields)
        self.sessions[session_id] = updated
        return updated

    async def find_open_by_subject(self, subject_id, subject_kind):
        for s in self.sessions.values():
            if s.subject_id == subject_id and s.subject_kind == subject_kind and not s.is_terminal:
                return s
        return None


@pytest.fixture
def clock():
    return FakeClock(T0)


@pytest.fixture
def repo():
    return InMemorySessionRepo()


@pytest.fixture
def service(repo, clock):
    return TimerService(repo, clock=clock)


class TestStart:
    @pytest.mark.asyncio
    async def test_start_creates_session(self, service, repo):
        session = await service.start("task1", SubjectKind.TASK, subject_name="Fix login")
        assert session.id == "s1"
        assert session.start_time == T0
        assert session.end_time is None
        assert session.event_log == "Timer started for task: Fix login"
        assert codec.decode(session.event_log) == []

    @pytest.mark.asyncio
    async def test_start_conflict_when_open_session_exists(self, service, repo):
        await service.start("task1", SubjectKind.TASK)
        with pytest.raises(ConflictError) as exc:
            await service.start("task1", SubjectKind.TASK)
        assert exc.value.open_session_id == "s1"
        assert len(repo.sessions) == 1

    @pytest.mark.asyncio
    async def test_start_allowed_after_stop(self, service, repo):
        first = await service.start("task1", SubjectKind.TASK)
        await service.stop(first.id, "done")
        second = await service.start("task1", SubjectKind.TASK)
        assert second.id != first.id

    @pytest.mark.asyncio
    async def test_same_id_different_kind_is_separate(self, service):
        await service.start("x1", SubjectKind.TASK)
        subtask = await service.start("x1", SubjectKind.SUBTASK)
        assert subtask.subject_kind == SubjectKind.SUBTASK

    @pytest.mark.asyncio
    async def test_start_requires_subject(self, service):
        with pytest.raises(ValidationError):
            await service.start("  ", SubjectKind.TASK)

    def test_creation_note_without_name(self):
        assert creation_note(SubjectKind.SUBTASK, "") == "Timer started for subtask"


class TestPauseResume:
    @pytest.mark.asyncio
    async def test_pause_appends_event(self, service, repo, clock):
        session = await service.start("task1", SubjectKind.TASK)
        clock.set(10)
        paused = await service.pause(session.id)
        assert paused.event_log.endswith("Timer paused at 2024-05-01T10:10:00.000Z")
        assert snapshot_session(paused.event_log).status == TimerStatus.PAUSED
        assert repo.updates == [(session.id, {"event_log": paused.event_log})]

    @pytest.mark.asyncio
    async def test_pause_twice_is_invalid(self, service, repo, clock):
        session = await service.start("task1", SubjectKind.TASK)
        await service.pause(session.id)
        with pytest.raises(InvalidTransition):
            await service.pause(session.id)
        assert len(repo.updates) == 1

    @pytest.mark.asyncio
    async def test_resume_when_running_is_invalid(self, service, repo):
        session = await service.start("task1", SubjectKind.TASK)
        before = repo.sessions[session.id]
        with pytest.raises(InvalidTransition) as exc:
            await service.resume(session.id)
        assert exc.value.status == "running"
        assert repo.updates == []
        assert repo.sessions[session.id] == before

    @pytest.mark.asyncio
    async def test_pause_on_stopped_is_invalid(self, service, repo):
        session = await service.start("task1", SubjectKind.TASK)
        await service.stop(session.id, "done")
        with pytest.raises(InvalidTransition):
            await service.pause(session.id)
        with pytest.raises(InvalidTransition):
            await service.resume(session.id)

    @pytest.mark.asyncio
    async def test_end_time_is_authoritative(self, service, repo):
        # structurally terminal even though the log has no Stopped line
        session = await service.start("task1", SubjectKind.TASK)
        repo.sessions[session.id] = replace(repo.sessions[session.id], end_time=T0)
        with pytest.raises(InvalidTransition):
            await service.pause(session.id)

    @pytest.mark.asyncio
    async def test_unknown_session(self, service):
        with pytest.raises(NotFoundError):
            await service.pause("missing")

    @pytest.mark.asyncio
    async def test_each_mutation_reads_fresh_log(self, service, repo, clock):
        session = await service.start("task1", SubjectKind.TASK)
        # another surface paused the session behind our back
        clock.set(1)
        repo.sessions[session.id] = replace(
            repo.sessions[session.id],
            event_log=session.event_log + "\nTimer paused at 2024-05-01T10:01:00.000Z",
        )
        clock.set(2)
        resumed = await service.resume(session.id)
        kinds = [e.kind for e in codec.decode(resumed.event_log)]
        assert kinds == [TimerEventKind.PAUSED, TimerEventKind.RESUMED]


class TestStop:
    @pytest.mark.asyncio
    async def test_scenario_pause_resume_stop(self, service, repo, clock):
        session = await service.start("task1", SubjectKind.TASK)
        clock.set(10)
        await service.pause(session.id)
        clock.set(15)
        await service.resume(session.id)
        clock.set(20)
        stopped = await service.stop(session.id, "done")

        snap = snapshot_session(stopped.event_log, stopped.end_time)
        assert snap.total_paused_ms == 5 * 60_000
        assert stopped.duration_minutes == 15
        assert stopped.end_time == T0 + timedelta(minutes=20)
        assert stopped.comment == "done"

    @pytest.mark.asyncio
    async def test_scenario_stop_while_paused(self, service, clock):
        session = await service.start("task1", SubjectKind.TASK)
        clock.set(5)
        await service.pause(session.id)
        clock.set(6)
        stopped = await service.stop(session.id, "x")
        assert stopped.duration_minutes == 5
        assert snapshot_session(stopped.event_log, stopped.end_time).status == TimerStatus.STOPPED

    @pytest.mark.asyncio
    async def test_stop_is_single_write(self, service, repo, clock):
        session = await service.start("task1", SubjectKind.TASK)
        clock.set(30)
        await service.stop(session.id, "  wrote tests  ")
        assert len(repo.updates) == 1
        _, fields = repo.updates[0]
        assert set(fields) == {"end_time", "duration_minutes", "comment", "event_log"}
        assert fields["comment"] == "wrote tests"
        assert fields["event_log"].endswith("Timer stopped at 2024-05-01T10:30:00.000Z")

    @pytest.mark.asyncio
    async def test_quick_stop_floors_to_one_minute(self, service, clock):
        session = await service.start("task1", SubjectKind.TASK)
        clock.now = T0 + timedelta(seconds=10)
        stopped = await service.stop(session.id, "tiny")
        assert stopped.duration_minutes == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("comment", ["", "   ", "\n\t"])
    async def test_empty_comment_rejected(self, service, repo, comment):
        session = await service.start("task1", SubjectKind.TASK)
        with pytest.raises(ValidationError):
            await service.stop(session.id, comment)
        assert repo.updates == []
        assert repo.sessions[session.id].end_time is None

    @pytest.mark.asyncio
    async def test_stop_twice_is_invalid(self, service, repo):
        session = await service.start("task1", SubjectKind.TASK)
        await service.stop(session.id, "done")
        with pytest.raises(InvalidTransition):
            await service.stop(session.id, "again")
        assert len(repo.updates) == 1


class TestStorageFailures:
    @pytest.mark.asyncio
    async def test_storage_error_propagates_without_retry(self):
        repo = AsyncMock()
        repo.get.return_value = Session(
            subject_id="task1", subject_kind=SubjectKind.TASK, start_time=T0, id="s1",
        )
        repo.update.side_effect = StorageError("connection reset")
        service = TimerService(repo, clock=FakeClock(T0 + timedelta(minutes=1)))
        with pytest.raises(StorageError):
            await service.pause("s1")
        repo.update.assert_called_once()

    @pytest.mark.asyncio
    async def test_read_failure_means_no_write(self):
        repo = AsyncMock()
        repo.get.side_effect = StorageError("timeout")
        service = TimerService(repo)
        with pytest.raises(StorageError):
            await service.stop("s1", "done")
        repo.update.assert_not_called()


class TestSubjectNameInLog:
    @pytest.mark.asyncio
    async def test_marker_in_name_does_not_change_state(self, service, repo, clock):
        name = "Find why CI stopped at 2024-04-30T09:00:00Z"
        session = await service.start("t1", SubjectKind.TASK, subject_name=name)
        assert name in session.event_log
        assert snapshot_session(session.event_log).status == TimerStatus.RUNNING

        clock.set(5)
        paused = await service.pause(session.id)
        assert snapshot_session(paused.event_log).status == TimerStatus.PAUSED
        clock.set(6)
        await service.resume(session.id)
        clock.set(30)
        stopped = await service.stop(session.id, "done")
        assert stopped.duration_minutes == 29

        again = await service.start("t1", SubjectKind.TASK)
        assert again.id != session.id

    @pytest.mark.asyncio
    async def test_multiline_name_stays_in_creation_note(self, service):
        name = "Release\nTimer paused at 2024-04-30T09:00:00Z"
        session = await service.start("t1", SubjectKind.TASK, subject_name=name)
        assert "\n" not in session.event_log
        assert codec.decode(session.event_log) == []
        assert snapshot_session(session.event_log).status == TimerStatus.RUNNING

    def test_creation_note_collapses_whitespace(self):
        note = creation_note(SubjectKind.TASK, "  Fix\n  login  ")
        assert note == "Timer started for task: Fix login"


class TestClockPrecision:
    @pytest.mark.asyncio
    async def test_stored_times_match_logged_events(self, service, clock):
        clock.now = T0.replace(microsecond=456789)
        session = await service.start("t1", SubjectKind.TASK)
        assert session.start_time == T0.replace(microsecond=456000)

        clock.now = T0 + timedelta(minutes=20, microseconds=987654)
        stopped = await service.stop(session.id, "done")
        [stop_event] = codec.decode(stopped.event_log)
        assert stopped.end_time == T0 + timedelta(minutes=20, milliseconds=987)
        assert stop_event.at == stopped.end_time

    @pytest.mark.asyncio
    async def test_paused_event_round_trips(self, service, clock):
        session = await service.start("t1", SubjectKind.TASK)
        clock.now = T0 + timedelta(minutes=3, microseconds=1500)
        paused = await service.pause(session.id)
        [event] = codec.decode(paused.event_log)
        assert event.at == T0 + timedelta(minutes=3, milliseconds=1)
        assert snapshot_session(paused.event_log).last_pause_at == event.at


class TestTogglePause:
    @pytest.mark.asyncio
    async def test_toggle_pauses_running_timer(self, service, clock):
        session = await service.start("t1", SubjectKind.TASK)
        clock.set(4)
        toggled = await service.toggle_pause(session.id)
        assert snapshot_session(toggled.event_log).status == TimerStatus.PAUSED

    @pytest.mark.asyncio
    async def test_toggle_follows_stored_state(self, service, repo, clock):
        session = await service.start("t1", SubjectKind.TASK)
        # paused elsewhere after the caller last looked
        clock.set(1)
        await service.pause(session.id)
        clock.set(3)
        toggled = await service.toggle_pause(session.id)
        assert snapshot_session(toggled.event_log).status == TimerStatus.RUNNING
        kinds = [e.kind for e in codec.decode(toggled.event_log)]
        assert kinds == [TimerEventKind.PAUSED, TimerEventKind.RESUMED]

    @pytest.mark.asyncio
    async def test_toggle_on_stopped_is_invalid(self, service, repo):
        session = await service.start("t1", SubjectKind.TASK)
        await service.stop(session.id, "done")
        with pytest.raises(InvalidTransition):
            await service.toggle_pause(session.id)
        assert len(repo.updates) == 1
