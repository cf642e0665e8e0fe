"""Timer command service: the only writer of a session's event log.

Every mutation is read -> validate -> append -> one write. Nothing is
retried here; failures propagate to the caller and leave the stored
session untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from worktimer.engine import codec
from worktimer.engine.duration import final_duration_minutes
from worktimer.engine.reducer import snapshot_session
from worktimer.errors import ConflictError, InvalidTransition, ValidationError
from worktimer.infra.db.sessions import SessionRepo
from worktimer.models.session import Session, SubjectKind
from worktimer.models.timer import TimerEvent, TimerStatus, truncate_to_millis

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def creation_note(subject_kind: SubjectKind, subject_name: str) -> str:
    """Human-readable first line of a new session's log.

    The name is collapsed onto one line so that all of it stays inside
    the note, which decoding skips.
    """
    name = " ".join(subject_name.split())
    if name:
        return f"{codec.CREATION_PREFIX} {subject_kind.value}: {name}"
    return f"{codec.CREATION_PREFIX} {subject_kind.value}"


class TimerService:
    """start / pause / resume / stop against the session store."""

    def __init__(
        self,
        session_repo: SessionRepo,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._repo = session_repo
        self._clock = clock or _utc_now

    def _now(self) -> datetime:
        return truncate_to_millis(self._clock())

    async def start(
        self,
        subject_id: str,
        subject_kind: SubjectKind,
        subject_name: str = "",
    ) -> Session:
        """Open a new session. One open session per subject."""
        if not subject_id or not subject_id.strip():
            raise ValidationError("Subject id is required to start a timer")

        existing = await self._repo.find_open_by_subject(subject_id, subject_kind)
        if existing:
            logger.warning(
                "Refusing to start %s %s: session %s still open",
                subject_kind.value, subject_id, existing.id,
            )
            raise ConflictError(subject_id, existing.id or "")

        now = self._now()
        session = Session(
            subject_id=subject_id,
            subject_kind=subject_kind,
            subject_name=subject_name,
            start_time=now,
            event_log=creation_note(subject_kind, subject_name),
            created_at=now,
            updated_at=now,
        )
        created = await self._repo.insert(session)
        logger.info("Started session %s for %s %s", created.id, subject_kind.value, subject_id)
        return created

    async def pause(self, session_id: str) -> Session:
        """Append a Paused event. Fails unless the timer is running."""
        return await self._append_transition(
            session_id, "pause", TimerStatus.RUNNING, TimerEvent.paused
        )

    async def resume(self, session_id: str) -> Session:
        """Append a Resumed event. Fails unless the timer is paused."""
        return await self._append_transition(
            session_id, "resume", TimerStatus.PAUSED, TimerEvent.resumed
        )

    async def toggle_pause(self, session_id: str) -> Session:
        """Pause a running timer or resume a paused one, from the stored state."""
        session = await self._repo.get(session_id)
        snapshot = snapshot_session(session.event_log, session.end_time)
        if snapshot.is_paused:
            return await self.resume(session_id)
        return await self.pause(session_id)

    async def stop(self, session_id: str, comment: str) -> Session:
        """Finalize a session.

        Duration is computed from the freshly read log, then end time,
        duration, comment and the Stopped line go out in a single update.
        """
        if comment is None or not comment.strip():
            raise ValidationError("A work comment is required to stop the timer")

        session = await self._repo.get(session_id)
        snapshot = snapshot_session(session.event_log, session.end_time)
        if snapshot.is_terminal:
            logger.warning("Session %s already stopped", session_id)
            raise InvalidTransition(session_id, snapshot.status.value, "stop")

        end_time = self._now()
        duration = final_duration_minutes(session.start_time, end_time, snapshot)
        event_log = codec.encode(session.event_log, TimerEvent.stopped(end_time))

        updated = await self._repo.update(
            session_id,
            {
                "end_time": end_time,
                "duration_minutes": duration,
                "comment": comment.strip(),
                "event_log": event_log,
            },
        )
        logger.info("Stopped session %s after %d minute(s)", session_id, duration)
        return updated

    async def _append_transition(
        self,
        session_id: str,
        action: str,
        required: TimerStatus,
        make_event: Callable[[datetime], TimerEvent],
    ) -> Session:
        session = await self._repo.get(session_id)
        snapshot = snapshot_session(session.event_log, session.end_time)
        if snapshot.status != required:
            logger.warning(
                "Rejected %s on session %s (status=%s)",
                action, session_id, snapshot.status.value,
            )
            raise InvalidTransition(session_id, snapshot.status.value, action)

        event_log = codec.encode(session.event_log, make_event(self._now()))
        updated = await self._repo.update(session_id, {"event_log": event_log})
        logger.info("Appended %s event to session %s", action, session_id)
        return updated
