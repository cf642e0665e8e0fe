"""Board service: read-only view of open sessions for displays."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from worktimer.engine import codec
from worktimer.engine.duration import format_hms, live_elapsed_ms
from worktimer.engine.reducer import snapshot_session
from worktimer.infra.db.sessions import SessionRepo
from worktimer.models.session import Session
from worktimer.models.timer import TimerEvent, TimerSnapshot, TimerStatus

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SessionView:
    """A session together with its derived timer state."""

    session: Session
    snapshot: TimerSnapshot
    elapsed_ms: int

    @property
    def status(self) -> TimerStatus:
        return self.snapshot.status

    @property
    def display(self) -> str:
        return format_hms(self.elapsed_ms)

    @property
    def events(self) -> list[TimerEvent]:
        return codec.decode(self.session.event_log)


@dataclass
class Board:
    """Every open session at one instant."""

    views: list[SessionView] = field(default_factory=list)
    timestamp: datetime = field(default_factory=_utc_now)

    @property
    def running_count(self) -> int:
        return sum(1 for v in self.views if v.status == TimerStatus.RUNNING)

    @property
    def paused_count(self) -> int:
        return sum(1 for v in self.views if v.status == TimerStatus.PAUSED)

    def summary_text(self) -> str:
        if not self.views:
            return "No timers running."
        lines = [f"{self.running_count} running, {self.paused_count} paused"]
        for v in self.views:
            s = v.session
            label = s.subject_name or s.subject_id
            lines.append(
                f"  {s.id} {v.display} [{v.status.value}] "
                f"{s.subject_kind.value}: {label}"
            )
        return "\n".join(lines)


class BoardService:
    """Builds session views through the shared reducer and calculator."""

    def __init__(
        self,
        session_repo: SessionRepo,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._repo = session_repo
        self._clock = clock or _utc_now

    def view(self, session: Session, now: datetime | None = None) -> SessionView:
        snapshot = snapshot_session(session.event_log, session.end_time)
        elapsed = live_elapsed_ms(session.start_time, now or self._clock(), snapshot)
        return SessionView(session=session, snapshot=snapshot, elapsed_ms=elapsed)

    async def load_board(self, now: datetime | None = None) -> Board:
        """Fetch all open sessions and derive their state at ``now``."""
        now = now or self._clock()
        sessions = await self._repo.list_open()
        views = [self.view(s, now) for s in sessions]
        logger.debug("Loaded board with %d open session(s)", len(views))
        return Board(views=views, timestamp=now)

    async def session_view(self, session_id: str, now: datetime | None = None) -> SessionView:
        """Fetch one session and derive its state at ``now``."""
        session = await self._repo.get(session_id)
        return self.view(session, now)
