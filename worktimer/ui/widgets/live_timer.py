"""Live counter widget for one session."""

from __future__ import annotations

from textual.widgets import Static

from worktimer.engine.ticker import LiveTicker
from worktimer.models.session import Session


class LiveTimer(Static):
    """Renders HH:MM:SS for a session, ticking while mounted.

    Owns exactly one LiveTicker: started on mount, stopped on unmount.
    Fresh session data from polling is pushed in with ``update_session``.
    """

    DEFAULT_CSS = """
    LiveTimer {
        width: 12;
        color: $success;
    }
    LiveTimer.paused {
        color: $warning;
    }
    LiveTimer.stopped {
        color: $text-muted;
    }
    """

    def __init__(self, session: Session, tick_interval: float = 1.0, **kwargs) -> None:
        super().__init__("--:--:--", **kwargs)
        self._ticker = LiveTicker(
            start_time=session.start_time,
            event_log=session.event_log,
            end_time=session.end_time,
            interval=tick_interval,
            on_tick=self._show,
        )

    def on_mount(self) -> None:
        self._ticker.start()

    def on_unmount(self) -> None:
        self._ticker.stop()

    def update_session(self, session: Session) -> None:
        self._ticker.update(session.event_log, session.end_time)

    def _show(self, text: str) -> None:
        snapshot = self._ticker.snapshot
        self.set_class(snapshot.is_paused, "paused")
        self.set_class(snapshot.is_terminal, "stopped")
        self.update(text)
