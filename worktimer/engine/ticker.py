"""Live tick scheduler: one recurring 1 Hz callback per displayed session.

The ticker never looks at pause state itself. It recomputes
``live_elapsed_ms`` every tick and the calculator keeps the value frozen
while a pause is open.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone

from worktimer.engine.duration import format_hms, live_elapsed_ms
from worktimer.engine.reducer import snapshot_session
from worktimer.models.timer import TimerSnapshot

logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL = 1.0


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LiveTicker:
    """Drives a display callback from (start_time, event_log, end_time).

    ``start()`` schedules at most one pending callback on the running event
    loop; calling it again while active is a no-op. ``stop()`` cancels the
    pending callback synchronously, and nothing fires after it returns.
    The ticker also stops itself once the session is terminal, after
    publishing the final value.
    """

    def __init__(
        self,
        start_time: datetime,
        on_tick: Callable[[str], None],
        event_log: str = "",
        end_time: datetime | None = None,
        interval: float = DEFAULT_TICK_INTERVAL,
        clock: Callable[[], datetime] | None = None,
        formatter: Callable[[int], str] = format_hms,
    ) -> None:
        if interval <= 0:
            raise ValueError("Tick interval must be positive")
        self._start_time = start_time
        self._on_tick = on_tick
        self._interval = interval
        self._clock = clock or _utc_now
        self._formatter = formatter
        self._snapshot = snapshot_session(event_log, end_time)
        self._loop: asyncio.AbstractEventLoop | None = None
        self._handle: asyncio.TimerHandle | None = None
        self._active = False

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def snapshot(self) -> TimerSnapshot:
        return self._snapshot

    @property
    def elapsed_ms(self) -> int:
        return live_elapsed_ms(self._start_time, self._clock(), self._snapshot)

    def start(self) -> None:
        """Publish immediately and begin ticking. Must run inside a loop."""
        if self._active:
            return
        self._loop = asyncio.get_running_loop()
        self._active = True
        self._publish()
        if self._snapshot.is_terminal:
            self.stop()
            return
        self._schedule()

    def stop(self) -> None:
        """Cancel the pending tick. Safe to call repeatedly."""
        self._active = False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def update(self, event_log: str, end_time: datetime | None = None) -> None:
        """Feed a freshly fetched log. Republishes at once when active."""
        self._snapshot = snapshot_session(event_log, end_time)
        if not self._active:
            return
        self._publish()
        if self._snapshot.is_terminal:
            logger.debug("Session reached a terminal state, stopping ticker")
            self.stop()

    def _schedule(self) -> None:
        assert self._loop is not None
        self._handle = self._loop.call_later(self._interval, self._fire)

    def _fire(self) -> None:
        self._handle = None
        if not self._active:
            return
        self._publish()
        if self._snapshot.is_terminal:
            self.stop()
            return
        self._schedule()

    def _publish(self) -> None:
        try:
            self._on_tick(self._formatter(self.elapsed_ms))
        except Exception:
            logger.exception("Live ticker callback failed")
