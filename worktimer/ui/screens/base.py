"""Base screen with context and timer settings access."""

from __future__ import annotations

from typing import TYPE_CHECKING

from textual.screen import Screen

from worktimer.config import TimerConfig

if TYPE_CHECKING:
    from worktimer.context import AppContext
    from worktimer.ui.app import WorkTimerApp


class BaseScreen(Screen):
    """Screens reach the app context and timer settings through here.

    The app keeps ``ctx`` as None when MongoDB was unreachable at startup,
    so screens must render without one.
    """

    @property
    def ctx(self) -> AppContext | None:
        if hasattr(self.app, "ctx"):
            app: WorkTimerApp = self.app  # type: ignore
            return app.ctx
        return None

    def has_context(self) -> bool:
        return self.ctx is not None

    @property
    def timer_config(self) -> TimerConfig:
        """Configured tick/refresh cadence, or the defaults when disconnected."""
        ctx = self.ctx
        return ctx.config.timer if ctx is not None else TimerConfig()
