"""Header bar widget."""

from __future__ import annotations

from textual.widgets import Static


class HeaderBar(Static):
    """Top header bar showing app name and timer counts."""

    def __init__(self, running: int = 0, paused: int = 0, **kwargs) -> None:
        super().__init__(self._render_text(running, paused), **kwargs)

    @staticmethod
    def _render_text(running: int, paused: int) -> str:
        return f"  worktimer{'':>40}[{running} running, {paused} paused]"

    def update_counts(self, running: int, paused: int) -> None:
        self.update(self._render_text(running, paused))
