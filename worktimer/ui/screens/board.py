"""Timer board screen: every open session with a live counter."""

from __future__ import annotations

import logging

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import Footer, ListItem, ListView, Static

from worktimer.engine.reducer import snapshot_session
from worktimer.errors import TimerError
from worktimer.models.session import Session
from worktimer.services.board_service import SessionView
from worktimer.ui.screens.base import BaseScreen
from worktimer.ui.screens.stop_dialog import StopDialog
from worktimer.ui.widgets.header_bar import HeaderBar
from worktimer.ui.widgets.live_timer import LiveTimer

logger = logging.getLogger(__name__)


def _subject_label(session: Session) -> str:
    return f"{session.subject_kind.value}: {session.subject_name or session.subject_id}"


class SessionRow(ListItem):
    """One open session: subject label plus its live counter."""

    DEFAULT_CSS = """
    SessionRow Horizontal {
        height: 1;
    }
    SessionRow .row-label {
        width: 1fr;
    }
    """

    def __init__(self, view: SessionView, tick_interval: float) -> None:
        super().__init__()
        self.session = view.session
        self._tick_interval = tick_interval

    def compose(self) -> ComposeResult:
        with Horizontal():
            yield LiveTimer(self.session, tick_interval=self._tick_interval)
            yield Static(_subject_label(self.session), classes="row-label")

    def update_view(self, view: SessionView) -> None:
        self.session = view.session
        self.query_one(LiveTimer).update_session(view.session)


class BoardScreen(BaseScreen):
    """Polls the board service and keeps one row per open session."""

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("p", "pause_resume", "Pause/Resume"),
        ("x", "stop", "Stop"),
        ("r", "refresh", "Refresh"),
    ]

    def compose(self) -> ComposeResult:
        yield HeaderBar(id="header-bar")
        yield Static("", id="board-message")
        yield ListView(id="board-list")
        yield Footer()

    def on_mount(self) -> None:
        """Load once and then refetch on the configured cadence."""
        self.call_later(self._refresh_board)
        self.set_interval(self.timer_config.refresh_interval, self._refresh_board)

    def _rows(self) -> dict[str, SessionRow]:
        return {row.session.id: row for row in self.query(SessionRow)}

    def _selected(self) -> SessionRow | None:
        child = self.query_one("#board-list", ListView).highlighted_child
        return child if isinstance(child, SessionRow) else None

    async def _refresh_board(self) -> None:
        message = self.query_one("#board-message", Static)
        if not self.has_context():
            message.update("Not connected to MongoDB.")
            return

        try:
            board = await self.ctx.board_service.load_board()
        except TimerError:
            logger.exception("Error refreshing timer board")
            message.update("Error loading timers. Check logs for details.")
            return

        self.query_one(HeaderBar).update_counts(board.running_count, board.paused_count)
        message.update("" if board.views else "No timers running.")

        list_view = self.query_one("#board-list", ListView)
        rows = self._rows()
        current_ids = {v.session.id for v in board.views}
        for session_id, row in rows.items():
            if session_id not in current_ids:
                await row.remove()
        for view in board.views:
            row = rows.get(view.session.id)
            if row is None:
                await list_view.append(SessionRow(view, self.timer_config.tick_interval))
            else:
                row.update_view(view)

    async def action_refresh(self) -> None:
        await self._refresh_board()

    async def action_pause_resume(self) -> None:
        row = self._selected()
        if row is None or not self.has_context():
            return
        try:
            session = await self.ctx.timer_service.toggle_pause(row.session.id)
            status = snapshot_session(session.event_log, session.end_time).status
            self.notify(f"Timer {status.value}")
        except TimerError as e:
            self.notify(str(e), severity="error")
        await self._refresh_board()

    def action_stop(self) -> None:
        row = self._selected()
        if row is None or not self.has_context():
            return
        session_id = row.session.id

        async def _on_comment(comment: str | None) -> None:
            if not comment:
                return
            try:
                session = await self.ctx.timer_service.stop(session_id, comment)
                self.notify(f"Timer stopped: {session.duration_minutes} minute(s) logged")
            except TimerError as e:
                self.notify(str(e), severity="error")
            await self._refresh_board()

        self.app.push_screen(StopDialog(_subject_label(row.session)), _on_comment)

    def action_quit(self) -> None:
        self.app.exit()
