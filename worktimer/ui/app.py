"""Main Textual TUI application."""

from __future__ import annotations

import logging

from pymongo.errors import PyMongoError
from textual.app import App

from worktimer.ui.screens.board import BoardScreen

logger = logging.getLogger(__name__)


class WorkTimerApp(App):
    """worktimer TUI application."""

    TITLE = "worktimer"

    BINDINGS = [
        ("q", "quit", "Quit"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self.ctx = None  # AppContext, set in on_mount

    async def on_mount(self) -> None:
        """Connect to MongoDB and show the timer board."""
        from worktimer.context import AppContext

        self.ctx = AppContext()
        try:
            await self.ctx.initialize()
        except PyMongoError as e:
            logger.exception("Could not initialize AppContext")
            await self.ctx.close()
            self.ctx = None
            self.notify(f"Cannot reach MongoDB\n({e})", severity="error")

        self.push_screen(BoardScreen())

    async def on_unmount(self) -> None:
        """Close the database connection on exit."""
        if self.ctx:
            await self.ctx.close()

    def action_quit(self) -> None:
        self.exit()
