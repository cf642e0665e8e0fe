"""CLI handler for launching the TUI dashboard."""

from __future__ import annotations

import click


@click.command("dashboard")
def dashboard_command():
    """Launch the TUI timer board."""
    from worktimer.ui.app import WorkTimerApp

    app = WorkTimerApp()
    app.run()
