"""worktimer - work session timer with a text event log."""

__version__ = "0.1.0"
