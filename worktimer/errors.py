"""Error taxonomy for timer operations."""

from __future__ import annotations


class TimerError(Exception):
    """Base class for every error raised by the timer engine."""


class ValidationError(TimerError, ValueError):
    """Input rejected before any read or write happened."""


class InvalidTransition(TimerError):
    """Pause/resume/stop requested against an incompatible session state."""

    def __init__(self, session_id: str, status: str, action: str) -> None:
        super().__init__(f"Cannot {action} session {session_id}: timer is {status}")
        self.session_id = session_id
        self.status = status
        self.action = action


class ConflictError(TimerError):
    """An open session already exists for the subject."""

    def __init__(self, subject_id: str, open_session_id: str) -> None:
        super().__init__(
            f"Subject {subject_id} already has an open session: {open_session_id}"
        )
        self.subject_id = subject_id
        self.open_session_id = open_session_id


class NotFoundError(TimerError, LookupError):
    """Session id does not resolve."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class StorageError(TimerError):
    """The underlying store failed to read or write."""
