"""Work session domain model."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum


class SubjectKind(str, Enum):
    TASK = "task"
    SUBTASK = "subtask"


def _as_utc(value: datetime | None) -> datetime | None:
    """MongoDB hands back naive UTC datetimes unless the client is tz-aware."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class Session:
    """One timed work interval against a task or subtask.

    Pause/resume/stop history lives only in ``event_log``; there are no
    structured pause columns. ``end_time`` present means the session is
    terminal.
    """

    subject_id: str
    subject_kind: SubjectKind
    start_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    subject_name: str = ""
    end_time: datetime | None = None
    event_log: str = ""
    duration_minutes: int | None = None
    comment: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: str | None = None

    def __post_init__(self) -> None:
        if not self.subject_id:
            raise ValueError("Session must have a subject_id")

    @property
    def is_terminal(self) -> bool:
        return self.end_time is not None

    def with_id(self, session_id: str) -> Session:
        """Return a copy carrying a store-assigned id."""
        return replace(self, id=session_id)

    def to_doc(self) -> dict:
        doc: dict = {
            "subject_id": self.subject_id,
            "subject_kind": self.subject_kind.value,
            "subject_name": self.subject_name,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "event_log": self.event_log,
            "duration_minutes": self.duration_minutes,
            "comment": self.comment,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if self.id:
            doc["_id"] = self.id
        return doc

    @classmethod
    def from_doc(cls, doc: dict) -> Session:
        now = datetime.now(timezone.utc)
        return cls(
            id=str(doc["_id"]),
            subject_id=doc["subject_id"],
            subject_kind=SubjectKind(doc.get("subject_kind", SubjectKind.TASK.value)),
            subject_name=doc.get("subject_name", ""),
            start_time=_as_utc(doc["start_time"]),
            end_time=_as_utc(doc.get("end_time")),
            event_log=doc.get("event_log") or "",
            duration_minutes=doc.get("duration_minutes"),
            comment=doc.get("comment") or "",
            created_at=_as_utc(doc.get("created_at")) or now,
            updated_at=_as_utc(doc.get("updated_at")) or now,
        )
