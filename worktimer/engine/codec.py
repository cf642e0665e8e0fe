"""Event log codec: TimerEvent <-> newline-delimited text blob.

All knowledge of the text format lives here. Each event is one line of
the form ``Timer <verb> at <ISO-8601>``. Decoding scans the whole blob for
``<verb> at <timestamp>`` markers in position order, so free text around
a marker is ignored. The creation note line is never scanned, since it
carries a user-supplied subject name.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from datetime import datetime, timezone

from worktimer.models.timer import TimerEvent, TimerEventKind

logger = logging.getLogger(__name__)

LINE_PREFIX = "Timer"
CREATION_PREFIX = f"{LINE_PREFIX} started for"
SEPARATOR = "\n"

_MARKER_RE = re.compile(
    r"\b(paused|resumed|stopped)\s+at\s+"
    r"(\d{4}-\d{2}-\d{2} \d{1,2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:[Zz]|[+-]\d{2}:\d{2})?"
    r"|[^\s,]+)",
    re.IGNORECASE,
)


def format_timestamp(at: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    if at.tzinfo is None:
        at = at.replace(tzinfo=timezone.utc)
    at = at.astimezone(timezone.utc)
    return at.strftime("%Y-%m-%dT%H:%M:%S.") + f"{at.microsecond // 1000:03d}Z"


def parse_timestamp(raw: str) -> datetime | None:
    """Parse an ISO-8601 timestamp, returning None when it is unusable."""
    text = raw.strip().rstrip(".;")
    if ":" not in text:
        # date only
        return None
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_event(event: TimerEvent) -> str:
    """Render one event as its canonical log line."""
    return f"{LINE_PREFIX} {event.kind.value} at {format_timestamp(event.at)}"


def decode(blob: str | None) -> list[TimerEvent]:
    """Decode a log blob into events, in log order.

    Markers whose timestamp does not parse are skipped.
    """
    if not blob:
        return []
    events: list[TimerEvent] = []
    for line in blob.split(SEPARATOR):
        if line.lstrip().lower().startswith(CREATION_PREFIX.lower()):
            continue
        events.extend(_decode_line(line))
    return events


def _decode_line(line: str) -> list[TimerEvent]:
    events: list[TimerEvent] = []
    for match in _MARKER_RE.finditer(line):
        verb, raw_at = match.group(1), match.group(2)
        at = parse_timestamp(raw_at)
        if at is None:
            logger.debug("Skipping unparsable %s timestamp: %r", verb, raw_at)
            continue
        events.append(TimerEvent(kind=TimerEventKind(verb.lower()), at=at))
    return events


def encode(existing_blob: str | None, new_event: TimerEvent) -> str:
    """Append one event line to the blob. Prior content is never touched."""
    line = format_event(new_event)
    if not existing_blob:
        return line
    return f"{existing_blob}{SEPARATOR}{line}"


def encode_all(existing_blob: str | None, events: Iterable[TimerEvent]) -> str:
    """Append several events in order."""
    blob = existing_blob or ""
    for event in events:
        blob = encode(blob, event)
    return blob
