"""MongoDB index creation."""

from __future__ import annotations

import logging

import pymongo

logger = logging.getLogger(__name__)


async def run_migrations(db) -> None:
    """Create indexes on startup."""
    logger.info("Running MongoDB migrations...")

    sessions = db["sessions"]
    # open-session lookup per subject (start conflict check)
    await sessions.create_index(
        [
            ("subject_id", pymongo.ASCENDING),
            ("subject_kind", pymongo.ASCENDING),
            ("end_time", pymongo.ASCENDING),
        ]
    )
    # running timers board
    await sessions.create_index(
        [("end_time", pymongo.ASCENDING), ("start_time", pymongo.DESCENDING)]
    )
