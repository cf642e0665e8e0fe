"""Subject status side channel: tasks and subtasks collections."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.errors import PyMongoError

from worktimer.errors import StorageError
from worktimer.models.session import SubjectKind

logger = logging.getLogger(__name__)


class SubjectRepo:
    """Writes the status field of the task or subtask being timed.

    Subjects are owned by the surrounding CRUD layer; this repo only
    touches ``status`` and ``updated_at``.
    """

    COLLECTIONS = {
        SubjectKind.TASK: "tasks",
        SubjectKind.SUBTASK: "subtasks",
    }

    def __init__(self, db) -> None:
        self._db = db

    @staticmethod
    def _id_filter(subject_id: str) -> dict:
        # subjects created outside this tool may use plain string ids
        try:
            return {"_id": ObjectId(subject_id)}
        except (InvalidId, TypeError):
            return {"_id": subject_id}

    async def set_status(self, subject_id: str, subject_kind: SubjectKind, status: str) -> bool:
        """Set a subject's status. Returns False when the subject is unknown."""
        col = self._db[self.COLLECTIONS[subject_kind]]
        try:
            result = await col.update_one(
                self._id_filter(subject_id),
                {"$set": {"status": status, "updated_at": datetime.now(timezone.utc)}},
            )
        except PyMongoError as e:
            logger.error("Failed to set %s %s status: %s", subject_kind.value, subject_id, e)
            raise StorageError(f"Failed to update {subject_kind.value} {subject_id}: {e}") from e
        if result.matched_count == 0:
            logger.warning("No %s found with id %s", subject_kind.value, subject_id)
            return False
        logger.info("Set %s %s status to %r", subject_kind.value, subject_id, status)
        return True
