"""Session repository - the keyed session store backed by MongoDB."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import pymongo
from bson import ObjectId
from bson.errors import InvalidId
from pymongo.errors import PyMongoError

from worktimer.errors import NotFoundError, StorageError
from worktimer.models.session import Session, SubjectKind

logger = logging.getLogger(__name__)


class SessionRepo:
    """get / update / insert for work sessions, plus the open-session queries."""

    COLLECTION = "sessions"

    def __init__(self, db) -> None:
        self._col = db[self.COLLECTION]

    @staticmethod
    def _object_id(session_id: str) -> ObjectId:
        try:
            return ObjectId(session_id)
        except (InvalidId, TypeError) as e:
            logger.debug("Invalid ObjectId: %s", session_id)
            raise NotFoundError(session_id) from e

    async def insert(self, session: Session) -> Session:
        """Insert a new session. Returns session with assigned id."""
        doc = session.to_doc()
        doc.pop("_id", None)
        try:
            result = await self._col.insert_one(doc)
        except PyMongoError as e:
            logger.error("Failed to insert session for %s: %s", session.subject_id, e)
            raise StorageError(f"Failed to insert session: {e}") from e
        return session.with_id(str(result.inserted_id))

    async def get(self, session_id: str) -> Session:
        """Fetch a session by id. Raises NotFoundError if it does not exist."""
        oid = self._object_id(session_id)
        try:
            doc = await self._col.find_one({"_id": oid})
        except PyMongoError as e:
            logger.error("Failed to read session %s: %s", session_id, e)
            raise StorageError(f"Failed to read session {session_id}: {e}") from e
        if not doc:
            raise NotFoundError(session_id)
        return Session.from_doc(doc)

    async def update(self, session_id: str, fields: dict) -> Session:
        """Apply one ``$set`` with the given fields and return the new state."""
        oid = self._object_id(session_id)
        updates = dict(fields)
        updates["updated_at"] = datetime.now(timezone.utc)
        try:
            doc = await self._col.find_one_and_update(
                {"_id": oid},
                {"$set": updates},
                return_document=True,
            )
        except PyMongoError as e:
            logger.error("Failed to update session %s: %s", session_id, e)
            raise StorageError(f"Failed to update session {session_id}: {e}") from e
        if not doc:
            raise NotFoundError(session_id)
        return Session.from_doc(doc)

    async def find_open_by_subject(
        self, subject_id: str, subject_kind: SubjectKind
    ) -> Session | None:
        """Return the open (no end_time) session for a subject, if any."""
        query = {
            "subject_id": subject_id,
            "subject_kind": subject_kind.value,
            "end_time": None,
        }
        try:
            doc = await self._col.find_one(query, sort=[("start_time", pymongo.DESCENDING)])
        except PyMongoError as e:
            raise StorageError(f"Failed to query open sessions: {e}") from e
        return Session.from_doc(doc) if doc else None

    async def list_open(self) -> list[Session]:
        """List every session that has not been stopped, newest first."""
        try:
            cursor = self._col.find({"end_time": None}).sort("start_time", -1)
            return [Session.from_doc(doc) async for doc in cursor]
        except PyMongoError as e:
            raise StorageError(f"Failed to list open sessions: {e}") from e

    async def list_by_subject(
        self,
        subject_id: str,
        subject_kind: SubjectKind | None = None,
        limit: int = 50,
    ) -> list[Session]:
        """List sessions for a subject, newest first."""
        query: dict = {"subject_id": subject_id}
        if subject_kind:
            query["subject_kind"] = subject_kind.value
        try:
            cursor = self._col.find(query).sort("start_time", -1).limit(limit)
            return [Session.from_doc(doc) async for doc in cursor]
        except PyMongoError as e:
            raise StorageError(f"Failed to list sessions for {subject_id}: {e}") from e
