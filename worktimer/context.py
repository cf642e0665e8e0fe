"""AppContext: wires DB, config, and services together."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from worktimer.config import AppConfig, load_config
from worktimer.infra.db.client import MongoClient

if TYPE_CHECKING:
    from pathlib import Path

    from worktimer.infra.db.sessions import SessionRepo
    from worktimer.infra.db.subjects import SubjectRepo
    from worktimer.services.board_service import BoardService
    from worktimer.services.timer_service import TimerService

logger = logging.getLogger(__name__)


class AppContext:
    """Central wiring for all application dependencies.

    Lazily initializes services on first access. Call `initialize()` to
    set up the database connection and run migrations.
    """

    def __init__(self, config: AppConfig | None = None, config_path: Path | None = None) -> None:
        self.config = config or load_config(config_path)
        self._mongo: MongoClient | None = None
        self._session_repo: SessionRepo | None = None
        self._subject_repo: SubjectRepo | None = None
        self._timer_service: TimerService | None = None
        self._board_service: BoardService | None = None

    async def initialize(self) -> None:
        """Initialize the database connection and run migrations."""
        from worktimer.infra.db.migrations import run_migrations

        self._mongo = MongoClient(
            uri=self.config.mongodb.uri,
            database=self.config.mongodb.database,
        )
        await run_migrations(self._mongo.db)
        logger.info("AppContext initialized")

    async def close(self) -> None:
        """Close all connections."""
        if self._mongo:
            self._mongo.close()
        logger.info("AppContext closed")

    @property
    def mongo(self) -> MongoClient:
        if self._mongo is None:
            raise RuntimeError("AppContext not initialized. Call initialize() first.")
        return self._mongo

    @property
    def session_repo(self) -> SessionRepo:
        if self._session_repo is None:
            from worktimer.infra.db.sessions import SessionRepo

            self._session_repo = SessionRepo(self.mongo.db)
        return self._session_repo

    @property
    def subject_repo(self) -> SubjectRepo:
        if self._subject_repo is None:
            from worktimer.infra.db.subjects import SubjectRepo

            self._subject_repo = SubjectRepo(self.mongo.db)
        return self._subject_repo

    @property
    def timer_service(self) -> TimerService:
        if self._timer_service is None:
            from worktimer.services.timer_service import TimerService

            self._timer_service = TimerService(self.session_repo)
        return self._timer_service

    @property
    def board_service(self) -> BoardService:
        if self._board_service is None:
            from worktimer.services.board_service import BoardService

            self._board_service = BoardService(self.session_repo)
        return self._board_service
