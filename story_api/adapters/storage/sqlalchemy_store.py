"""SQLAlchemy-backed story store.

Defaults to a local SQLite file. Each operation opens a short-lived session
and issues a single statement; SQLite serializes concurrent writers.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from story_api.adapters.storage.base import AbstractStoryStore, StoryRecord
from story_api.adapters.storage.models import Base, Story
from story_api.core.errors import StorageAppError

logger = logging.getLogger(__name__)

STORAGE_ERROR_MESSAGE = "Server error"


def build_engine(database_url: str) -> Engine:
    """Create an engine, adjusting SQLite connections for the thread pool.

    Sync routes run on worker threads, so SQLite connections must not be
    pinned to the thread that opened them. In-memory databases exist per
    connection and need a single shared one.
    """
    kwargs: dict[str, object] = {}
    connect_args: dict[str, object] = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, connect_args=connect_args, **kwargs)


def _to_record(row: Story) -> StoryRecord:
    return StoryRecord(
        id=row.id,
        username=row.username,
        text=row.text,
        created_at=row.created_at,
        flagged=int(row.flagged),
    )


class SqlAlchemyStoryStore(AbstractStoryStore):
    """Story store over a single ``stories`` table."""

    def __init__(self, database_url: str, *, engine: Engine | None = None) -> None:
        self._engine = engine or build_engine(database_url)
        self._sessionmaker = sessionmaker(
            bind=self._engine, autoflush=False, expire_on_commit=False
        )

    @property
    def engine(self) -> Engine:
        return self._engine

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        """Session scope translating driver failures into StorageAppError."""
        try:
            with self._sessionmaker() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error(
                "storage.error",
                extra={
                    "operation": operation,
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            raise StorageAppError(
                code="storage_error",
                message=STORAGE_ERROR_MESSAGE,
                details={"operation": operation, "error_type": type(exc).__name__},
            ) from exc

    def init_schema(self) -> None:
        try:
            Base.metadata.create_all(self._engine, checkfirst=True)
        except SQLAlchemyError as exc:
            raise StorageAppError(
                code="storage_unavailable",
                message=STORAGE_ERROR_MESSAGE,
                details={"operation": "init_schema", "error_type": type(exc).__name__},
            ) from exc
        logger.info("storage.schema_ready", extra={"table": Story.__tablename__})

    def create_story(self, *, username: str, text: str, flagged: bool) -> int:
        story = Story(username=username, text=text, flagged=1 if flagged else 0)
        with self._session("create_story") as session:
            session.add(story)
            session.commit()
        return int(story.id)

    def list_visible(self, *, limit: int, offset: int) -> list[StoryRecord]:
        stmt = (
            select(Story)
            .where(Story.flagged == 0)
            .order_by(Story.id.desc())
            .limit(limit)
            .offset(offset)
        )
        with self._session("list_visible") as session:
            return [_to_record(row) for row in session.scalars(stmt)]

    def list_flagged(self) -> list[StoryRecord]:
        stmt = select(Story).where(Story.flagged == 1).order_by(Story.id.desc())
        with self._session("list_flagged") as session:
            return [_to_record(row) for row in session.scalars(stmt)]

    def dispose(self) -> None:
        self._engine.dispose()
