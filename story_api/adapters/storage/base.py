"""Story store interface.

Services depend on this abstraction so the SQL backend can be swapped (or
replaced by a fake in tests) without touching request handling.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class StoryRecord:
    """A persisted story, detached from any database session."""

    id: int
    username: str
    text: str
    created_at: datetime
    flagged: int


class AbstractStoryStore(ABC):
    """Append-only store of stories.

    Rows are created once and never updated or deleted.
    """

    @abstractmethod
    def init_schema(self) -> None:
        """Create the backing table if it does not exist yet."""

    @abstractmethod
    def create_story(self, *, username: str, text: str, flagged: bool) -> int:
        """Insert a story and return its newly assigned id.

        Raises:
            StorageAppError: If the backend is unavailable.
        """

    @abstractmethod
    def list_visible(self, *, limit: int, offset: int) -> list[StoryRecord]:
        """Unflagged stories, newest first, skipping ``offset``, at most ``limit``."""

    @abstractmethod
    def list_flagged(self) -> list[StoryRecord]:
        """All flagged stories, newest first."""

    def dispose(self) -> None:
        """Release backend resources. Optional for implementations."""
