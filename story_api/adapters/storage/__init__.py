"""Story persistence adapters."""

from story_api.adapters.storage.base import AbstractStoryStore, StoryRecord
from story_api.adapters.storage.sqlalchemy_store import SqlAlchemyStoryStore

__all__ = ["AbstractStoryStore", "SqlAlchemyStoryStore", "StoryRecord"]
