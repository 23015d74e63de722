"""Tests for the SQLAlchemy story store."""

from datetime import datetime

import pytest
from sqlalchemy import inspect

from story_api.adapters.storage.sqlalchemy_store import SqlAlchemyStoryStore
from story_api.core.errors import StorageAppError


def test_init_schema_is_idempotent(store: SqlAlchemyStoryStore) -> None:
    store.init_schema()
    store.init_schema()

    columns = {c["name"] for c in inspect(store.engine).get_columns("stories")}
    assert columns == {"id", "username", "text", "created_at", "flagged"}


def test_create_story_assigns_increasing_ids(store: SqlAlchemyStoryStore) -> None:
    ids = [store.create_story(username="u", text=f"t{i}", flagged=False) for i in range(3)]
    assert ids == sorted(ids)
    assert len(set(ids)) == 3
    assert ids[0] == 1


def test_created_story_has_timestamp_and_flag(store: SqlAlchemyStoryStore) -> None:
    story_id = store.create_story(username="Al", text="hi there", flagged=False)

    (record,) = store.list_visible(limit=10, offset=0)
    assert record.id == story_id
    assert record.username == "Al"
    assert record.text == "hi there"
    assert record.flagged == 0
    assert isinstance(record.created_at, datetime)


def test_list_visible_excludes_flagged_newest_first(store: SqlAlchemyStoryStore) -> None:
    store.create_story(username="a", text="one", flagged=False)
    store.create_story(username="b", text="two", flagged=True)
    store.create_story(username="c", text="three", flagged=False)

    visible = store.list_visible(limit=10, offset=0)

    assert [r.text for r in visible] == ["three", "one"]
    assert all(r.flagged == 0 for r in visible)


def test_list_visible_applies_limit_and_offset(store: SqlAlchemyStoryStore) -> None:
    for i in range(5):
        store.create_story(username="u", text=f"s{i}", flagged=False)

    assert [r.id for r in store.list_visible(limit=2, offset=0)] == [5, 4]
    assert [r.id for r in store.list_visible(limit=2, offset=2)] == [3, 2]
    assert [r.id for r in store.list_visible(limit=2, offset=4)] == [1]


def test_list_flagged_returns_only_flagged_unbounded(store: SqlAlchemyStoryStore) -> None:
    for i in range(60):
        store.create_story(username="u", text=f"bad {i}", flagged=True)
    store.create_story(username="u", text="fine", flagged=False)

    flagged = store.list_flagged()

    assert len(flagged) == 60
    assert all(r.flagged == 1 for r in flagged)
    assert [r.id for r in flagged] == sorted((r.id for r in flagged), reverse=True)


def test_ids_are_not_reused_across_store_instances(database_url: str) -> None:
    first = SqlAlchemyStoryStore(database_url)
    first.init_schema()
    first_id = first.create_story(username="u", text="one", flagged=False)
    first.dispose()

    second = SqlAlchemyStoryStore(database_url)
    second.init_schema()
    assert second.create_story(username="u", text="two", flagged=False) > first_id
    second.dispose()


def test_in_memory_url_shares_one_connection() -> None:
    memory_store = SqlAlchemyStoryStore("sqlite://")
    memory_store.init_schema()
    memory_store.create_story(username="u", text="kept", flagged=False)

    assert [r.text for r in memory_store.list_visible(limit=5, offset=0)] == ["kept"]


def test_missing_table_raises_storage_error(database_url: str) -> None:
    bare_store = SqlAlchemyStoryStore(database_url)

    with pytest.raises(StorageAppError) as exc_info:
        bare_store.create_story(username="u", text="t", flagged=False)

    assert exc_info.value.code == "storage_error"
    assert exc_info.value.message == "Server error"
    assert exc_info.value.details == {"operation": "create_story", "error_type": "OperationalError"}
