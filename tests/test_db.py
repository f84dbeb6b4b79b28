"""Tests for database initialization and the key-value store."""
import pytest

from study_planner.db import get_connection, init_db
from study_planner.errors import StoreError
from study_planner.store import delete_value, get_value, list_keys, list_values, set_value


def test_init_db_creates_store_table(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    assert "kv_store" in tables
    conn.close()


def test_init_db_is_idempotent(tmp_db):
    init_db(tmp_db)
    init_db(tmp_db)  # should not raise
    set_value(tmp_db, "k", 1)
    assert get_value(tmp_db, "k") == 1


def test_init_db_creates_parent_directory(tmp_path):
    db_path = str(tmp_path / "nested" / "dir" / "planner.db")
    init_db(db_path)
    assert (tmp_path / "nested" / "dir" / "planner.db").exists()


def test_set_and_get_round_trip(tmp_db):
    init_db(tmp_db)
    set_value(tmp_db, "plan:p1", {"title": "Algebra", "units": [1, 2]})
    assert get_value(tmp_db, "plan:p1") == {"title": "Algebra", "units": [1, 2]}


def test_set_overwrites(tmp_db):
    init_db(tmp_db)
    set_value(tmp_db, "points:u1", {"points": 1})
    set_value(tmp_db, "points:u1", {"points": 2})
    assert get_value(tmp_db, "points:u1") == {"points": 2}


def test_missing_key_returns_none(tmp_db):
    init_db(tmp_db)
    assert get_value(tmp_db, "plan:nope") is None


def test_delete_value(tmp_db):
    init_db(tmp_db)
    set_value(tmp_db, "plan:p1", {})
    delete_value(tmp_db, "plan:p1")
    assert get_value(tmp_db, "plan:p1") is None


def test_prefix_listing_is_ordered_and_scoped(tmp_db):
    init_db(tmp_db)
    set_value(tmp_db, "plan:b", 2)
    set_value(tmp_db, "plan:a", 1)
    set_value(tmp_db, "planet:x", 3)
    set_value(tmp_db, "session:a", 4)
    assert list_keys(tmp_db, "plan:") == ["plan:a", "plan:b"]
    assert list_values(tmp_db, "plan:") == [1, 2]


def test_uninitialized_store_raises_store_error(tmp_db):
    with pytest.raises(StoreError):
        get_value(tmp_db, "plan:p1")
