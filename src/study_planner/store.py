"""Key-value persistence over the kv_store table.

Values are JSON documents. Keys are namespaced strings such as ``plan:<id>``
or ``points:<user_id>``; prefix listing is how callers enumerate a namespace.
"""
import json
import sqlite3
from datetime import datetime

from study_planner.db import get_connection
from study_planner.errors import StoreError


def get_value(db_path: str, key: str):
    try:
        conn = get_connection(db_path)
        try:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
    except sqlite3.Error as e:
        raise StoreError(f"read failed for {key}: {e}") from e
    return json.loads(row["value"]) if row else None


def set_value(db_path: str, key: str, value) -> None:
    payload = json.dumps(value)
    try:
        conn = get_connection(db_path)
        try:
            conn.execute(
                """INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at""",
                (key, payload, datetime.now().isoformat()),
            )
            conn.commit()
        finally:
            conn.close()
    except sqlite3.Error as e:
        raise StoreError(f"write failed for {key}: {e}") from e


def delete_value(db_path: str, key: str) -> None:
    try:
        conn = get_connection(db_path)
        try:
            conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()
    except sqlite3.Error as e:
        raise StoreError(f"delete failed for {key}: {e}") from e


def _prefixed_rows(db_path: str, prefix: str) -> list:
    try:
        conn = get_connection(db_path)
        try:
            return conn.execute(
                "SELECT key, value FROM kv_store WHERE substr(key, 1, ?) = ? ORDER BY key",
                (len(prefix), prefix),
            ).fetchall()
        finally:
            conn.close()
    except sqlite3.Error as e:
        raise StoreError(f"listing failed for prefix {prefix}: {e}") from e


def list_keys(db_path: str, prefix: str) -> list[str]:
    return [row["key"] for row in _prefixed_rows(db_path, prefix)]


def list_values(db_path: str, prefix: str) -> list:
    """All values whose key starts with ``prefix``, in key order."""
    return [json.loads(row["value"]) for row in _prefixed_rows(db_path, prefix)]
