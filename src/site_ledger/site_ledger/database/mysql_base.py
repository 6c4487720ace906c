from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Optional

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Connection + cursor for one unit of work; commits on success, rolls back on error."""

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def decode_json_column(value: Any) -> Optional[dict]:
    """Normalize MySQL JSON values across connector implementations.

    mysql-connector can return a JSON column as:
    - str (pure-Python connector)
    - bytes / bytearray (C extension)
    - dict (already decoded by a converter)
    """

    if value is None:
        return None

    if isinstance(value, dict):
        return value

    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")

    if isinstance(value, str):
        decoded = json.loads(value)
        if not isinstance(decoded, dict):
            raise ValueError(f"Expected a JSON object, got {type(decoded).__name__}")
        return decoded

    raise TypeError(f"Unsupported MySQL JSON value type: {type(value)!r}")
