from __future__ import annotations

import json
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, decode_json_column
from .base import Document, ObservableStore


def _escape_like(prefix: str) -> str:
    return prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class MySQLDocumentStore(ObservableStore):
    """Remote store backed by the ``documents`` table.

    MySQL has no change feed, so subscribers only hear about writes made
    through this instance.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        super().__init__()
        self._conn_factory = conn_factory

    def get(self, key: str) -> Optional[Document]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT body FROM documents WHERE doc_key=%s", (key,))
            r = cur.fetchone()
            if not r:
                return None
            return decode_json_column(r["body"])

    def set(self, key: str, document: Document) -> None:
        body = json.dumps(document, ensure_ascii=False, sort_keys=True)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO documents(doc_key, body)
                VALUES(%s, %s)
                ON DUPLICATE KEY UPDATE body=VALUES(body)
                """,
                (key, body),
            )
        self._notify(key, json.loads(body))

    def delete(self, key: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM documents WHERE doc_key=%s", (key,))
            deleted = cur.rowcount > 0
        if deleted:
            self._notify(key, None)
        return deleted

    def keys(self, prefix: str = "") -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT doc_key
                FROM documents
                WHERE doc_key LIKE %s
                ORDER BY doc_key
                """,
                (_escape_like(prefix) + "%",),
            )
            return [str(r["doc_key"]) for r in cur.fetchall()]

    def load_prefix(self, prefix: str) -> dict[str, Document]:
        """Fetch every document under ``prefix`` in one round trip."""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT doc_key, body
                FROM documents
                WHERE doc_key LIKE %s
                ORDER BY doc_key
                """,
                (_escape_like(prefix) + "%",),
            )
            return {str(r["doc_key"]): decode_json_column(r["body"]) for r in cur.fetchall()}
