from __future__ import annotations

import json

import pytest

from src.site_ledger.site_ledger.database.mysql_base import decode_json_column
from src.site_ledger.site_ledger.storage.mysql_store import MySQLDocumentStore


class FakeCursor:
    def __init__(self, db: "FakeDB"):
        self._db = db
        self._rows = []
        self.rowcount = 0

    def execute(self, sql: str, params=()):
        sql = " ".join(sql.split())
        self._db.statements.append(sql)
        if self._db.fail:
            raise RuntimeError("connection lost")

        if sql.startswith("SELECT body FROM documents WHERE doc_key=%s"):
            body = self._db.rows.get(params[0])
            self._rows = [{"body": body}] if body is not None else []
        elif sql.startswith("INSERT INTO documents"):
            key, body = params
            self._db.rows[key] = body
            self.rowcount = 1
        elif sql.startswith("DELETE FROM documents"):
            self.rowcount = 1 if self._db.rows.pop(params[0], None) is not None else 0
        elif sql.startswith("SELECT doc_key"):
            like = params[0]
            assert like.endswith("%")
            prefix = like[:-1].replace("\\_", "_").replace("\\%", "%").replace("\\\\", "\\")
            keys = sorted(k for k in self._db.rows if k.startswith(prefix))
            self._rows = [{"doc_key": k, "body": self._db.rows[k]} for k in keys]
        else:
            raise AssertionError(f"unexpected SQL: {sql}")

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return list(self._rows)

    def close(self):
        pass


class FakeConnection:
    def __init__(self, db: "FakeDB"):
        self._db = db

    def cursor(self, dictionary: bool = False):
        assert dictionary
        return FakeCursor(self._db)

    def commit(self):
        self._db.commits += 1

    def rollback(self):
        self._db.rollbacks += 1

    def close(self):
        self._db.closed += 1


class FakeDB:
    def __init__(self):
        self.rows: dict[str, str] = {}
        self.statements: list[str] = []
        self.commits = 0
        self.rollbacks = 0
        self.closed = 0
        self.fail = False

    def connect(self):
        return FakeConnection(self)


@pytest.fixture
def db():
    return FakeDB()


def test_set_and_get_round_trip_through_json_column(db):
    store = MySQLDocumentStore(db)

    store.set("users/u1/places/p1", {"name": "Block A", "workerRate": 1000})

    assert json.loads(db.rows["users/u1/places/p1"]) == {"name": "Block A", "workerRate": 1000}
    assert store.get("users/u1/places/p1") == {"name": "Block A", "workerRate": 1000}
    assert store.get("missing") is None
    assert db.commits >= 1
    assert db.closed == db.commits


def test_delete_reports_whether_row_existed(db):
    store = MySQLDocumentStore(db)
    store.set("k", {"v": 1})

    assert store.delete("k") is True
    assert store.delete("k") is False


def test_keys_escape_like_wildcards(db):
    store = MySQLDocumentStore(db)
    store.set("users/u_1/places/p1", {})
    store.set("users/uX1/places/p2", {})

    assert store.keys("users/u_1/") == ["users/u_1/places/p1"]


def test_load_prefix_fetches_documents(db):
    store = MySQLDocumentStore(db)
    store.set("users/u1/places/p1", {"name": "A"})
    store.set("users/u1/places/p1/records/r1", {"workers": 3})
    store.set("users/u2/places/p9", {"name": "Z"})

    docs = store.load_prefix("users/u1/")

    assert docs == {
        "users/u1/places/p1": {"name": "A"},
        "users/u1/places/p1/records/r1": {"workers": 3},
    }


def test_subscribers_hear_local_writes(db):
    store = MySQLDocumentStore(db)
    seen = []
    store.subscribe("users/u1/", lambda key, doc: seen.append((key, doc)))

    store.set("users/u1/places/p1", {"name": "A"})
    store.delete("users/u1/places/p1")

    assert seen == [("users/u1/places/p1", {"name": "A"}), ("users/u1/places/p1", None)]


def test_failed_statement_rolls_back_and_raises(db):
    store = MySQLDocumentStore(db)
    db.fail = True

    with pytest.raises(RuntimeError):
        store.set("k", {})

    assert db.rollbacks == 1
    assert db.closed == 1


@pytest.mark.parametrize(
    "value, expected",
    [
        ('{"a": 1}', {"a": 1}),
        (b'{"a": 1}', {"a": 1}),
        ({"a": 1}, {"a": 1}),
        (None, None),
    ],
)
def test_decode_json_column(value, expected):
    assert decode_json_column(value) == expected


def test_decode_json_column_rejects_non_object():
    with pytest.raises(ValueError):
        decode_json_column("[1, 2]")
