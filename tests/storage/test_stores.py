from __future__ import annotations

import json

import pytest

from src.site_ledger.site_ledger.storage.base import is_direct_child, join_key, matches_prefix
from src.site_ledger.site_ledger.storage.file_store import JsonFileStore
from src.site_ledger.site_ledger.storage.memory_store import MemoryStore


@pytest.fixture(params=["memory", "file"])
def any_store(request, tmp_path):
    if request.param == "memory":
        return MemoryStore()
    return JsonFileStore(tmp_path / "data.json")


def test_join_key_trims_slashes_and_blanks():
    assert join_key("users", "/u1/", "", "places") == "users/u1/places"


def test_matches_prefix_is_segment_aware():
    assert matches_prefix("users/u1/places/p1", "users/u1/places/p1")
    assert matches_prefix("users/u1/places/p1", "users/u1/places/p1/records/r1")
    assert not matches_prefix("users/u1/places/p1", "users/u1/places/p10")
    assert matches_prefix("users/u1/places/", "users/u1/places/p10")
    assert matches_prefix("", "anything")


def test_is_direct_child():
    assert is_direct_child("users/u1/places/", "users/u1/places/p1")
    assert is_direct_child("users/u1/places", "users/u1/places/p1")
    assert not is_direct_child("users/u1/places/", "users/u1/places/p1/records/r1")
    assert not is_direct_child("users/u1/places/", "users/u2/places/p1")


def test_set_get_delete(any_store):
    any_store.set("users/u1/places/p1", {"name": "A"})

    assert any_store.get("users/u1/places/p1") == {"name": "A"}
    assert any_store.keys("users/u1/") == ["users/u1/places/p1"]
    assert any_store.delete("users/u1/places/p1") is True
    assert any_store.get("users/u1/places/p1") is None
    assert any_store.delete("users/u1/places/p1") is False


def test_returned_documents_are_copies(any_store):
    doc = {"name": "A", "costs": [1]}
    any_store.set("k", doc)
    doc["costs"].append(2)

    fetched = any_store.get("k")
    fetched["name"] = "changed"

    assert any_store.get("k") == {"name": "A", "costs": [1]}


def test_subscribers_hear_changes_under_prefix(any_store):
    seen = []
    sub = any_store.subscribe("users/u1/places/p1", lambda key, doc: seen.append((key, doc)))

    any_store.set("users/u1/places/p1", {"name": "A"})
    any_store.set("users/u1/places/p1/records/r1", {"workers": 2})
    any_store.set("users/u1/places/p10", {"name": "other"})
    any_store.delete("users/u1/places/p1/records/r1")

    assert seen == [
        ("users/u1/places/p1", {"name": "A"}),
        ("users/u1/places/p1/records/r1", {"workers": 2}),
        ("users/u1/places/p1/records/r1", None),
    ]

    sub.unsubscribe()
    any_store.set("users/u1/places/p1", {"name": "B"})
    assert len(seen) == 3
    assert any_store.subscriber_count() == 0


def test_broken_subscriber_does_not_block_others(any_store):
    seen = []

    def boom(key, doc):
        raise RuntimeError("listener bug")

    any_store.subscribe("", boom)
    any_store.subscribe("", lambda key, doc: seen.append(key))

    any_store.set("k", {})

    assert seen == ["k"]


def test_subscription_as_context_manager(any_store):
    seen = []
    with any_store.subscribe("", lambda key, doc: seen.append(key)) as sub:
        any_store.set("a", {})
    any_store.set("b", {})

    assert seen == ["a"]
    assert not sub.active


def test_file_store_survives_reload(tmp_path):
    path = tmp_path / "nested" / "data.json"
    JsonFileStore(path).set("users/u1/places/p1", {"name": "Block A", "workerRate": 1000})

    reloaded = JsonFileStore(path)

    assert reloaded.get("users/u1/places/p1") == {"name": "Block A", "workerRate": 1000}
    assert json.loads(path.read_text(encoding="utf-8"))["users/u1/places/p1"]["name"] == "Block A"


def test_file_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "data.json"
    path.write_text("{not json", encoding="utf-8")

    store = JsonFileStore(path)

    assert store.keys() == []
    store.set("k", {"v": 1})
    assert JsonFileStore(path).get("k") == {"v": 1}


def test_memory_store_initial_contents_are_copied():
    initial = {"k": {"v": 1}}
    store = MemoryStore(initial)
    initial["k"]["v"] = 2

    assert store.snapshot() == {"k": {"v": 1}}
