from __future__ import annotations

from datetime import datetime

import pytest

from src.site_ledger.site_ledger.places.store_repository import StorePlaceRepository
from src.site_ledger.site_ledger.records.store_repository import StoreRecordRepository
from src.site_ledger.site_ledger.storage.memory_store import MemoryStore
from src.site_ledger.site_ledger.users.model import SessionUser


@pytest.fixture
def fixed_now() -> datetime:
    # Wednesday of ISO week 2025-W10 (Mon 3 Mar .. Sun 9 Mar)
    return datetime(2025, 3, 5, 9, 30, 0)


@pytest.fixture
def session() -> SessionUser:
    return SessionUser(owner_id="owner-1", display_name="Ravi")


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def places_repo(store) -> StorePlaceRepository:
    return StorePlaceRepository(store)


@pytest.fixture
def records_repo(store) -> StoreRecordRepository:
    return StoreRecordRepository(store)
