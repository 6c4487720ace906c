from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .common.events import EventEmitter
from .core.constants import DEFAULT_WRITE_WORKERS
from .core.enums import RatePolicy, StorageBackend
from .core.exceptions import ValidationError
from .database.connection import DBConfig, DatabaseConnection
from .payroll.service import WageReportService
from .places.service import PlaceService
from .places.store_repository import StorePlaceRepository
from .records.service import RecordService
from .records.store_repository import StoreRecordRepository
from .storage.base import KeyValueStore
from .storage.file_store import JsonFileStore
from .storage.memory_store import MemoryStore
from .storage.mysql_store import MySQLDocumentStore
from .sync.notifications import NotificationInbox
from .sync.write_behind import WriteBehindStore


@dataclass(frozen=True)
class Container:
    backend: KeyValueStore
    store: WriteBehindStore
    emitter: EventEmitter
    notifications: NotificationInbox

    places_repo: StorePlaceRepository
    records_repo: StoreRecordRepository

    place_service: PlaceService
    record_service: RecordService
    report_service: WageReportService

    def close(self) -> None:
        self.notifications.close()
        self.store.close()


def build_backend(
    storage_backend: str | StorageBackend,
    *,
    data_file: Optional[str | Path] = None,
    db_config: Optional[dict] = None,
) -> KeyValueStore:
    try:
        kind = StorageBackend(str(getattr(storage_backend, "value", storage_backend)).lower())
    except ValueError:
        raise ValidationError(f"Unknown storage backend: {storage_backend!r}")

    if kind == StorageBackend.MEMORY:
        return MemoryStore()
    if kind == StorageBackend.FILE:
        if not data_file:
            raise ValidationError("DATA_FILE is required for the file backend")
        return JsonFileStore(data_file)

    if not db_config:
        raise ValidationError("DB_CONFIG is required for the mysql backend")
    return MySQLDocumentStore(DatabaseConnection.get_instance(DBConfig.from_dict(db_config)))


def build_container(
    *,
    storage_backend: str | StorageBackend = StorageBackend.MEMORY,
    data_file: Optional[str | Path] = None,
    db_config: Optional[dict] = None,
    rate_policy: str | RatePolicy = RatePolicy.LIVE,
    write_workers: int = DEFAULT_WRITE_WORKERS,
    backend: Optional[KeyValueStore] = None,
) -> Container:
    backend = backend or build_backend(storage_backend, data_file=data_file, db_config=db_config)
    try:
        policy = RatePolicy(str(getattr(rate_policy, "value", rate_policy)).lower())
    except ValueError:
        raise ValidationError(f"Unknown rate policy: {rate_policy!r}")

    emitter = EventEmitter()
    store = WriteBehindStore(backend, emitter=emitter, max_workers=write_workers)
    notifications = NotificationInbox(emitter)

    places_repo = StorePlaceRepository(store)
    records_repo = StoreRecordRepository(store)

    place_service = PlaceService(places_repo, records_repo)
    record_service = RecordService(records_repo, places_repo, rate_policy=policy)
    report_service = WageReportService(places_repo, records_repo, rate_policy=policy)

    return Container(
        backend=backend,
        store=store,
        emitter=emitter,
        notifications=notifications,
        places_repo=places_repo,
        records_repo=records_repo,
        place_service=place_service,
        record_service=record_service,
        report_service=report_service,
    )
