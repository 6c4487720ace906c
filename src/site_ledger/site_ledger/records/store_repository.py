from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import format_iso_date, parse_timestamp
from ..common.validators import to_number
from ..places.model import Rates
from ..places.store_repository import place_key
from ..storage.base import KeyValueStore, is_direct_child, join_key
from .model import AdditionalCost, DailyRecord
from .repository import RecordRepository


def records_prefix(owner_id: str, place_id: str) -> str:
    return join_key(place_key(owner_id, place_id), "records") + "/"


def record_key(owner_id: str, place_id: str, record_id: str) -> str:
    return records_prefix(owner_id, place_id) + record_id


def _from_doc(place_id: str, record_id: str, doc: dict) -> Optional[DailyRecord]:
    try:
        work_date = date.fromisoformat(str(doc.get("date") or ""))
    except ValueError:
        return None

    costs = tuple(
        AdditionalCost(description=str(c.get("description") or ""), amount=to_number(c.get("amount")))
        for c in (doc.get("additionalCosts") or [])
        if isinstance(c, dict)
    )
    snapshot = doc.get("ratesSnapshot")
    rates = None
    if isinstance(snapshot, dict):
        rates = Rates(
            worker_rate=to_number(snapshot.get("workerRate")),
            labourer_rate=to_number(snapshot.get("labourerRate")),
        )

    return DailyRecord(
        record_id=record_id,
        place_id=place_id,
        work_date=work_date,
        workers=int(to_number(doc.get("workers"))),
        labourers=int(to_number(doc.get("labourers"))),
        additional_costs=costs,
        notes=doc.get("notes") or None,
        rates_snapshot=rates,
        created_at=parse_timestamp(doc.get("createdAt")),
        updated_at=parse_timestamp(doc.get("updatedAt")),
    )


def _to_doc(record: DailyRecord) -> dict:
    doc = {
        "date": format_iso_date(record.work_date),
        "workers": record.workers,
        "labourers": record.labourers,
        "additionalCosts": [{"description": c.description, "amount": c.amount} for c in record.additional_costs],
        "notes": record.notes,
        "createdAt": record.created_at.isoformat() if record.created_at else None,
        "updatedAt": record.updated_at.isoformat() if record.updated_at else None,
    }
    if record.rates_snapshot is not None:
        doc["ratesSnapshot"] = {
            "workerRate": record.rates_snapshot.worker_rate,
            "labourerRate": record.rates_snapshot.labourer_rate,
        }
    return doc


class StoreRecordRepository(RecordRepository):
    def __init__(self, store: KeyValueStore):
        self._store = store

    def list_for_place(self, *, owner_id: str, place_id: str) -> Sequence[DailyRecord]:
        prefix = records_prefix(owner_id, place_id)
        records = []
        for key in self._store.keys(prefix):
            if not is_direct_child(prefix, key):
                continue
            doc = self._store.get(key)
            if doc is None:
                continue
            record = _from_doc(place_id, key[len(prefix):], doc)
            if record is not None:
                records.append(record)
        records.sort(key=lambda r: r.work_date, reverse=True)
        return records

    def list_in_range(self, *, owner_id: str, place_id: str, start: date, end: date) -> Sequence[DailyRecord]:
        return [
            r
            for r in self.list_for_place(owner_id=owner_id, place_id=place_id)
            if start <= r.work_date <= end
        ]

    def get_by_id(self, *, owner_id: str, place_id: str, record_id: str) -> Optional[DailyRecord]:
        doc = self._store.get(record_key(owner_id, place_id, record_id))
        if doc is None:
            return None
        return _from_doc(place_id, record_id, doc)

    def get_for_place_and_date(self, *, owner_id: str, place_id: str, work_date: date) -> Optional[DailyRecord]:
        for r in self.list_for_place(owner_id=owner_id, place_id=place_id):
            if r.work_date == work_date:
                return r
        return None

    def save(self, *, owner_id: str, record: DailyRecord) -> None:
        self._store.set(record_key(owner_id, record.place_id, record.record_id), _to_doc(record))

    def delete(self, *, owner_id: str, place_id: str, record_id: str) -> bool:
        return self._store.delete(record_key(owner_id, place_id, record_id))

    def delete_all_for_place(self, *, owner_id: str, place_id: str) -> int:
        prefix = records_prefix(owner_id, place_id)
        deleted = 0
        for key in list(self._store.keys(prefix)):
            if self._store.delete(key):
                deleted += 1
        return deleted
