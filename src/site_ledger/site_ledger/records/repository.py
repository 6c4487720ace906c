from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import DailyRecord


class RecordRepository(Protocol):
    def list_for_place(self, *, owner_id: str, place_id: str) -> Sequence[DailyRecord]:
        raise NotImplementedError

    def list_in_range(self, *, owner_id: str, place_id: str, start: date, end: date) -> Sequence[DailyRecord]:
        """Records with ``start <= work_date <= end``."""

        raise NotImplementedError

    def get_by_id(self, *, owner_id: str, place_id: str, record_id: str) -> Optional[DailyRecord]:
        raise NotImplementedError

    def get_for_place_and_date(self, *, owner_id: str, place_id: str, work_date: date) -> Optional[DailyRecord]:
        raise NotImplementedError

    def save(self, *, owner_id: str, record: DailyRecord) -> None:
        """Create or overwrite a record document (keyed by record_id)."""

        raise NotImplementedError

    def delete(self, *, owner_id: str, place_id: str, record_id: str) -> bool:
        raise NotImplementedError

    def delete_all_for_place(self, *, owner_id: str, place_id: str) -> int:
        raise NotImplementedError
