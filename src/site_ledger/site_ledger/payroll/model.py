from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..places.model import Place
from ..records.model import DailyRecord


@dataclass(frozen=True)
class WeeklyBucket:
    """Records of one ISO week (Monday..Sunday); derived, never persisted."""

    week_key: str
    week_start: date
    week_end: date
    week_label: str
    records: tuple[DailyRecord, ...]
    total: float


@dataclass(frozen=True)
class HistoryReport:
    place: Place
    weeks: tuple[WeeklyBucket, ...]
    grand_total: float

    @property
    def record_count(self) -> int:
        return sum(len(w.records) for w in self.weeks)


@dataclass(frozen=True)
class PlaceSummary:
    place: Place
    today: date
    today_total: float
    week_total: float
    has_today_record: bool
