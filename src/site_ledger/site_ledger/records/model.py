from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import SaveOutcome
from ..places.model import Rates


@dataclass(frozen=True)
class AdditionalCost:
    description: str
    amount: float


@dataclass(frozen=True)
class DailyRecord:
    """One day's attendance/cost entry for a place (unique per place and date)."""

    record_id: str
    place_id: str
    work_date: date
    workers: int = 0
    labourers: int = 0
    additional_costs: tuple[AdditionalCost, ...] = field(default_factory=tuple)
    notes: Optional[str] = None
    rates_snapshot: Optional[Rates] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class SaveResult:
    record_id: str
    outcome: SaveOutcome

    @property
    def created(self) -> bool:
        return self.outcome == SaveOutcome.CREATED

    @property
    def message(self) -> str:
        return "Record added." if self.created else "Record updated."
