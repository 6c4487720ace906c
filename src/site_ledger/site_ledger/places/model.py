from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Rates:
    """Daily wage rates of a place."""

    worker_rate: float = 0.0
    labourer_rate: float = 0.0


@dataclass(frozen=True)
class Place:
    """Domain entity: a construction work site."""

    place_id: str
    owner_id: str
    name: str
    worker_rate: float = 0.0
    labourer_rate: float = 0.0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def rates(self) -> Rates:
        return Rates(worker_rate=self.worker_rate, labourer_rate=self.labourer_rate)
