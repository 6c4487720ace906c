from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ...places.model import Rates
from ...records.model import DailyRecord


class WageCalculator(ABC):
    """Calculator interface (Strategy Pattern for daily wages)."""

    @abstractmethod
    def daily_total(self, record: DailyRecord, rates: Optional[Rates]) -> float:
        raise NotImplementedError
