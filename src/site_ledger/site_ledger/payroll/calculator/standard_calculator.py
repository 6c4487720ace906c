from __future__ import annotations

from typing import Optional

from .base import WageCalculator
from ...common.validators import to_number
from ...places.model import Rates
from ...records.model import DailyRecord


def _non_negative(value) -> float:
    return max(to_number(value), 0.0)


class StandardWageCalculator(WageCalculator):
    """Standard rule: workers*worker_rate + labourers*labourer_rate + other costs.

    Missing, non-numeric or negative inputs count as 0, so the total is never
    negative and never raises.
    """

    def daily_total(self, record: DailyRecord, rates: Optional[Rates]) -> float:
        worker_rate = _non_negative(getattr(rates, "worker_rate", 0))
        labourer_rate = _non_negative(getattr(rates, "labourer_rate", 0))

        workers = _non_negative(getattr(record, "workers", 0))
        labourers = _non_negative(getattr(record, "labourers", 0))
        other = sum(_non_negative(getattr(c, "amount", 0)) for c in (getattr(record, "additional_costs", None) or ()))

        return workers * worker_rate + labourers * labourer_rate + other
