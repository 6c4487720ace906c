from __future__ import annotations

import csv
import io
from datetime import date
from typing import Iterable, Optional

from ..common.datetime_utils import format_iso_date, iso_week_key, now_local, week_bounds, week_label
from ..core.enums import RatePolicy
from ..places.model import Rates
from ..places.repository import PlaceRepository
from ..records.model import DailyRecord
from ..records.repository import RecordRepository
from ..users.model import SessionUser, require_session
from .calculator.base import WageCalculator
from .calculator.standard_calculator import StandardWageCalculator
from .model import HistoryReport, PlaceSummary, WeeklyBucket


class WageReportService:
    """Daily, weekly and history totals for a place."""

    def __init__(
        self,
        places: PlaceRepository,
        records: RecordRepository,
        *,
        calculator: Optional[WageCalculator] = None,
        rate_policy: RatePolicy = RatePolicy.LIVE,
    ):
        self._places = places
        self._records = records
        self._calculator = calculator or StandardWageCalculator()
        self._rate_policy = RatePolicy(rate_policy)

    @property
    def rate_policy(self) -> RatePolicy:
        return self._rate_policy

    def rates_for(self, record: DailyRecord, current: Optional[Rates]) -> Optional[Rates]:
        if self._rate_policy == RatePolicy.SNAPSHOT and getattr(record, "rates_snapshot", None) is not None:
            return record.rates_snapshot
        return current

    def daily_total(self, record: DailyRecord, rates: Optional[Rates]) -> float:
        return self._calculator.daily_total(record, self.rates_for(record, rates))

    def weekly_total(self, records: Iterable[DailyRecord], rates: Optional[Rates], *, week_of: date) -> float:
        """Sum of daily totals of the records dated inside the ISO week containing ``week_of``."""

        start, end = week_bounds(week_of)
        return sum(
            self.daily_total(r, rates)
            for r in records
            if r.work_date is not None and start <= r.work_date <= end
        )

    def group_by_week(self, records: Iterable[DailyRecord], rates: Optional[Rates]) -> list[WeeklyBucket]:
        """Bucket records by ISO week in one pass; newest week first, newest day first."""

        grouped: dict[str, dict] = {}
        for r in records:
            if r.work_date is None:
                continue
            key = iso_week_key(r.work_date)
            g = grouped.get(key)
            if not g:
                start, end = week_bounds(r.work_date)
                g = {
                    "start": start,
                    "end": end,
                    "label": week_label(r.work_date),
                    "records": [],
                    "total": 0.0,
                }
                grouped[key] = g
            g["records"].append(r)
            g["total"] += self.daily_total(r, rates)

        buckets = [
            WeeklyBucket(
                week_key=key,
                week_start=g["start"],
                week_end=g["end"],
                week_label=g["label"],
                records=tuple(sorted(g["records"], key=lambda r: r.work_date, reverse=True)),
                total=g["total"],
            )
            for key, g in grouped.items()
        ]
        buckets.sort(key=lambda b: b.week_start, reverse=True)
        return buckets

    def build_history_report(self, session: SessionUser, place_id: str) -> Optional[HistoryReport]:
        session = require_session(session)
        place = self._places.get_by_id(owner_id=session.owner_id, place_id=place_id)
        if not place:
            return None

        records = self._records.list_for_place(owner_id=session.owner_id, place_id=place_id)
        weeks = self.group_by_week(records, place.rates)
        return HistoryReport(place=place, weeks=tuple(weeks), grand_total=sum(w.total for w in weeks))

    def place_summary(self, session: SessionUser, place_id: str, *, today: Optional[date] = None) -> Optional[PlaceSummary]:
        session = require_session(session)
        today = today or now_local().date()

        place = self._places.get_by_id(owner_id=session.owner_id, place_id=place_id)
        if not place:
            return None

        start, end = week_bounds(today)
        week_records = self._records.list_in_range(owner_id=session.owner_id, place_id=place_id, start=start, end=end)
        today_record = next((r for r in week_records if r.work_date == today), None)

        return PlaceSummary(
            place=place,
            today=today,
            today_total=self.daily_total(today_record, place.rates) if today_record else 0.0,
            week_total=self.weekly_total(week_records, place.rates, week_of=today),
            has_today_record=today_record is not None,
        )

    def export_history_csv(self, report: HistoryReport) -> str:
        """Plain CSV of the weekly history: one row per record, a total row per week, a grand total."""

        place = report.place
        out = io.StringIO()
        writer = csv.writer(out)
        writer.writerow(["week", "date", "workers", "labourers", "other_costs", "daily_total"])

        for week in report.weeks:
            for r in week.records:
                costs = "; ".join(f"{c.description}: {c.amount:.2f}" for c in r.additional_costs) or "N/A"
                writer.writerow(
                    [
                        week.week_label,
                        format_iso_date(r.work_date),
                        r.workers,
                        r.labourers,
                        costs,
                        f"{self.daily_total(r, place.rates):.2f}",
                    ]
                )
            writer.writerow([week.week_label, "", "", "", "Week Total", f"{week.total:.2f}"])

        writer.writerow(["", "", "", "", "Grand Total", f"{report.grand_total:.2f}"])
        return out.getvalue()
