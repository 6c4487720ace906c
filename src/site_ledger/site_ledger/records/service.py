from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Iterable, Optional, Sequence, Union

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.validators import require_count, to_number
from ..core.enums import RatePolicy, SaveOutcome
from ..places.repository import PlaceRepository
from ..users.model import SessionUser, require_session
from .model import AdditionalCost, DailyRecord, SaveResult
from .repository import RecordRepository

logger = logging.getLogger(__name__)


def clean_additional_costs(items: Optional[Iterable[Any]]) -> tuple[AdditionalCost, ...]:
    """Keep line items with a description and a positive amount; drop the rest silently."""

    cleaned = []
    for item in items or ():
        if isinstance(item, AdditionalCost):
            description, amount = item.description, item.amount
        elif isinstance(item, dict):
            description, amount = item.get("description"), item.get("amount")
        else:
            continue

        description = str(description or "").strip()
        amount = to_number(amount)
        if description and amount > 0:
            cleaned.append(AdditionalCost(description=description, amount=amount))
    return tuple(cleaned)


class RecordService:
    """Use case: reconcile daily records (one per place per date)."""

    def __init__(
        self,
        records: RecordRepository,
        places: PlaceRepository,
        *,
        rate_policy: RatePolicy = RatePolicy.LIVE,
    ):
        self._records = records
        self._places = places
        self._rate_policy = RatePolicy(rate_policy)

    def save_record(
        self,
        session: SessionUser,
        place_id: str,
        *,
        work_date: Union[date, str],
        workers: Any = 0,
        labourers: Any = 0,
        additional_costs: Optional[Iterable[Any]] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Optional[SaveResult]:
        """Create the record for ``(place_id, work_date)`` or overwrite the existing one.

        An overwrite replaces counts, costs and notes wholesale and keeps the
        record id. Returns None when the place does not exist.
        """

        session = require_session(session)
        work_date = parse_iso_date(work_date)
        workers = require_count(workers, "Workers")
        labourers = require_count(labourers, "Labourers")
        costs = clean_additional_costs(additional_costs)
        notes = (notes or "").strip() or None
        now = now or now_local()

        place = self._places.get_by_id(owner_id=session.owner_id, place_id=place_id)
        if not place:
            return None

        existing = self._records.get_for_place_and_date(
            owner_id=session.owner_id, place_id=place_id, work_date=work_date
        )

        if existing:
            snapshot = existing.rates_snapshot
            if self._rate_policy == RatePolicy.SNAPSHOT and snapshot is None:
                snapshot = place.rates
            record = replace(
                existing,
                workers=workers,
                labourers=labourers,
                additional_costs=costs,
                notes=notes,
                rates_snapshot=snapshot,
                updated_at=now,
            )
            outcome = SaveOutcome.UPDATED
        else:
            record = DailyRecord(
                record_id=uuid.uuid4().hex,
                place_id=place_id,
                work_date=work_date,
                workers=workers,
                labourers=labourers,
                additional_costs=costs,
                notes=notes,
                rates_snapshot=place.rates if self._rate_policy == RatePolicy.SNAPSHOT else None,
                created_at=now,
                updated_at=now,
            )
            outcome = SaveOutcome.CREATED

        self._records.save(owner_id=session.owner_id, record=record)
        logger.debug("Record %s %s for place %s on %s", record.record_id, outcome.value, place_id, work_date)
        return SaveResult(record_id=record.record_id, outcome=outcome)

    def delete_record(self, session: SessionUser, place_id: str, record_id: str) -> bool:
        session = require_session(session)
        return self._records.delete(owner_id=session.owner_id, place_id=place_id, record_id=record_id)

    def get_record(self, session: SessionUser, place_id: str, record_id: str) -> Optional[DailyRecord]:
        session = require_session(session)
        return self._records.get_by_id(owner_id=session.owner_id, place_id=place_id, record_id=record_id)

    def get_record_for_date(self, session: SessionUser, place_id: str, work_date: Union[date, str]) -> Optional[DailyRecord]:
        session = require_session(session)
        return self._records.get_for_place_and_date(
            owner_id=session.owner_id, place_id=place_id, work_date=parse_iso_date(work_date)
        )

    def list_records(self, session: SessionUser, place_id: str) -> Sequence[DailyRecord]:
        """Records of a place, newest date first."""

        session = require_session(session)
        return self._records.list_for_place(owner_id=session.owner_id, place_id=place_id)
