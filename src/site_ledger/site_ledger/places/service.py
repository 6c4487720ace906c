from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty, require_rate
from ..core.constants import DEFAULT_RATE
from ..records.repository import RecordRepository
from ..users.model import SessionUser, require_session
from .model import Place
from .repository import PlaceRepository

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class PlaceService:
    """Use case: manage an owner's work sites and their rates."""

    def __init__(self, places: PlaceRepository, records: RecordRepository):
        self._places = places
        self._records = records

    def list_places(self, session: SessionUser) -> Sequence[Place]:
        session = require_session(session)
        return self._places.list_for_owner(session.owner_id)

    def get_place(self, session: SessionUser, place_id: str) -> Optional[Place]:
        session = require_session(session)
        return self._places.get_by_id(owner_id=session.owner_id, place_id=place_id)

    def add_place(
        self,
        session: SessionUser,
        *,
        name: str,
        worker_rate: Any = DEFAULT_RATE,
        labourer_rate: Any = DEFAULT_RATE,
        now: Optional[datetime] = None,
    ) -> Place:
        session = require_session(session)
        now = now or now_local()

        place = Place(
            place_id=uuid.uuid4().hex,
            owner_id=session.owner_id,
            name=require_non_empty(name, "Site name"),
            worker_rate=require_rate(worker_rate, "Worker rate"),
            labourer_rate=require_rate(labourer_rate, "Labourer rate"),
            created_at=now,
            updated_at=now,
        )
        self._places.save(place)
        logger.info("Place %s created for %s", place.place_id, session.owner_id)
        return place

    def update_place(
        self,
        session: SessionUser,
        place_id: str,
        *,
        name: Any = _UNSET,
        worker_rate: Any = _UNSET,
        labourer_rate: Any = _UNSET,
        now: Optional[datetime] = None,
    ) -> Optional[Place]:
        """Change any of name/rates; fields left out keep their value."""

        session = require_session(session)
        place = self._places.get_by_id(owner_id=session.owner_id, place_id=place_id)
        if not place:
            return None

        changes: dict[str, Any] = {}
        if name is not _UNSET:
            changes["name"] = require_non_empty(name, "Site name")
        if worker_rate is not _UNSET:
            changes["worker_rate"] = require_rate(worker_rate, "Worker rate")
        if labourer_rate is not _UNSET:
            changes["labourer_rate"] = require_rate(labourer_rate, "Labourer rate")

        updated = replace(place, updated_at=now or now_local(), **changes)
        self._places.save(updated)
        return updated

    def set_rates(
        self,
        session: SessionUser,
        place_id: str,
        *,
        worker_rate: Any,
        labourer_rate: Any,
        now: Optional[datetime] = None,
    ) -> Optional[Place]:
        """Overwrite both rates; no history is kept."""

        return self.update_place(session, place_id, worker_rate=worker_rate, labourer_rate=labourer_rate, now=now)

    def delete_place(self, session: SessionUser, place_id: str) -> bool:
        session = require_session(session)
        if not self._places.get_by_id(owner_id=session.owner_id, place_id=place_id):
            return False

        removed = self._records.delete_all_for_place(owner_id=session.owner_id, place_id=place_id)
        self._places.delete(owner_id=session.owner_id, place_id=place_id)
        logger.info("Place %s deleted with %d record(s)", place_id, removed)
        return True

    def clear_data(self, session: SessionUser) -> int:
        """Delete every place (and its records) of the session owner."""

        session = require_session(session)
        count = 0
        for place in self._places.list_for_owner(session.owner_id):
            if self.delete_place(session, place.place_id):
                count += 1
        return count
