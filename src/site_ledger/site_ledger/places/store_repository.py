from __future__ import annotations

from typing import Callable, Optional, Sequence

from ..common.datetime_utils import parse_timestamp
from ..common.events import Subscription
from ..common.validators import to_number
from ..core.constants import USERS_ROOT
from ..storage.base import KeyValueStore, is_direct_child, join_key
from .model import Place
from .repository import PlaceRepository


def places_prefix(owner_id: str) -> str:
    return join_key(USERS_ROOT, owner_id, "places") + "/"


def place_key(owner_id: str, place_id: str) -> str:
    return join_key(USERS_ROOT, owner_id, "places", place_id)


def _from_doc(owner_id: str, place_id: str, doc: dict) -> Place:
    return Place(
        place_id=place_id,
        owner_id=owner_id,
        name=str(doc.get("name") or ""),
        worker_rate=max(to_number(doc.get("workerRate")), 0.0),
        labourer_rate=max(to_number(doc.get("labourerRate")), 0.0),
        created_at=parse_timestamp(doc.get("createdAt")),
        updated_at=parse_timestamp(doc.get("updatedAt")),
    )


def _to_doc(place: Place) -> dict:
    return {
        "name": place.name,
        "workerRate": place.worker_rate,
        "labourerRate": place.labourer_rate,
        "createdAt": place.created_at.isoformat() if place.created_at else None,
        "updatedAt": place.updated_at.isoformat() if place.updated_at else None,
    }


class StorePlaceRepository(PlaceRepository):
    def __init__(self, store: KeyValueStore):
        self._store = store

    def list_for_owner(self, owner_id: str) -> Sequence[Place]:
        prefix = places_prefix(owner_id)
        places = []
        for key in self._store.keys(prefix):
            if not is_direct_child(prefix, key):
                continue
            doc = self._store.get(key)
            if doc is not None:
                places.append(_from_doc(owner_id, key[len(prefix):], doc))
        places.sort(key=lambda p: (p.name.lower(), p.place_id))
        return places

    def get_by_id(self, *, owner_id: str, place_id: str) -> Optional[Place]:
        doc = self._store.get(place_key(owner_id, place_id))
        if doc is None:
            return None
        return _from_doc(owner_id, place_id, doc)

    def save(self, place: Place) -> None:
        self._store.set(place_key(place.owner_id, place.place_id), _to_doc(place))

    def delete(self, *, owner_id: str, place_id: str) -> bool:
        return self._store.delete(place_key(owner_id, place_id))

    def subscribe(self, *, owner_id: str, place_id: str, callback: Callable[[], None]) -> Subscription:
        return self._store.subscribe(place_key(owner_id, place_id), lambda _key, _doc: callback())
