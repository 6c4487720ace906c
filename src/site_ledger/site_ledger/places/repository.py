from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence

from ..common.events import Subscription
from .model import Place


class PlaceRepository(Protocol):
    def list_for_owner(self, owner_id: str) -> Sequence[Place]:
        raise NotImplementedError

    def get_by_id(self, *, owner_id: str, place_id: str) -> Optional[Place]:
        raise NotImplementedError

    def save(self, place: Place) -> None:
        """Create or overwrite a place document."""

        raise NotImplementedError

    def delete(self, *, owner_id: str, place_id: str) -> bool:
        raise NotImplementedError

    def subscribe(self, *, owner_id: str, place_id: str, callback: Callable[[], None]) -> Subscription:
        """Invoke ``callback`` whenever the place or any of its records changes."""

        raise NotImplementedError
