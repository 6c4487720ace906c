from __future__ import annotations

import threading
from collections import defaultdict, deque
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import now_local
from ..common.events import PERSISTENCE_ERROR, EventEmitter, Subscription
from ..core.constants import DEFAULT_NOTIFICATION_LIMIT, USERS_ROOT
from ..core.exceptions import PersistenceError


@dataclass(frozen=True)
class Notification:
    operation: str
    key: str
    message: str
    created_at: datetime


def owner_of_key(key: str) -> Optional[str]:
    parts = key.split("/")
    if len(parts) >= 2 and parts[0] == USERS_ROOT and parts[1]:
        return parts[1]
    return None


class NotificationInbox:
    """Side channel for asynchronous persistence failures, kept per owner.

    Only the most recent ``limit`` notifications per owner are retained.
    """

    def __init__(self, emitter: EventEmitter, *, limit: int = DEFAULT_NOTIFICATION_LIMIT):
        self._messages: dict[str, deque[Notification]] = defaultdict(lambda: deque(maxlen=limit))
        self._lock = threading.Lock()
        self._subscription: Optional[Subscription] = emitter.on(PERSISTENCE_ERROR, self._on_error)

    def _on_error(self, error: PersistenceError) -> None:
        owner = owner_of_key(error.key)
        if owner is None:
            return
        note = Notification(
            operation=error.operation.value,
            key=error.key,
            message=str(error),
            created_at=now_local(),
        )
        with self._lock:
            self._messages[owner].append(note)

    def peek(self, owner_id: str) -> list[Notification]:
        with self._lock:
            return list(self._messages.get(owner_id, ()))

    def drain(self, owner_id: str) -> list[Notification]:
        with self._lock:
            items = self._messages.pop(owner_id, None)
            return list(items or ())

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
