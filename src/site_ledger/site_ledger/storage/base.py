from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional, Protocol, Sequence

from ..common.events import Subscription

logger = logging.getLogger(__name__)

Document = dict[str, Any]
ChangeCallback = Callable[[str, Optional[Document]], None]


class KeyValueStore(Protocol):
    """Document store addressed by slash-separated string keys.

    ``callback(key, document)`` fires after every change under a subscribed
    prefix; ``document`` is None for deletions.
    """

    def get(self, key: str) -> Optional[Document]:
        raise NotImplementedError

    def set(self, key: str, document: Document) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> bool:
        raise NotImplementedError

    def keys(self, prefix: str = "") -> Sequence[str]:
        raise NotImplementedError

    def subscribe(self, prefix: str, callback: ChangeCallback) -> Subscription:
        raise NotImplementedError


def join_key(*parts: str) -> str:
    return "/".join(str(p).strip("/") for p in parts if str(p).strip("/"))


def matches_prefix(prefix: str, key: str) -> bool:
    """Segment-aware prefix test: ``a/b`` covers ``a/b`` and ``a/b/c`` but not ``a/bc``."""
    if not prefix:
        return True
    if prefix.endswith("/"):
        return key.startswith(prefix)
    return key == prefix or key.startswith(prefix + "/")


def is_direct_child(prefix: str, key: str) -> bool:
    """True when ``key`` sits exactly one segment below ``prefix``."""
    prefix = prefix.rstrip("/") + "/"
    if not key.startswith(prefix):
        return False
    return "/" not in key[len(prefix):]


class ObservableStore:
    """Listener bookkeeping shared by the concrete stores."""

    def __init__(self):
        self._subscribers: list[tuple[str, ChangeCallback]] = []
        self._subscribers_lock = threading.Lock()

    def subscribe(self, prefix: str, callback: ChangeCallback) -> Subscription:
        entry = (prefix, callback)
        with self._subscribers_lock:
            self._subscribers.append(entry)

        def release() -> None:
            with self._subscribers_lock:
                if entry in self._subscribers:
                    self._subscribers.remove(entry)

        return Subscription(release)

    def subscriber_count(self) -> int:
        with self._subscribers_lock:
            return len(self._subscribers)

    def _notify(self, key: str, document: Optional[Document]) -> None:
        with self._subscribers_lock:
            targets = [cb for prefix, cb in self._subscribers if matches_prefix(prefix, key)]
        for callback in targets:
            try:
                callback(key, document)
            except Exception:
                logger.exception("Change listener for %r failed", key)
