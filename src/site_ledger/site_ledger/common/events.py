from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

Listener = Callable[..., None]


class Subscription:
    """Handle returned by every subscribe call.

    Usable as a context manager so a listener is always released on teardown::

        with store.subscribe(prefix, on_change):
            ...
    """

    def __init__(self, release: Callable[[], None]):
        self._release: Optional[Callable[[], None]] = release

    @property
    def active(self) -> bool:
        return self._release is not None

    def unsubscribe(self) -> None:
        release, self._release = self._release, None
        if release is not None:
            release()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.unsubscribe()


class EventEmitter:
    """Minimal named-event emitter (on/off/emit)."""

    def __init__(self):
        self._listeners: dict[str, list[Listener]] = defaultdict(list)
        self._lock = threading.Lock()

    def on(self, event: str, listener: Listener) -> Subscription:
        with self._lock:
            self._listeners[event].append(listener)
        return Subscription(lambda: self.off(event, listener))

    def off(self, event: str, listener: Listener) -> None:
        with self._lock:
            listeners = self._listeners.get(event)
            if listeners and listener in listeners:
                listeners.remove(listener)

    def emit(self, event: str, *args: Any) -> None:
        with self._lock:
            listeners = list(self._listeners.get(event, ()))
        for listener in listeners:
            try:
                listener(*args)
            except Exception:
                # Listeners are isolated from each other.
                logger.exception("Listener for %r failed", event)

    def listener_count(self, event: str) -> int:
        with self._lock:
            return len(self._listeners.get(event, ()))


PERSISTENCE_ERROR = "persistence-error"
