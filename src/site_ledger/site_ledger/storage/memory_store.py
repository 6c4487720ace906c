from __future__ import annotations

import copy
import threading
from typing import Optional, Sequence

from .base import Document, ObservableStore


class MemoryStore(ObservableStore):
    """Process-local store; contents vanish with the process."""

    def __init__(self, initial: Optional[dict[str, Document]] = None):
        super().__init__()
        self._docs: dict[str, Document] = copy.deepcopy(initial or {})
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[Document]:
        with self._lock:
            doc = self._docs.get(key)
            return copy.deepcopy(doc) if doc is not None else None

    def set(self, key: str, document: Document) -> None:
        with self._lock:
            self._docs[key] = copy.deepcopy(document)
        self._notify(key, copy.deepcopy(document))

    def delete(self, key: str) -> bool:
        with self._lock:
            existed = self._docs.pop(key, None) is not None
        if existed:
            self._notify(key, None)
        return existed

    def keys(self, prefix: str = "") -> Sequence[str]:
        with self._lock:
            return sorted(k for k in self._docs if k.startswith(prefix))

    def snapshot(self) -> dict[str, Document]:
        with self._lock:
            return copy.deepcopy(self._docs)
