from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Optional, Sequence

from .base import Document, ObservableStore

logger = logging.getLogger(__name__)


class JsonFileStore(ObservableStore):
    """Durable local store: every document lives in one JSON file.

    The whole file is rewritten on each change (write to a temp file, then
    ``os.replace``), so a crash leaves either the old or the new contents.
    """

    def __init__(self, path: str | Path):
        super().__init__()
        self._path = Path(path)
        self._lock = threading.RLock()
        self._docs: dict[str, Document] = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Document]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable data file %s", self._path)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring data file %s: top level is not an object", self._path)
            return {}
        return raw

    def _flush(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=self._path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(self._docs, fh, ensure_ascii=False, indent=2, sort_keys=True)
            os.replace(tmp_name, self._path)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> Optional[Document]:
        with self._lock:
            doc = self._docs.get(key)
            return copy.deepcopy(doc) if doc is not None else None

    def set(self, key: str, document: Document) -> None:
        with self._lock:
            self._docs[key] = copy.deepcopy(document)
            self._flush()
        self._notify(key, copy.deepcopy(document))

    def delete(self, key: str) -> bool:
        with self._lock:
            if key not in self._docs:
                return False
            del self._docs[key]
            self._flush()
        self._notify(key, None)
        return True

    def keys(self, prefix: str = "") -> Sequence[str]:
        with self._lock:
            return sorted(k for k in self._docs if k.startswith(prefix))
