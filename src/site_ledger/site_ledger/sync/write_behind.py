from __future__ import annotations

import copy
import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from typing import Optional, Sequence

from ..common.events import PERSISTENCE_ERROR, EventEmitter
from ..core.constants import DEFAULT_WRITE_WORKERS
from ..core.enums import WriteOperation
from ..core.exceptions import PersistenceError
from ..storage.base import Document, KeyValueStore, ObservableStore

logger = logging.getLogger(__name__)


class WriteBehindStore(ObservableStore):
    """Optimistic mirror in front of a slower backend store.

    ``set``/``delete`` update the mirror and notify subscribers immediately,
    then hand the backend write to a thread pool. A failed backend write is
    logged and emitted as a ``PersistenceError`` on ``emitter``; the mirror
    is not rolled back and the write is not retried.

    Reads hydrate the mirror lazily, one key prefix at a time. Deleting a key
    the mirror has not seen yet asks the backend whether it exists. Backend
    read failures raise ``PersistenceError`` directly since the caller needs
    the data to continue.

    Per-key write bookkeeping is dropped once a key has no writes in flight,
    and a tombstone once its delete has landed and its prefix is loaded.
    """

    def __init__(
        self,
        backend: KeyValueStore,
        *,
        emitter: Optional[EventEmitter] = None,
        executor: Optional[Executor] = None,
        max_workers: int = DEFAULT_WRITE_WORKERS,
    ):
        super().__init__()
        self._backend = backend
        self.emitter = emitter or EventEmitter()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max(1, int(max_workers)), thread_name_prefix="write-behind"
        )

        self._lock = threading.RLock()
        self._mirror: dict[str, Document] = {}
        self._tombstones: set[str] = set()
        self._confirmed_deletes: set[str] = set()
        self._loaded_prefixes: list[str] = []

        self._pending: set[Future] = set()
        self._seq = 0
        # Per-key bookkeeping lives only while the key has writes in flight.
        self._pending_per_key: dict[str, int] = {}
        self._applied_seq: dict[str, int] = {}
        self._key_locks: dict[str, threading.Lock] = {}

    @property
    def backend(self) -> KeyValueStore:
        return self._backend

    # -- reads ---------------------------------------------------------

    def _is_loaded(self, key_or_prefix: str) -> bool:
        return any(key_or_prefix.startswith(p) for p in self._loaded_prefixes)

    def _hydrate(self, prefix: str) -> None:
        try:
            loader = getattr(self._backend, "load_prefix", None)
            if loader is not None:
                docs = loader(prefix)
            else:
                docs = {}
                for key in self._backend.keys(prefix):
                    doc = self._backend.get(key)
                    if doc is not None:
                        docs[key] = doc
        except Exception as exc:
            raise PersistenceError(WriteOperation.LIST, prefix, exc) from exc

        with self._lock:
            if self._is_loaded(prefix):
                return
            for key, doc in docs.items():
                # Local writes made before hydration win, as does an already loaded narrower prefix.
                if key in self._mirror or key in self._tombstones or self._is_loaded(key):
                    continue
                self._mirror[key] = doc
            self._loaded_prefixes.append(prefix)
            for key in [k for k in self._confirmed_deletes if k.startswith(prefix)]:
                self._prune_tombstone(key)

    def get(self, key: str) -> Optional[Document]:
        with self._lock:
            if key in self._mirror:
                return copy.deepcopy(self._mirror[key])
            if key in self._tombstones or self._is_loaded(key):
                return None

        try:
            doc = self._backend.get(key)
        except Exception as exc:
            raise PersistenceError(WriteOperation.GET, key, exc) from exc

        with self._lock:
            if key in self._tombstones:
                return None
            if doc is not None and key not in self._mirror:
                self._mirror[key] = doc
            current = self._mirror.get(key)
            return copy.deepcopy(current) if current is not None else None

    def keys(self, prefix: str = "") -> Sequence[str]:
        with self._lock:
            loaded = self._is_loaded(prefix)
        if not loaded:
            self._hydrate(prefix)
        with self._lock:
            return sorted(k for k in self._mirror if k.startswith(prefix))

    # -- writes --------------------------------------------------------

    def set(self, key: str, document: Document) -> None:
        with self._lock:
            self._mirror[key] = copy.deepcopy(document)
            self._tombstones.discard(key)
            self._confirmed_deletes.discard(key)
        self._notify(key, copy.deepcopy(document))
        self._submit(WriteOperation.WRITE, key, copy.deepcopy(document))

    def delete(self, key: str) -> bool:
        with self._lock:
            cold = key not in self._mirror and key not in self._tombstones and not self._is_loaded(key)

        in_backend = False
        if cold:
            # The mirror has never seen this key; only the backend knows whether it exists.
            try:
                in_backend = self._backend.get(key) is not None
            except Exception as exc:
                raise PersistenceError(WriteOperation.GET, key, exc) from exc

        with self._lock:
            existed = self._mirror.pop(key, None) is not None
            if not existed and key not in self._tombstones:
                existed = in_backend
            self._tombstones.add(key)
            self._confirmed_deletes.discard(key)
        if existed:
            self._notify(key, None)
        # The backend may hold a copy the mirror never loaded.
        self._submit(WriteOperation.DELETE, key, None)
        return existed

    def _key_lock(self, key: str) -> threading.Lock:
        with self._lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = self._key_locks[key] = threading.Lock()
            return lock

    def _submit(self, operation: WriteOperation, key: str, document: Optional[Document]) -> None:
        with self._lock:
            self._seq += 1
            seq = self._seq
            self._pending_per_key[key] = self._pending_per_key.get(key, 0) + 1
            future = self._executor.submit(self._apply, operation, key, document, seq)
            self._pending.add(future)
        future.add_done_callback(self._discard_pending)

    def _discard_pending(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def _apply(self, operation: WriteOperation, key: str, document: Optional[Document], seq: int) -> None:
        with self._key_lock(key):
            try:
                if self._applied_seq.get(key, 0) > seq:
                    # A newer write to this key already landed.
                    return
                try:
                    if operation is WriteOperation.DELETE:
                        self._backend.delete(key)
                    else:
                        self._backend.set(key, document or {})
                except Exception as exc:
                    error = PersistenceError(operation, key, exc)
                    logger.warning("%s", error)
                    self.emitter.emit(PERSISTENCE_ERROR, error)
                else:
                    with self._lock:
                        if operation is WriteOperation.DELETE and key in self._tombstones:
                            self._confirmed_deletes.add(key)
                        else:
                            self._confirmed_deletes.discard(key)
                self._applied_seq[key] = seq
            finally:
                self._finish(key)

    def _finish(self, key: str) -> None:
        with self._lock:
            remaining = self._pending_per_key.get(key, 1) - 1
            if remaining > 0:
                self._pending_per_key[key] = remaining
                return
            self._pending_per_key.pop(key, None)
            self._applied_seq.pop(key, None)
            self._key_locks.pop(key, None)
            if key in self._confirmed_deletes:
                self._prune_tombstone(key)

    def _prune_tombstone(self, key: str) -> None:
        # Caller holds self._lock. A confirmed delete under a loaded prefix needs no tombstone.
        if key in self._pending_per_key or not self._is_loaded(key):
            return
        self._tombstones.discard(key)
        self._confirmed_deletes.discard(key)

    # -- lifecycle -----------------------------------------------------

    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def tracked_key_count(self) -> int:
        """Keys with per-key write bookkeeping or a tombstone still held."""

        with self._lock:
            return len(set(self._key_locks) | set(self._applied_seq) | self._tombstones)

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Block until queued backend writes finish. Returns False on timeout."""

        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def invalidate(self) -> None:
        """Drop the mirror so the next read refetches from the backend."""

        with self._lock:
            self._mirror.clear()
            self._tombstones.clear()
            self._confirmed_deletes.clear()
            self._loaded_prefixes.clear()

    def close(self) -> None:
        self.flush()
        if self._owns_executor:
            self._executor.shutdown(wait=True)
