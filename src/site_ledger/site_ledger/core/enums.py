from __future__ import annotations

from enum import Enum


class StorageBackend(str, Enum):
    """Backend used underneath the document store."""

    MEMORY = "memory"
    FILE = "file"
    MYSQL = "mysql"


class RatePolicy(str, Enum):
    """Which rates a historical record is priced with."""

    LIVE = "live"
    SNAPSHOT = "snapshot"


class SaveOutcome(str, Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"


class WriteOperation(str, Enum):
    """Store operation reported with persistence failures."""

    GET = "get"
    LIST = "list"
    WRITE = "write"
    DELETE = "delete"
