from __future__ import annotations

from typing import Optional

from .enums import WriteOperation


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class SessionError(DomainError):
    """Raised when an operation is attempted without a valid session."""


class PersistenceError(DomainError):
    """A backend write or read failed.

    Write-behind failures are never raised to the caller of the write; they
    are delivered through the error emitter instead.
    """

    def __init__(self, operation: WriteOperation, key: str, cause: Optional[BaseException] = None):
        message = f"Storage {operation.value} operation at {key!r} failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.operation = operation
        self.key = key
        self.cause = cause
