from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.exceptions import SessionError


@dataclass(frozen=True)
class SessionUser:
    """Identity supplied by the upstream session provider.

    Every service call receives one explicitly; all stored documents are
    namespaced by ``owner_id``.
    """

    owner_id: str
    display_name: str = ""


def require_session(session: Optional[SessionUser]) -> SessionUser:
    if session is None or not str(session.owner_id or "").strip():
        raise SessionError("User not logged in.")
    if "/" in session.owner_id:
        raise SessionError("Invalid session identifier")
    return session
