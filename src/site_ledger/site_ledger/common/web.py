from __future__ import annotations

from functools import wraps
from typing import Any, Optional

from flask import g, jsonify, request, session

from ..core.exceptions import PersistenceError, SessionError, ValidationError
from ..users.model import SessionUser, require_session

USER_ID_HEADER = "X-User-Id"
USER_NAME_HEADER = "X-User-Name"


def current_session() -> Optional[SessionUser]:
    """Identity from the upstream session provider (headers first, then the Flask session)."""

    owner_id = (request.headers.get(USER_ID_HEADER) or session.get("user_id") or "").strip()
    if not owner_id:
        return None
    name = request.headers.get(USER_NAME_HEADER) or session.get("name") or ""
    return SessionUser(owner_id=str(owner_id), display_name=str(name))


def json_error(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def session_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            g.user_session = require_session(current_session())
        except SessionError as e:
            return json_error(str(e), 401)

        try:
            return view(*args, **kwargs)
        except ValidationError as e:
            return json_error(str(e), 400)
        except SessionError as e:
            return json_error(str(e), 401)
        except PersistenceError as e:
            return json_error(str(e), 503)

    return wrapper


def request_json() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def not_found():
    return json_error("not found", 404)
