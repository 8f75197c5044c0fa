from __future__ import annotations

import time
from functools import wraps
from typing import Optional

from flask import current_app, session

from ..core.exceptions import AuthenticationError

SESSION_KEY = "admin"


def store_admin_session(identity: dict, *, ttl_seconds: int) -> dict:
    issued = int(time.time())
    payload = {
        "sub": identity.get("sub") or "",
        "name": identity.get("name") or "",
        "email": identity.get("email") or "",
        "roles": ["admin"],
        "iat": issued,
        "exp": issued + int(ttl_seconds),
    }
    session[SESSION_KEY] = payload
    return payload


def current_admin() -> Optional[dict]:
    payload = session.get(SESSION_KEY)
    if not payload:
        return None
    if int(payload.get("exp") or 0) <= time.time():
        session.pop(SESSION_KEY, None)
        return None
    return payload


def admin_required(view):
    """401 unless an admin session is active, or auth is switched off."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_app.config.get("AUTH_REQUIRED", True) and current_admin() is None:
            raise AuthenticationError("Unauthorized")
        return view(*args, **kwargs)

    return wrapper
