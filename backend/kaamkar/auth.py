from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Cookie, Header, HTTPException

from .auth_utils import new_session_token
from .config import settings

SESSION_COOKIE_NAME = "kk_session"

active_sessions: dict[str, dict[str, Any]] = {}


def create_session(user_id: str) -> str:
    token = new_session_token()
    active_sessions[token] = {"user_id": user_id, "last_seen": datetime.now(timezone.utc)}
    return token


def drop_session(token: str | None) -> None:
    if token:
        active_sessions.pop(token, None)


def get_session_user_id(token: str | None) -> str | None:
    if not token:
        return None
    session = active_sessions.get(token)
    if session is None:
        return None
    now = datetime.now(timezone.utc)
    timeout_minutes = settings.session_timeout_minutes
    if timeout_minutes and (now - session["last_seen"]) > timedelta(minutes=timeout_minutes):
        del active_sessions[token]
        return None
    session["last_seen"] = now
    return session["user_id"]


def token_from_header(authorization: str | None) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="missing Authorization header")
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="invalid Authorization header")
    return parts[1].strip()


def request_token(authorization: str | None, session_token: str | None) -> str | None:
    if authorization:
        return token_from_header(authorization)
    return session_token


def require_user(authorization: str | None = None, session_token: str | None = None) -> str:
    token = request_token(authorization, session_token)
    if not token:
        raise HTTPException(status_code=401, detail="missing session token")
    user_id = get_session_user_id(token)
    if user_id is None:
        raise HTTPException(status_code=401, detail="invalid or expired token")
    return user_id


def current_user_id(
    authorization: str | None = Header(default=None),
    session_token: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
) -> str:
    """Dependency resolving the owner of every request from its session."""
    return require_user(authorization, session_token)
