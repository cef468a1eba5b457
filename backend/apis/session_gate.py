# backend/apis/session_gate.py
"""
Per-request authentication check.

Page routes depend on `current_user` (unauthenticated -> redirect to /login);
`/api/*` data routes depend on `current_api_user` (unauthenticated -> 401 JSON).
User state lives only in the request's session, never in module globals.
"""
from typing import Mapping, Optional

from fastapi import Request

from models import User
from services.errors import ApiAuthRequired, AuthRequired


def is_authenticated(session: Optional[Mapping]) -> bool:
    if not session:
        return False
    user = session.get("user")
    return bool(user) and user.get("id") is not None


def current_user(request: Request) -> dict:
    if not is_authenticated(request.session):
        raise AuthRequired()
    return request.session["user"]


def current_api_user(request: Request) -> dict:
    if not is_authenticated(request.session):
        raise ApiAuthRequired()
    return request.session["user"]


def login_session(request: Request, user: User, api_key: str = "") -> None:
    request.session.clear()
    request.session["user"] = {"id": user.id, "email": user.email}
    request.session["api_key"] = api_key


def logout_session(request: Request) -> None:
    request.session.clear()
