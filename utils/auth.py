"""Cookie-backed session tokens and the access checks built on them."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from flask import Flask, Response, current_app, g
from flask_jwt_extended import (
    create_access_token,
    get_jwt,
    set_access_cookies,
    unset_jwt_cookies,
    verify_jwt_in_request,
)
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from werkzeug.exceptions import Forbidden, Unauthorized

from models import db
from models.user import ROLE_ADMIN, User


@dataclass(frozen=True)
class SessionPayload:
    """The identity carried by a verified session cookie."""

    user_id: int
    email: str
    username: str
    role: str
    expires_at: datetime

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @classmethod
    def from_claims(cls, claims: dict) -> "SessionPayload":
        return cls(
            user_id=int(claims["sub"]),
            email=claims["email"],
            username=claims["username"],
            role=claims["role"],
            expires_at=datetime.fromtimestamp(claims["exp"], UTC),
        )

    def claims(self) -> dict:
        return {"email": self.email, "username": self.username, "role": self.role}


def _sign(user_id: int, claims: dict) -> str:
    return create_access_token(identity=str(user_id), additional_claims=claims)


def issue_session(response: Response, user: User) -> Response:
    """Sign a fresh session for ``user`` and attach it to ``response``."""

    token = _sign(
        user.id, {"email": user.email, "username": user.username, "role": user.role}
    )
    set_access_cookies(response, token)
    g.session_cookie_written = True
    return response


def clear_session(response: Response) -> Response:
    unset_jwt_cookies(response)
    g.session_cookie_written = True
    return response


def _decode_session() -> SessionPayload | None:
    try:
        if verify_jwt_in_request(optional=True) is None:
            return None
        return SessionPayload.from_claims(get_jwt())
    except (JWTExtendedException, PyJWTError, KeyError, TypeError, ValueError):
        return None


def get_session() -> SessionPayload | None:
    """Return the caller's session, or ``None`` when the cookie is absent or invalid."""

    if "auth_session" not in g:
        g.auth_session = _decode_session()
    return g.auth_session


def require_session() -> SessionPayload:
    session = get_session()
    if session is None:
        raise Unauthorized("Please log in first.")
    return session


def current_user() -> User | None:
    """Load the account behind the session, if it still exists."""

    session = get_session()
    if session is None:
        return None
    return db.session.get(User, session.user_id)


def require_user() -> User:
    require_session()
    user = current_user()
    if user is None:
        raise Unauthorized("Your account no longer exists. Please log in again.")
    return user


def require_admin() -> SessionPayload:
    """Return the session of an administrator or raise 401/403."""

    session = require_session()
    if not session.is_admin:
        raise Forbidden("Administrator privileges required.")

    if current_app.config.get("ADMIN_ROLE_RECHECK", True):
        user = db.session.get(User, session.user_id)
        if user is None or not user.is_active or user.role != ROLE_ADMIN:
            current_app.logger.warning(
                "Rejected stale admin session for user %s", session.user_id
            )
            raise Forbidden("Administrator privileges required.")
    return session


def register_session_hooks(app: Flask) -> None:
    """Resolve the session before each request and slide its expiry afterwards."""

    @app.before_request
    def _load_session():
        get_session()

    @app.after_request
    def _refresh_session(response: Response):
        session = g.get("auth_session")
        if session is None or g.get("session_cookie_written"):
            return response
        set_access_cookies(response, _sign(session.user_id, session.claims()))
        return response
