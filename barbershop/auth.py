"""Session tokens and the admin gate for protected routes."""
from __future__ import annotations

from functools import wraps

from flask import Blueprint, current_app, g, request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from .errors import AuthenticationError, ForbiddenError

TOKEN_SALT = "auth-token"


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=TOKEN_SALT)


def build_token(user) -> str:
    """Sign ``{id, username, role}`` for ``user``."""
    return _serializer().dumps({"id": user.id, "username": user.username, "role": user.role})


def decode_token(token: str) -> dict[str, object]:
    """Return the token payload, raising ``ForbiddenError`` if it is tampered or expired."""
    max_age = current_app.config.get("TOKEN_MAX_AGE", 12 * 60 * 60)
    try:
        payload = _serializer().loads(token, max_age=max_age)
    except SignatureExpired as exc:
        raise ForbiddenError("token expired") from exc
    except BadSignature as exc:
        raise ForbiddenError("invalid token") from exc

    if not isinstance(payload, dict) or "id" not in payload:
        raise ForbiddenError("invalid token")
    return payload


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    token = auth_header[7:].strip()  # Remove "Bearer " prefix
    return token or None


def authenticate() -> dict[str, object]:
    """Validate the request's bearer token and require the privileged role.

    401 when no token is sent, 403 when it is invalid, expired, or
    belongs to another role.
    """
    token = bearer_token()
    if token is None:
        raise AuthenticationError("missing token")

    payload = decode_token(token)
    if payload.get("role") != current_app.config.get("PRIVILEGED_ROLE", "admin"):
        raise ForbiddenError("access denied")

    g.current_user = payload
    return payload


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        authenticate()
        return view(*args, **kwargs)

    return wrapper


def protect_blueprint(blueprint: Blueprint) -> None:
    """Gate every route of ``blueprint`` behind ``authenticate``."""

    @blueprint.before_request
    def _require_admin():
        if request.method == "OPTIONS":
            return None
        authenticate()
        return None
