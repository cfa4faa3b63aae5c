"""Session state and the single request path to the API.

Every call goes through ``ApiClient.request``: it attaches the bearer
token from the current ``Session`` and intercepts 401/403 answers,
clearing the stored session once and raising a single notice.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

import requests

from .notifications import Notifier

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:5000/api"
SESSION_EXPIRED_MESSAGE = "Sesión expirada. Inicie sesión nuevamente."


@dataclass
class Session:
    token: str = ""
    user: Optional[dict] = field(default=None)

    @property
    def authenticated(self) -> bool:
        return bool(self.token and self.user)


class SessionStore:
    """Durable storage for the session as a small JSON file."""

    def __init__(self, path: str | os.PathLike | None = None) -> None:
        default = os.environ.get("BARBERSHOP_SESSION") or Path.home() / ".barbershop" / "session.json"
        self.path = Path(path or default)

    def load(self) -> Session:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return Session()
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, exc)
            return Session()
        if not isinstance(data, dict):
            logger.warning("Ignoring session file %s: not a JSON object", self.path)
            return Session()
        return Session(token=data.get("token") or "", user=data.get("user"))

    def save(self, session: Session) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps({"token": session.token, "user": session.user}), encoding="utf-8"
        )

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass


class ApiRequestError(Exception):
    """Non-2xx answer (``status`` set) or transport failure (``status`` is None)."""

    def __init__(self, status: int | None, error: str, message: str | None = None) -> None:
        super().__init__(message or error)
        self.status = status
        self.error = error
        self.message = message or error

    @classmethod
    def from_response(cls, response: requests.Response) -> "ApiRequestError":
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        error = body.get("error") or response.reason or "request_failed"
        return cls(response.status_code, error, body.get("message"))


class ApiClient:
    def __init__(
        self,
        base_url: str | None = None,
        store: SessionStore | None = None,
        notifier: Notifier | None = None,
        http: requests.Session | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = (base_url or os.environ.get("BARBERSHOP_API") or DEFAULT_API_URL).rstrip("/")
        self.store = store or SessionStore()
        self.notifier = notifier or Notifier()
        self.http = http or requests.Session()
        self.timeout = timeout
        self.session = self.store.load()
        self._expired_handled = False
        self._cleared_listeners: list[Callable[[], None]] = []

    # --- session ---

    def on_session_cleared(self, listener: Callable[[], None]) -> None:
        self._cleared_listeners.append(listener)

    def _clear_session(self) -> None:
        self.session = Session()
        self.store.clear()
        for listener in self._cleared_listeners:
            listener()

    def _handle_session_expired(self) -> None:
        if self._expired_handled:
            return
        self._expired_handled = True
        self._clear_session()
        self.notifier.error(SESSION_EXPIRED_MESSAGE)

    def login(self, username: str, password: str) -> bool:
        try:
            data = self.request(
                "POST",
                "/login",
                json={"username": username, "password": password},
                authenticated=False,
            )
        except ApiRequestError as exc:
            logger.info("Login rejected for %r: %s", username, exc.error)
            self.notifier.error("Usuario o contraseña incorrectos")
            return False

        self.session = Session(token=data["token"], user=data["user"])
        self.store.save(self.session)
        self._expired_handled = False
        self.notifier.success("Bienvenido")
        return True

    def logout(self, notify: bool = True) -> None:
        self._clear_session()
        self._expired_handled = False
        if notify:
            self.notifier.info("Sesión cerrada")

    # --- requests ---

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def build_request(
        self,
        method: str,
        path: str,
        *,
        json: object = None,
        params: dict | None = None,
        files: dict | None = None,
        authenticated: bool = True,
    ) -> requests.PreparedRequest:
        headers = {"Accept": "application/json"}
        if authenticated and self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"
        request = requests.Request(
            method.upper(),
            self.url(path),
            headers=headers,
            json=json,
            params={k: v for k, v in (params or {}).items() if v not in (None, "")},
            files=files,
        )
        return self.http.prepare_request(request)

    def request(self, method: str, path: str, *, authenticated: bool = True, **kwargs) -> object:
        prepared = self.build_request(method, path, authenticated=authenticated, **kwargs)
        try:
            response = self.http.send(prepared, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method.upper(), prepared.url, exc)
            raise ApiRequestError(None, "network_error", str(exc)) from exc

        if authenticated and response.status_code in (401, 403):
            self._handle_session_expired()
        if not response.ok:
            raise ApiRequestError.from_response(response)
        if not response.content:
            return None
        return response.json()

    def get(self, path: str, **kwargs) -> object:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs) -> object:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs) -> object:
        return self.request("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs) -> object:
        return self.request("DELETE", path, **kwargs)
