"""pytest configuration: application, database and HTTP fixtures."""
from __future__ import annotations

import sys
from pathlib import Path
from urllib.parse import urlsplit

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

# Ensure the project root is available on sys.path so tests can import the barbershop package.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from barbershop import create_app  # noqa: E402
from barbershop.config import TestingConfig  # noqa: E402
from barbershop.extensions import db  # noqa: E402
from barbershop.models import Barber, Client, Cut  # noqa: E402

API_BASE = "http://testserver/api"


@pytest.fixture
def upload_dir(tmp_path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def app(tmp_path, upload_dir):
    class _Config(TestingConfig):
        UPLOAD_FOLDER = str(upload_dir)
        FRONTEND_DIST = str(tmp_path / "dist")

    flask_app = create_app(_Config)
    with flask_app.app_context():
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, username: str = "admin", password: str = "admin") -> str:
    response = client.post("/api/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.get_json()
    return response.get_json()["token"]


@pytest.fixture
def token(client) -> str:
    return login(client)


@pytest.fixture
def auth_headers(token) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_client(app):
    def _make(name: str = "Juan", **fields) -> Client:
        record = Client(name=name, **fields)
        db.session.add(record)
        db.session.commit()
        return record

    return _make


@pytest.fixture
def make_barber(app):
    def _make(name: str = "Ana") -> Barber:
        record = Barber(name=name)
        db.session.add(record)
        db.session.commit()
        return record

    return _make


@pytest.fixture
def make_cut(app):
    def _make(client: Client, barber: Barber, service: str = "Corte", date: str = "2024-01-01", **fields) -> Cut:
        record = Cut(client_id=client.id, barber_id=barber.id, service=service, date=date, **fields)
        db.session.add(record)
        db.session.commit()
        return record

    return _make


class FlaskTransport(BaseAdapter):
    """Send ``requests`` traffic to a Flask test client instead of the network."""

    def __init__(self, app) -> None:
        super().__init__()
        self.test_client = app.test_client()
        self.sent: list[requests.PreparedRequest] = []

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.sent.append(request)
        url = urlsplit(request.url)
        headers = {k: v for k, v in request.headers.items() if k.lower() != "content-length"}
        body = request.body
        if isinstance(body, str):
            body = body.encode("utf-8")

        result = self.test_client.open(
            url.path,
            method=request.method,
            query_string=url.query,
            headers=headers,
            data=body or b"",
        )

        response = requests.Response()
        response.status_code = result.status_code
        response.reason = result.status.split(" ", 1)[1] if " " in result.status else ""
        response.headers = CaseInsensitiveDict(dict(result.headers.items()))
        response._content = result.get_data()
        response.encoding = "utf-8"
        response.url = request.url
        response.request = request
        return response

    def close(self) -> None:
        pass


@pytest.fixture
def transport(app) -> FlaskTransport:
    return FlaskTransport(app)


@pytest.fixture
def http_session(transport) -> requests.Session:
    session = requests.Session()
    session.mount("http://testserver", transport)
    return session


@pytest.fixture
def session_file(tmp_path) -> Path:
    return tmp_path / "session" / "session.json"


@pytest.fixture
def api(http_session, session_file):
    from barbershop.client import ApiClient, Notifier, SessionStore

    return ApiClient(API_BASE, SessionStore(session_file), Notifier(), http=http_session)


@pytest.fixture
def ctx(api):
    from barbershop.client import DataContext

    return DataContext(api)


@pytest.fixture
def logged_in_ctx(ctx):
    assert ctx.login("admin", "admin")
    ctx.notifier.clear()
    return ctx
