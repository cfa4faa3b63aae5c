"""Tests for login and the admin gate on protected routes."""
from __future__ import annotations

import pytest
from itsdangerous import URLSafeTimedSerializer
from werkzeug.security import check_password_hash, generate_password_hash

from barbershop.auth import TOKEN_SALT
from barbershop.extensions import db
from barbershop.models import User

from conftest import login


def _create_user(*, username: str, password: str, role: str = "admin") -> User:
    user = User(username=username, password_hash=generate_password_hash(password), role=role)
    db.session.add(user)
    db.session.commit()
    return user


def test_seed_admin_created_with_hashed_password(app) -> None:
    admin = User.query.filter_by(username="admin").one()

    assert admin.role == "admin"
    assert admin.password_hash != "admin"
    assert check_password_hash(admin.password_hash, "admin")


def test_login_success(app, client) -> None:
    response = client.post("/api/login", json={"username": "admin", "password": "admin"})

    assert response.status_code == 200
    body = response.get_json()
    assert body["token"]
    assert body["user"]["username"] == "admin"
    assert body["user"]["role"] == "admin"
    assert "password" not in body["user"] and "password_hash" not in body["user"]


def test_login_token_decodes_to_identity(app, client) -> None:
    body = client.post("/api/login", json={"username": "admin", "password": "admin"}).get_json()

    serializer = URLSafeTimedSerializer(app.config["SECRET_KEY"], salt=TOKEN_SALT)
    payload = serializer.loads(body["token"], max_age=app.config["TOKEN_MAX_AGE"])

    assert payload == {"id": body["user"]["id"], "username": "admin", "role": "admin"}


def test_token_lifetime_is_twelve_hours(app) -> None:
    assert app.config["TOKEN_MAX_AGE"] == 12 * 60 * 60


def test_login_invalid_password(app, client) -> None:
    response = client.post("/api/login", json={"username": "admin", "password": "wrong"})

    assert response.status_code == 401
    body = response.get_json()
    assert body["error"] == "unauthorized"
    assert "token" not in body


def test_login_unknown_username_same_answer(app, client) -> None:
    wrong_password = client.post("/api/login", json={"username": "admin", "password": "nope"})
    unknown_user = client.post("/api/login", json={"username": "ghost", "password": "nope"})

    assert unknown_user.status_code == 401
    assert unknown_user.get_json() == wrong_password.get_json()


@pytest.mark.parametrize("payload", [{}, {"username": "admin"}, {"username": " ", "password": "x"}])
def test_login_missing_fields(client, payload) -> None:
    response = client.post("/api/login", json=payload)

    assert response.status_code == 400
    assert response.get_json()["error"] == "invalid_payload"


@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/api/users"),
        ("get", "/api/clients"),
        ("post", "/api/clients"),
        ("get", "/api/barbers"),
        ("delete", "/api/barbers/1"),
        ("get", "/api/cuts"),
        ("post", "/api/cuts/1/photo"),
        ("delete", "/api/cuts/1/photos/1"),
        ("get", "/api/me"),
    ],
)
def test_protected_routes_require_token(client, method, path) -> None:
    response = getattr(client, method)(path)

    assert response.status_code == 401
    assert response.get_json()["error"] == "unauthorized"


def test_invalid_token_is_forbidden(client) -> None:
    response = client.get("/api/clients", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 403
    assert response.get_json()["error"] == "forbidden"


def test_malformed_header_counts_as_missing(client, token) -> None:
    response = client.get("/api/clients", headers={"Authorization": f"Token {token}"})

    assert response.status_code == 401


def test_expired_token_is_forbidden(app, client, token) -> None:
    app.config["TOKEN_MAX_AGE"] = -1

    response = client.get("/api/cuts", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 403
    assert response.get_json()["message"] == "token expired"


def test_token_signed_with_other_secret_is_forbidden(client) -> None:
    forged = URLSafeTimedSerializer("other-secret", salt=TOKEN_SALT).dumps(
        {"id": 1, "username": "admin", "role": "admin"}
    )

    response = client.get("/api/barbers", headers={"Authorization": f"Bearer {forged}"})

    assert response.status_code == 403


def test_non_admin_role_is_rejected(app, client) -> None:
    _create_user(username="recepcion", password="Secret123!", role="staff")
    staff_token = login(client, "recepcion", "Secret123!")

    for path in ("/api/clients", "/api/cuts", "/api/users", "/api/barbers"):
        response = client.get(path, headers={"Authorization": f"Bearer {staff_token}"})
        assert response.status_code == 403
        assert response.get_json()["message"] == "access denied"


def test_me_returns_token_identity(client, auth_headers) -> None:
    response = client.get("/api/me", headers=auth_headers)

    assert response.status_code == 200
    assert response.get_json()["username"] == "admin"
    assert response.get_json()["role"] == "admin"
