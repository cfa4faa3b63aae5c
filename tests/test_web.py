"""Tests for the dashboard fallback and unknown routes."""
from __future__ import annotations

import os

import pytest


@pytest.fixture
def dist(app):
    folder = app.config["FRONTEND_DIST"]
    os.makedirs(os.path.join(folder, "assets"), exist_ok=True)
    with open(os.path.join(folder, "index.html"), "w", encoding="utf-8") as fh:
        fh.write("<div id=root></div>")
    with open(os.path.join(folder, "assets", "app.js"), "w", encoding="utf-8") as fh:
        fh.write("console.log('ok')")
    return folder


def test_spa_serves_index(client, dist) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert b"id=root" in response.data


def test_spa_client_route_falls_back_to_index(client, dist) -> None:
    response = client.get("/clientes/3")

    assert response.status_code == 200
    assert b"id=root" in response.data


def test_spa_serves_static_asset(client, dist) -> None:
    response = client.get("/assets/app.js")

    assert response.status_code == 200
    assert b"console.log" in response.data


def test_unknown_api_route_is_json_404(client, dist) -> None:
    response = client.get("/api/does-not-exist")

    assert response.status_code == 404
    assert response.is_json
    assert response.get_json()["error"] == "not_found"


def test_no_dashboard_build_is_404(client) -> None:
    assert client.get("/clientes").status_code == 404


def test_missing_upload_is_404(client) -> None:
    assert client.get("/uploads/nothing-here.jpg").status_code == 404
