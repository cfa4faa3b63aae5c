"""Tests for client CRUD and search."""
from __future__ import annotations

from barbershop.extensions import db
from barbershop.models import Client, Cut


def test_create_client(client, auth_headers) -> None:
    response = client.post(
        "/api/clients",
        json={"name": "  Juan Pérez ", "alias": "Juancho", "phone": "555-1234", "email": "juan@example.com"},
        headers=auth_headers,
    )

    assert response.status_code == 201
    body = response.get_json()
    assert body["id"]
    assert body["name"] == "Juan Pérez"
    assert body["alias"] == "Juancho"
    assert body["createdAt"] and body["updatedAt"]


def test_create_client_requires_name(client, auth_headers) -> None:
    for payload in ({}, {"name": ""}, {"name": "   "}, {"phone": "555-1234"}):
        response = client.post("/api/clients", json=payload, headers=auth_headers)
        assert response.status_code == 400
        assert "name" in response.get_json()["details"]

    assert Client.query.count() == 0


def test_create_client_rejects_non_object_body(client, auth_headers) -> None:
    response = client.post("/api/clients", json=["Juan"], headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json()["error"] == "invalid_payload"


def test_list_clients_newest_first(client, auth_headers) -> None:
    for name in ("Ana", "Bruno", "Carla"):
        client.post("/api/clients", json={"name": name}, headers=auth_headers)

    response = client.get("/api/clients", headers=auth_headers)

    assert response.status_code == 200
    assert [c["name"] for c in response.get_json()] == ["Carla", "Bruno", "Ana"]


def test_list_clients_query_is_case_insensitive_substring(client, auth_headers, make_client) -> None:
    make_client("Juan Pérez")
    make_client("María Juana")
    make_client("Pedro")

    response = client.get("/api/clients?query=JUAN", headers=auth_headers)

    names = sorted(c["name"] for c in response.get_json())
    assert names == ["Juan Pérez", "María Juana"]


def test_list_clients_blank_query_returns_all(client, auth_headers, make_client) -> None:
    make_client("Juan")
    make_client("Pedro")

    response = client.get("/api/clients?query=%20%20", headers=auth_headers)

    assert len(response.get_json()) == 2


def test_get_client_includes_history_latest_first(client, auth_headers, make_client, make_barber, make_cut) -> None:
    juan = make_client("Juan")
    ana = make_barber("Ana")
    make_cut(juan, ana, date="2024-01-01")
    make_cut(juan, ana, date="2024-03-15", service="Barba")

    response = client.get(f"/api/clients/{juan.id}", headers=auth_headers)

    assert response.status_code == 200
    body = response.get_json()
    assert body["name"] == "Juan"
    assert [cut["date"] for cut in body["cuts"]] == ["2024-03-15", "2024-01-01"]
    assert body["cuts"][0]["Barber"]["name"] == "Ana"


def test_get_client_not_found(client, auth_headers) -> None:
    response = client.get("/api/clients/999", headers=auth_headers)

    assert response.status_code == 404


def test_update_client_partial(client, auth_headers, make_client) -> None:
    juan = make_client("Juan", phone="555-0000", notes="Prefiere tijera")

    response = client.put(
        f"/api/clients/{juan.id}", json={"phone": "555-9999"}, headers=auth_headers
    )

    assert response.status_code == 200
    updated = response.get_json()["client"]
    assert updated["phone"] == "555-9999"
    assert updated["name"] == "Juan"
    assert updated["notes"] == "Prefiere tijera"


def test_update_client_rejects_empty_name(client, auth_headers, make_client) -> None:
    juan = make_client("Juan")

    for name in ("", None):
        response = client.put(f"/api/clients/{juan.id}", json={"name": name}, headers=auth_headers)
        assert response.status_code == 400

    assert db.session.get(Client, juan.id).name == "Juan"


def test_update_client_not_found(client, auth_headers) -> None:
    response = client.put("/api/clients/999", json={"name": "Nadie"}, headers=auth_headers)

    assert response.status_code == 404


def test_delete_client_removes_cuts(client, auth_headers, make_client, make_barber, make_cut) -> None:
    juan = make_client("Juan")
    pedro = make_client("Pedro")
    ana = make_barber("Ana")
    make_cut(juan, ana)
    make_cut(juan, ana)
    kept = make_cut(pedro, ana)
    juan_id = juan.id

    response = client.delete(f"/api/clients/{juan_id}", headers=auth_headers)

    assert response.status_code == 200
    assert response.get_json() == {"deleted": 1}
    assert Client.query.filter_by(id=juan_id).first() is None
    assert [cut.id for cut in Cut.query.all()] == [kept.id]


def test_delete_client_not_found(client, auth_headers) -> None:
    response = client.delete("/api/clients/999", headers=auth_headers)

    assert response.status_code == 404
