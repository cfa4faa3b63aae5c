"""Tests for barber CRUD."""
from __future__ import annotations

from barbershop.extensions import db
from barbershop.models import Barber, Cut


def test_create_and_list_barbers(client, auth_headers) -> None:
    created = client.post("/api/barbers", json={"name": "Ana"}, headers=auth_headers)
    client.post("/api/barbers", json={"name": "Luis"}, headers=auth_headers)

    assert created.status_code == 201
    assert created.get_json()["name"] == "Ana"

    response = client.get("/api/barbers", headers=auth_headers)
    assert [b["name"] for b in response.get_json()] == ["Luis", "Ana"]


def test_create_barber_requires_name(client, auth_headers) -> None:
    response = client.post("/api/barbers", json={"name": "  "}, headers=auth_headers)

    assert response.status_code == 400
    assert Barber.query.count() == 0


def test_get_barber_with_cut_count(client, auth_headers, make_client, make_barber, make_cut) -> None:
    juan = make_client("Juan")
    ana = make_barber("Ana")
    luis = make_barber("Luis")
    make_cut(juan, ana)
    make_cut(juan, ana)
    make_cut(juan, luis)

    body = client.get(f"/api/barbers/{ana.id}", headers=auth_headers).get_json()

    assert body["name"] == "Ana"
    assert body["cutCount"] == 2


def test_get_barber_not_found(client, auth_headers) -> None:
    assert client.get("/api/barbers/999", headers=auth_headers).status_code == 404


def test_update_barber(client, auth_headers, make_barber) -> None:
    ana = make_barber("Ana")

    response = client.put(f"/api/barbers/{ana.id}", json={"name": "Ana María"}, headers=auth_headers)

    assert response.status_code == 200
    assert response.get_json()["barber"]["name"] == "Ana María"


def test_update_barber_rejects_null_name(client, auth_headers, make_barber) -> None:
    ana = make_barber("Ana")

    response = client.put(f"/api/barbers/{ana.id}", json={"name": None}, headers=auth_headers)

    assert response.status_code == 400
    assert db.session.get(Barber, ana.id).name == "Ana"


def test_update_barber_not_found(client, auth_headers) -> None:
    response = client.put("/api/barbers/999", json={"name": "X"}, headers=auth_headers)

    assert response.status_code == 404


def test_delete_barber_removes_their_cuts(client, auth_headers, make_client, make_barber, make_cut) -> None:
    juan = make_client("Juan")
    ana = make_barber("Ana")
    luis = make_barber("Luis")
    make_cut(juan, ana)
    kept = make_cut(juan, luis)
    ana_id = ana.id

    response = client.delete(f"/api/barbers/{ana_id}", headers=auth_headers)

    assert response.status_code == 200
    assert Barber.query.filter_by(id=ana_id).first() is None
    assert [cut.id for cut in Cut.query.all()] == [kept.id]


def test_delete_barber_not_found(client, auth_headers) -> None:
    assert client.delete("/api/barbers/999", headers=auth_headers).status_code == 404
