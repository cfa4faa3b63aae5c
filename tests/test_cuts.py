"""Tests for recording, filtering, editing and deleting cuts."""
from __future__ import annotations

import pytest

from barbershop.extensions import db
from barbershop.models import Cut


def test_register_cut_end_to_end(client, auth_headers) -> None:
    barber = client.post("/api/barbers", json={"name": "Ana"}, headers=auth_headers).get_json()
    customer = client.post("/api/clients", json={"name": "Juan"}, headers=auth_headers).get_json()

    created = client.post(
        "/api/cuts",
        json={
            "clientId": customer["id"],
            "barberId": barber["id"],
            "service": "Corte",
            "date": "2024-01-01",
            "metodoPago": "efectivo",
        },
        headers=auth_headers,
    )
    assert created.status_code == 201

    listing = client.get("/api/cuts", headers=auth_headers).get_json()

    assert len(listing) == 1
    cut = listing[0]
    assert cut["Client"]["name"] == "Juan"
    assert cut["Barber"]["name"] == "Ana"
    assert cut["service"] == "Corte"
    assert cut["date"] == "2024-01-01"
    assert cut["metodoPago"] == "efectivo"
    assert cut["photos"] == []


@pytest.mark.parametrize("missing", ["clientId", "barberId", "service", "date"])
def test_create_cut_missing_required_field(client, auth_headers, make_client, make_barber, missing) -> None:
    payload = {
        "clientId": make_client().id,
        "barberId": make_barber().id,
        "service": "Corte",
        "date": "2024-01-01",
    }
    payload.pop(missing)

    response = client.post("/api/cuts", json=payload, headers=auth_headers)

    assert response.status_code == 400
    assert missing in response.get_json()["details"]
    assert Cut.query.count() == 0


def test_create_cut_unknown_references(client, auth_headers, make_barber) -> None:
    barber = make_barber()

    response = client.post(
        "/api/cuts",
        json={"clientId": 999, "barberId": barber.id, "service": "Corte", "date": "2024-01-01"},
        headers=auth_headers,
    )

    assert response.status_code == 400
    body = response.get_json()
    assert body["error"] == "invalid_reference"
    assert "clientId" in body["details"]
    assert Cut.query.count() == 0


def test_list_cuts_newest_first(client, auth_headers, make_client, make_barber, make_cut) -> None:
    juan, ana = make_client(), make_barber()
    first = make_cut(juan, ana, date="2024-05-01")
    second = make_cut(juan, ana, date="2024-01-01")
    expected = [second.id, first.id]

    listing = client.get("/api/cuts", headers=auth_headers).get_json()

    assert [cut["id"] for cut in listing] == expected


def test_list_cuts_filters(client, auth_headers, make_client, make_barber, make_cut) -> None:
    juan, pedro = make_client("Juan"), make_client("Pedro")
    ana, luis = make_barber("Ana"), make_barber("Luis")
    make_cut(juan, ana, service="Corte", date="2024-01-01")
    make_cut(juan, luis, service="Barba", date="2024-01-01")
    make_cut(pedro, ana, service="Corte", date="2024-01-02")
    juan_id, ana_id = juan.id, ana.id

    def ids_for(query: str) -> int:
        return len(client.get(f"/api/cuts?{query}", headers=auth_headers).get_json())

    assert ids_for("date=2024-01-01") == 2
    assert ids_for("service=Corte") == 2
    assert ids_for("service=Corte&date=2024-01-02") == 1
    assert ids_for(f"clientId={juan_id}") == 2
    assert ids_for(f"barberId={ana_id}") == 2
    assert ids_for("date=2030-01-01") == 0


def test_get_cut(client, auth_headers, make_client, make_barber, make_cut) -> None:
    cut = make_cut(make_client("Juan"), make_barber("Ana"), detail="Degradado")

    response = client.get(f"/api/cuts/{cut.id}", headers=auth_headers)

    assert response.status_code == 200
    assert response.get_json()["detail"] == "Degradado"
    assert response.get_json()["Client"]["name"] == "Juan"


def test_get_cut_not_found(client, auth_headers) -> None:
    assert client.get("/api/cuts/999", headers=auth_headers).status_code == 404


def test_update_cut_partial(client, auth_headers, make_client, make_barber, make_cut) -> None:
    cut = make_cut(make_client(), make_barber(), service="Corte", metodo_pago="efectivo", nota="vieja")

    response = client.put(
        f"/api/cuts/{cut.id}",
        json={"service": "Corte + Barba", "metodoPago": "transferencia"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    body = response.get_json()
    assert body["updated"] is True
    assert body["cut"]["service"] == "Corte + Barba"
    assert body["cut"]["metodoPago"] == "transferencia"
    assert body["cut"]["nota"] == "vieja"
    assert body["cut"]["date"] == "2024-01-01"


def test_update_cut_reassigns_barber(client, auth_headers, make_client, make_barber, make_cut) -> None:
    cut = make_cut(make_client(), make_barber("Ana"))
    luis = make_barber("Luis")

    response = client.put(f"/api/cuts/{cut.id}", json={"barberId": luis.id}, headers=auth_headers)

    assert response.status_code == 200
    assert response.get_json()["cut"]["Barber"]["name"] == "Luis"


def test_update_cut_unknown_barber(client, auth_headers, make_client, make_barber, make_cut) -> None:
    cut = make_cut(make_client(), make_barber())

    response = client.put(f"/api/cuts/{cut.id}", json={"barberId": 999}, headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json()["error"] == "invalid_reference"


def test_update_cut_rejects_null_required_field(client, auth_headers, make_client, make_barber, make_cut) -> None:
    cut = make_cut(make_client(), make_barber())

    response = client.put(f"/api/cuts/{cut.id}", json={"service": None}, headers=auth_headers)

    assert response.status_code == 400
    assert db.session.get(Cut, cut.id).service == "Corte"


def test_update_cut_not_found(client, auth_headers) -> None:
    response = client.put("/api/cuts/999", json={"service": "Barba"}, headers=auth_headers)

    assert response.status_code == 404


def test_delete_cut(client, auth_headers, make_client, make_barber, make_cut) -> None:
    cut_id = make_cut(make_client(), make_barber()).id

    response = client.delete(f"/api/cuts/{cut_id}", headers=auth_headers)

    assert response.status_code == 200
    assert response.get_json() == {"deleted": 1}
    assert Cut.query.filter_by(id=cut_id).first() is None


def test_delete_cut_not_found(client, auth_headers) -> None:
    assert client.delete("/api/cuts/999", headers=auth_headers).status_code == 404
