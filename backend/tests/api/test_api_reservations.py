"""
Reservations API
"""
from fastapi.testclient import TestClient


PAYLOAD = {
    "camp_id": 1,
    "property_id": 2,
    "camp_name": "Mazury 2026",
    "participant_first_name": "Ola",
    "participant_last_name": "Wiśniewska",
    "total_price": "2550.00",
    "deposit_amount": "500.00",
    "payment_plan": "2",
    "selected_protection": ["protection-1"],
    "selected_addons": [],
}


class TestCreateReservation:

    def test_admin_creates(self, client: TestClient, admin_headers):
        response = client.post("/reservations", json=PAYLOAD, headers=admin_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["participant_name"] == "Ola Wiśniewska"
        assert data["status"] == "pending"

    def test_viewer_forbidden(self, client: TestClient, viewer_headers):
        response = client.post("/reservations", json=PAYLOAD, headers=viewer_headers)
        assert response.status_code == 403

    def test_invalid_plan(self, client: TestClient, admin_headers):
        response = client.post("/reservations", json={**PAYLOAD, "payment_plan": "4"}, headers=admin_headers)
        assert response.status_code == 422

    def test_invalid_selection(self, client: TestClient, admin_headers):
        response = client.post(
            "/reservations", json={**PAYLOAD, "selected_protection": ["bogus"]}, headers=admin_headers
        )
        assert response.status_code == 400


class TestReadReservations:

    def test_list_and_get(self, client: TestClient, admin_headers, viewer_headers):
        created = client.post("/reservations", json=PAYLOAD, headers=admin_headers).json()

        listing = client.get("/reservations", headers=viewer_headers)
        assert listing.status_code == 200
        assert [r["id"] for r in listing.json()] == [created["id"]]

        detail = client.get(f"/reservations/{created['id']}", headers=viewer_headers)
        assert detail.json()["selected_protection"] == ["protection-1"]

    def test_filter_by_camp(self, client: TestClient, admin_headers):
        client.post("/reservations", json=PAYLOAD, headers=admin_headers)
        response = client.get("/reservations", params={"camp_id": 99}, headers=admin_headers)
        assert response.json() == []

    def test_not_found(self, client: TestClient, admin_headers):
        assert client.get("/reservations/404", headers=admin_headers).status_code == 404

    def test_requires_auth(self, client: TestClient):
        assert client.get("/reservations").status_code in (401, 403)
