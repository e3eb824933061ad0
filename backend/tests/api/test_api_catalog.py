"""
Catalog API
"""
from fastapi.testclient import TestClient


class TestTurnusCatalog:

    def test_override_and_fallback(self, client: TestClient, viewer_headers, sample_catalog, turnus_override):
        response = client.get("/api/camps/10/properties/20/protections", headers=viewer_headers)
        assert response.status_code == 200
        entry = response.json()[0]
        assert entry["name"] == "Rezygnacja (lato)"
        assert float(entry["price"]) == 250.0
        assert entry["turnus_specific"] is True

        other = client.get("/api/camps/10/properties/21/protections", headers=viewer_headers).json()[0]
        assert float(other["price"]) == 200.0
        assert other["turnus_specific"] is False

    def test_addons_and_diets(self, client: TestClient, viewer_headers, sample_catalog):
        addons = client.get("/api/camps/1/properties/1/addons", headers=viewer_headers).json()
        diets = client.get("/api/camps/1/properties/1/diets", headers=viewer_headers).json()
        assert [a["name"] for a in addons] == ["Kajaki"]
        assert [d["name"] for d in diets] == ["Wege"]


class TestCatalogAdmin:

    def test_create_item_and_price(self, client: TestClient, admin_headers):
        item = client.post(
            "/api/catalog/items", json={"kind": "addon", "name": "Quad", "price": "120.00"}, headers=admin_headers
        ).json()
        response = client.put(
            "/api/camps/3/properties/4/prices", json={"item_id": item["id"], "price": "99.00"}, headers=admin_headers
        )
        assert response.status_code == 200

        addons = client.get("/api/camps/3/properties/4/addons", headers=admin_headers).json()
        assert float(addons[0]["price"]) == 99.0
        assert addons[0]["name"] == "Quad"

    def test_price_for_unknown_item(self, client: TestClient, admin_headers):
        response = client.put(
            "/api/camps/3/properties/4/prices", json={"item_id": 999, "price": "1.00"}, headers=admin_headers
        )
        assert response.status_code == 404

    def test_accountant_cannot_edit(self, client: TestClient, accountant_headers):
        response = client.post(
            "/api/catalog/items", json={"kind": "diet", "name": "X", "price": "1"}, headers=accountant_headers
        )
        assert response.status_code == 403
