"""
Tests for the catalog API endpoints.
"""

from decimal import Decimal

from fastapi import status
from fastapi.testclient import TestClient


class TestCatalogEndpoints:
    def test_snapshot(self, test_client: TestClient, api_catalog):
        response = test_client.get("/api/v1/catalog")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert [m["name"] for m in data["models"]] == ["Aurora"]
        assert {a["name"] for a in data["accessories"]} == {"Tetto apribile", "Tappetini"}
        assert "fuelTypes" in data

    def test_accessory_net_price_derived(self, test_client: TestClient, api_catalog):
        response = test_client.get("/api/v1/catalog/accessories")

        by_name = {a["name"]: a for a in response.json()["items"]}
        assert Decimal(by_name["Tetto apribile"]["priceWithoutVat"]) == Decimal("820")

    def test_duplicate_name_is_409(self, test_client: TestClient, api_catalog):
        response = test_client.post(
            "/api/v1/catalog/models", json={"name": "Aurora", "basePrice": "1"}
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert "already exists" in response.json()["detail"]

    def test_update_and_delete(self, test_client: TestClient, api_catalog):
        model_id = api_catalog["model_id"]

        response = test_client.patch(
            f"/api/v1/catalog/models/{model_id}", json={"basePrice": "21000"}
        )
        assert response.status_code == status.HTTP_200_OK
        assert Decimal(response.json()["basePrice"]) == Decimal("21000")

        response = test_client.delete(f"/api/v1/catalog/models/{model_id}")
        assert response.status_code == status.HTTP_204_NO_CONTENT

        response = test_client.get(f"/api/v1/catalog/models/{model_id}")
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestCompatibilityEndpoints:
    def test_trims_for_model(self, test_client: TestClient, api_catalog):
        response = test_client.get(f"/api/v1/catalog/models/{api_catalog['model_id']}/trims")

        assert response.status_code == status.HTTP_200_OK
        assert [t["name"] for t in response.json()["items"]] == ["Premium"]

        response = test_client.get("/api/v1/catalog/models/other-model/trims")
        assert response.json()["total"] == 0

    def test_accessories_for_model_and_trim(self, test_client: TestClient, api_catalog):
        response = test_client.get(
            f"/api/v1/catalog/models/{api_catalog['model_id']}"
            f"/trims/{api_catalog['trim_id']}/accessories"
        )

        assert {a["name"] for a in response.json()["items"]} == {"Tetto apribile", "Tappetini"}

        response = test_client.get(
            f"/api/v1/catalog/models/{api_catalog['model_id']}/trims/other-trim/accessories"
        )
        assert [a["name"] for a in response.json()["items"]] == ["Tappetini"]
