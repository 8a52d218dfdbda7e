"""
Tests for the order API endpoints.
"""

from decimal import Decimal

import pytest
from fastapi import status
from fastapi.testclient import TestClient


@pytest.fixture
def api_order(test_client: TestClient, api_vehicle, api_dealer) -> dict:
    response = test_client.post(
        "/api/v1/orders",
        json={
            "vehicleId": api_vehicle["id"],
            "dealerId": api_dealer["id"],
            "customerName": "Mario Rossi",
        },
    )
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()


# ============================================================================
# Order Placement and Editing
# ============================================================================


class TestOrderEndpoints:
    def test_create_snapshots_dealer_and_vehicle(self, api_order):
        assert api_order["status"] == "processing"
        assert api_order["progressiveNumber"] == 1
        assert api_order["dealerName"] == "Autocirelli Milano Srl"
        assert api_order["modelName"] == "Aurora"
        assert Decimal(api_order["price"]) == Decimal("23500")
        assert Decimal(api_order["plafondDealer"]) == Decimal("50000")
        assert api_order["details"]["odlGenerated"] is False

    def test_create_with_unknown_dealer_is_404(self, test_client: TestClient, api_vehicle):
        response = test_client.post(
            "/api/v1/orders",
            json={"vehicleId": api_vehicle["id"], "dealerId": "missing", "customerName": "X"},
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_reserved_vehicle_becomes_ordered(
        self, test_client: TestClient, api_vehicle, api_dealer
    ):
        test_client.post(
            f"/api/v1/vehicles/{api_vehicle['id']}/reserve",
            json={"reservedBy": "Autocirelli Milano"},
        )

        test_client.post(
            "/api/v1/orders",
            json={
                "vehicleId": api_vehicle["id"],
                "dealerId": api_dealer["id"],
                "customerName": "Mario Rossi",
            },
        )

        vehicle = test_client.get(f"/api/v1/vehicles/{api_vehicle['id']}").json()
        assert vehicle["status"] == "ordered"

    def test_update_details_merges(self, test_client: TestClient, api_order):
        url = f"/api/v1/orders/{api_order['id']}/details"

        test_client.patch(url, json={"isPaid": True, "fundingType": "Factor"})
        response = test_client.patch(url, json={"invoiceNumber": "FT-2026-001"})

        assert response.status_code == status.HTTP_200_OK
        details = response.json()["details"]
        assert details["isPaid"] is True
        assert details["fundingType"] == "Factor"
        assert details["invoiceNumber"] == "FT-2026-001"

    def test_update_order(self, test_client: TestClient, api_order):
        response = test_client.patch(
            f"/api/v1/orders/{api_order['id']}", json={"customerName": "Mario Bianchi"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["customerName"] == "Mario Bianchi"

    def test_list_and_stats(self, test_client: TestClient, api_order, api_dealer):
        response = test_client.get("/api/v1/orders", params={"dealerId": api_dealer["id"]})
        assert response.json()["total"] == 1

        response = test_client.get("/api/v1/orders/stats")
        assert response.json() == {
            "processing": 1,
            "delivered": 0,
            "cancelled": 0,
            "total": 1,
        }

    def test_delete(self, test_client: TestClient, api_order):
        response = test_client.delete(f"/api/v1/orders/{api_order['id']}")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert test_client.get("/api/v1/orders").json()["total"] == 0


# ============================================================================
# Delivery and Cancellation
# ============================================================================


class TestOrderTransitionEndpoints:
    def test_delivery_requires_odl(self, test_client: TestClient, api_order):
        response = test_client.post(f"/api/v1/orders/{api_order['id']}/deliver")

        assert response.status_code == status.HTTP_409_CONFLICT
        detail = response.json()["detail"]
        assert detail["message"] == "ODL not generated"
        assert detail["current_state"] == "processing"
        assert detail["target_state"] == "delivered"

        order = test_client.get(f"/api/v1/orders/{api_order['id']}").json()
        assert order["status"] == "processing"

    def test_deliver_after_odl(self, test_client: TestClient, api_order, api_vehicle):
        order_id = api_order["id"]

        response = test_client.post(f"/api/v1/orders/{order_id}/generate-odl")
        assert response.json()["details"]["odlGenerated"] is True

        response = test_client.post(f"/api/v1/orders/{order_id}/deliver")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "delivered"
        assert response.json()["deliveryDate"] is not None

        vehicle = test_client.get(f"/api/v1/vehicles/{api_vehicle['id']}").json()
        assert vehicle["status"] == "delivered"
        assert vehicle["location"] == "Stock Dealer"

    def test_cancel_then_edit_is_refused(self, test_client: TestClient, api_order):
        order_id = api_order["id"]

        response = test_client.post(f"/api/v1/orders/{order_id}/cancel")
        assert response.json()["status"] == "cancelled"

        response = test_client.post(f"/api/v1/orders/{order_id}/cancel")
        assert response.status_code == status.HTTP_409_CONFLICT

        response = test_client.patch(
            f"/api/v1/orders/{order_id}", json={"customerName": "Mario Bianchi"}
        )
        assert response.status_code == status.HTTP_409_CONFLICT

        response = test_client.post(f"/api/v1/orders/{order_id}/generate-odl")
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_document(self, test_client: TestClient, api_order):
        response = test_client.get(f"/api/v1/orders/{api_order['id']}/document")

        assert response.status_code == status.HTTP_200_OK
        assert "Mario Rossi" in response.text
        assert "Ordine n° 1" in response.text
