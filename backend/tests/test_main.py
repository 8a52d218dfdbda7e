"""
Test suite for the FastAPI application: health endpoints, request
correlation, shared exception handlers and error message classification.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from dealerhub.api.errors import GENERIC_FAILURE_MESSAGE, classify_error_message
from dealerhub.repositories.base import RepositoryError


# ============================================================================
# Health Endpoints
# ============================================================================


class TestHealthEndpoints:
    def test_health_check(self, test_client: TestClient):
        response = test_client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "healthy"
        assert data["environment"] == "test"
        assert data["storage_backend"] == "memory"

    def test_readiness_on_memory_backend(self, test_client: TestClient):
        response = test_client.get("/ready")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["database"] == "not_used"

    def test_readiness_reports_unhealthy_database(self, test_client: TestClient):
        with patch("dealerhub.main.settings.storage_backend", "database"), patch(
            "dealerhub.main.check_database_health", AsyncMock(return_value=False)
        ):
            response = test_client.get("/ready")

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["status"] == "not_ready"


# ============================================================================
# Middleware
# ============================================================================


class TestRequestCorrelation:
    def test_request_id_is_echoed(self, test_client: TestClient):
        response = test_client.get("/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_is_generated(self, test_client: TestClient):
        response = test_client.get("/health")

        assert response.headers["X-Request-ID"]

    def test_cors_preflight(self, test_client: TestClient):
        response = test_client.options(
            "/api/v1/vehicles",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "GET",
            },
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.headers["access-control-allow-origin"] == "http://localhost:5173"


# ============================================================================
# Exception Handlers
# ============================================================================


class TestExceptionHandlers:
    def test_missing_record_is_404(self, test_client: TestClient):
        response = test_client.get(
            "/api/v1/vehicles/missing", headers={"X-Request-ID": "req-404"}
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        body = response.json()
        assert body["error"] == "Not Found"
        assert body["message"] == "Vehicle not found: missing"
        assert body["request_id"] == "req-404"

    def test_request_validation_is_422(self, test_client: TestClient):
        response = test_client.post("/api/v1/catalog/models", json={"name": "Aurora"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"] == "Validation Error"

    def test_store_failure_gets_friendly_message(self, test_client: TestClient):
        with patch(
            "dealerhub.services.catalog.service.CatalogService.load_snapshot",
            AsyncMock(side_effect=RepositoryError("connection refused by server")),
        ):
            response = test_client.get("/api/v1/catalog")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["message"] == (
            "Impossibile contattare il database, riprovare più tardi"
        )


class TestClassifyErrorMessage:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            (
                "new row violates row-level security policy",
                "Permessi insufficienti per completare l'operazione",
            ),
            (
                "duplicate key value violates unique constraint",
                "Esiste già un record con questi dati",
            ),
            ("Network timeout", "Impossibile contattare il database, riprovare più tardi"),
            ("something odd", GENERIC_FAILURE_MESSAGE),
        ],
    )
    def test_classification(self, raw, expected):
        assert classify_error_message(raw) == expected

    def test_first_matching_rule_wins(self):
        assert classify_error_message("permission denied: connection closed") == (
            "Permessi insufficienti per completare l'operazione"
        )
