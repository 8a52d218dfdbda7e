"""
Pytest configuration and shared test fixtures.

Tests run against the in-memory record store with no demo data, no rate
limiting and a fake blob storage, so nothing touches a database, the disk
or S3 unless a test asks for it.
"""

import os

os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("APP_STORAGE_BACKEND", "memory")
os.environ.setdefault("APP_SEED_DEMO_DATA", "false")
os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("APP_BLOB_STORAGE_BACKEND", "local")

from decimal import Decimal
from typing import Callable, Generator, Optional

import pytest
from fastapi.testclient import TestClient

from dealerhub.api.deps import get_blob_storage
from dealerhub.main import app
from dealerhub.repositories.memory import get_memory_store, reset_memory_store
from dealerhub.repositories.registry import RepositoryRegistry, build_memory_registry
from dealerhub.services.storage.blob_storage import BlobStorageError

MODEL_ID = "model-aurora"
OTHER_MODEL_ID = "model-brezza"
TRIM_ID = "trim-premium"


class FakeBlobStorage:
    """Blob storage double that keeps uploads in memory."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.uploads: list[dict] = []

    async def upload(
        self, folder: str, filename: str, content: bytes, content_type: Optional[str] = None
    ) -> str:
        if self.fail:
            raise BlobStorageError("Storage service unreachable", code="UPLOAD_FAILED")
        if not content:
            raise BlobStorageError("Uploaded file is empty", code="EMPTY_FILE")
        self.uploads.append(
            {
                "folder": folder,
                "filename": filename,
                "content": content,
                "content_type": content_type,
            }
        )
        return f"https://files.test/{folder}/{filename}"


@pytest.fixture
async def catalog(registry: RepositoryRegistry) -> dict:
    """
    Load a small catalog.

    Aurora + Premium + Benzina + Blu (metallizzato) + Manuale costs
    20000 + 2000 + 0 + 500 + 0; the sunroof adds 1000 on Aurora Premium.
    """
    await registry.models.create({"id": MODEL_ID, "name": "Aurora", "base_price": Decimal("20000")})
    await registry.models.create(
        {"id": OTHER_MODEL_ID, "name": "Brezza", "base_price": Decimal("15000")}
    )
    await registry.trims.create(
        {
            "id": TRIM_ID,
            "name": "Premium",
            "base_price": Decimal("2000"),
            "compatible_models": [MODEL_ID],
        }
    )
    await registry.trims.create({"id": "trim-plus", "name": "Plus", "base_price": Decimal("0")})
    await registry.fuel_types.create(
        {"id": "fuel-benzina", "name": "Benzina", "price_adjustment": Decimal("0")}
    )
    await registry.colors.create(
        {
            "id": "color-blu",
            "name": "Blu",
            "type": "metallizzato",
            "price_adjustment": Decimal("500"),
        }
    )
    await registry.colors.create(
        {
            "id": "color-bianco",
            "name": "Bianco",
            "type": "pastello",
            "price_adjustment": Decimal("0"),
            "compatible_models": [OTHER_MODEL_ID],
        }
    )
    await registry.transmissions.create(
        {"id": "trans-manuale", "name": "Manuale", "price_adjustment": Decimal("0")}
    )
    await registry.accessories.create(
        {
            "id": "acc-tetto",
            "name": "Tetto apribile",
            "price_with_vat": Decimal("1000"),
            "price_without_vat": Decimal("820"),
            "compatible_models": [MODEL_ID],
            "compatible_trims": [TRIM_ID],
        }
    )
    await registry.accessories.create(
        {
            "id": "acc-tappetini",
            "name": "Tappetini",
            "price_with_vat": Decimal("150"),
            "price_without_vat": Decimal("123"),
        }
    )
    await registry.accessories.create(
        {
            "id": "acc-gancio",
            "name": "Gancio traino",
            "price_with_vat": Decimal("600"),
            "price_without_vat": Decimal("492"),
            "compatible_models": [OTHER_MODEL_ID],
        }
    )
    return {"model_id": MODEL_ID, "other_model_id": OTHER_MODEL_ID, "trim_id": TRIM_ID}


@pytest.fixture
async def dealer(registry: RepositoryRegistry):
    return await registry.dealers.create(
        {
            "id": "dealer-milano",
            "company_name": "Autocirelli Milano Srl",
            "email": "milano@autocirelli.it",
            "password": "not-a-real-hash",
            "credit_limit": Decimal("50000"),
        }
    )


@pytest.fixture
def aurora() -> Callable[..., dict]:
    """Factory for a fully configured Aurora in physical stock."""

    def build(**overrides) -> dict:
        values = {
            "model": "Aurora",
            "trim": "Premium",
            "fuel_type": "Benzina",
            "exterior_color": "Blu (metallizzato)",
            "transmission": "Manuale",
            "accessories": ["Tetto apribile"],
            "location": "Stock Italia",
            "telaio": "ZCF123456789",
        }
        values.update(overrides)
        return values

    return build


@pytest.fixture(autouse=True)
def reset_store() -> Generator[None, None, None]:
    """Give every test an empty memory store."""
    reset_memory_store()
    yield
    reset_memory_store()


@pytest.fixture
def registry() -> RepositoryRegistry:
    return build_memory_registry(get_memory_store())


@pytest.fixture
def fake_storage() -> FakeBlobStorage:
    return FakeBlobStorage()


@pytest.fixture(scope="function")
def test_client(fake_storage: FakeBlobStorage) -> Generator[TestClient, None, None]:
    """
    Synchronous test client with the fake blob storage injected.

    Example:
        def test_health_endpoint(test_client):
            response = test_client.get("/health")
            assert response.status_code == 200
    """
    app.dependency_overrides[get_blob_storage] = lambda: fake_storage
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def api_catalog(test_client: TestClient) -> dict:
    """Load the Aurora catalog through the catalog API."""

    def post(path: str, body: dict) -> dict:
        response = test_client.post(f"/api/v1/catalog/{path}", json=body)
        assert response.status_code == 201, response.text
        return response.json()

    model = post("models", {"name": "Aurora", "basePrice": "20000"})
    trim = post(
        "trims", {"name": "Premium", "basePrice": "2000", "compatibleModels": [model["id"]]}
    )
    post("fuel-types", {"name": "Benzina", "priceAdjustment": "0"})
    post("colors", {"name": "Blu", "type": "metallizzato", "priceAdjustment": "500"})
    post("transmissions", {"name": "Manuale", "priceAdjustment": "0"})
    post(
        "accessories",
        {
            "name": "Tetto apribile",
            "priceWithVat": "1000",
            "compatibleModels": [model["id"]],
            "compatibleTrims": [trim["id"]],
        },
    )
    post("accessories", {"name": "Tappetini", "priceWithVat": "150"})
    return {"model_id": model["id"], "trim_id": trim["id"]}


@pytest.fixture
def api_dealer(test_client: TestClient) -> dict:
    response = test_client.post(
        "/api/v1/dealers",
        json={
            "companyName": "Autocirelli Milano Srl",
            "email": "milano@autocirelli.it",
            "password": "segreto-123",
            "creditLimit": "50000",
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def api_vehicle(test_client: TestClient, api_catalog: dict, aurora) -> dict:
    """Aurora in physical stock priced at 23500, created through the API."""
    response = test_client.post("/api/v1/vehicles", json=aurora())
    assert response.status_code == 201, response.text
    return response.json()
