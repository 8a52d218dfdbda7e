"""
FastAPI dependencies for the record store and the business services.

Each request gets one ``RepositoryRegistry``. On the database backend the
registry wraps a single session that commits when the request succeeds and
rolls back when it raises, so multi-record operations are atomic.
"""

from typing import Annotated, AsyncGenerator

from fastapi import Depends

from dealerhub.core.config import get_settings
from dealerhub.core.logging import get_logger
from dealerhub.database.connection import get_session
from dealerhub.repositories.memory import get_memory_store
from dealerhub.repositories.registry import (
    RepositoryRegistry,
    build_memory_registry,
    build_sql_registry,
)
from dealerhub.services.catalog.service import CatalogService
from dealerhub.services.contracts.service import ContractService
from dealerhub.services.dealers.service import DealerService
from dealerhub.services.defects.service import DefectService
from dealerhub.services.documents.renderer import DocumentService
from dealerhub.services.orders.service import OrderService
from dealerhub.services.pricing.pricing_engine import PricingEngine
from dealerhub.services.quotes.service import QuoteService
from dealerhub.services.storage.blob_storage import BlobStorage, create_blob_storage
from dealerhub.services.vehicles.service import VehicleService

logger = get_logger(__name__)


async def get_repositories() -> AsyncGenerator[RepositoryRegistry, None]:
    """
    Provide the repository registry for the configured storage backend.

    Yields:
        Registry bound to the memory store or to a request-scoped session
    """
    if not get_settings().uses_database:
        yield build_memory_registry(get_memory_store())
        return

    async with get_session() as session:
        yield build_sql_registry(session)


def get_pricing_engine() -> PricingEngine:
    return PricingEngine()


def get_blob_storage() -> BlobStorage:
    return create_blob_storage()


Repositories = Annotated[RepositoryRegistry, Depends(get_repositories)]
Engine = Annotated[PricingEngine, Depends(get_pricing_engine)]
Storage = Annotated[BlobStorage, Depends(get_blob_storage)]


def get_catalog_service(repositories: Repositories) -> CatalogService:
    return CatalogService(repositories)


def get_vehicle_service(repositories: Repositories, engine: Engine) -> VehicleService:
    return VehicleService(repositories, engine)


def get_quote_service(repositories: Repositories, engine: Engine) -> QuoteService:
    return QuoteService(repositories, engine)


def get_order_service(repositories: Repositories) -> OrderService:
    return OrderService(repositories)


def get_dealer_service(repositories: Repositories, storage: Storage) -> DealerService:
    return DealerService(repositories, storage)


def get_contract_service(repositories: Repositories) -> ContractService:
    return ContractService(repositories)


def get_defect_service(repositories: Repositories, storage: Storage) -> DefectService:
    return DefectService(repositories, storage)


def get_document_service(repositories: Repositories) -> DocumentService:
    return DocumentService(repositories)


CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]
VehicleServiceDep = Annotated[VehicleService, Depends(get_vehicle_service)]
QuoteServiceDep = Annotated[QuoteService, Depends(get_quote_service)]
OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]
DealerServiceDep = Annotated[DealerService, Depends(get_dealer_service)]
ContractServiceDep = Annotated[ContractService, Depends(get_contract_service)]
DefectServiceDep = Annotated[DefectService, Depends(get_defect_service)]
DocumentServiceDep = Annotated[DocumentService, Depends(get_document_service)]
