"""
API v1 routers.

``api_router`` bundles every v1 router and is mounted under the configured
API prefix by the application.
"""

from fastapi import APIRouter

from dealerhub.api.v1.catalog import router as catalog_router
from dealerhub.api.v1.contracts import router as contracts_router
from dealerhub.api.v1.dealers import router as dealers_router
from dealerhub.api.v1.defect_reports import router as defect_reports_router
from dealerhub.api.v1.orders import router as orders_router
from dealerhub.api.v1.quotes import router as quotes_router
from dealerhub.api.v1.vehicles import router as vehicles_router

api_router = APIRouter()
api_router.include_router(catalog_router)
api_router.include_router(vehicles_router)
api_router.include_router(quotes_router)
api_router.include_router(orders_router)
api_router.include_router(dealers_router)
api_router.include_router(contracts_router)
api_router.include_router(defect_reports_router)

__all__ = ["api_router"]
