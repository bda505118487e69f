from fastapi import APIRouter

from app.tcg.core.config import settings
from app.tcg.routers.auth import router as auth_router
from app.tcg.routers.health import router as health_router
from app.tcg.routers.inventory import router as inventory_router
from app.tcg.routers.metrics import router as metrics_router
from app.tcg.routers.products import router as products_router
from app.tcg.routers.stores import router as stores_router
from app.tcg.routers.transfer_requests import router as transfer_requests_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(auth_router, prefix="/api/auth")
api_router.include_router(stores_router, prefix="/api/stores")
api_router.include_router(products_router, prefix="/api/products")
api_router.include_router(inventory_router, prefix="/api")
api_router.include_router(transfer_requests_router, prefix="/api/transfer-requests")
if settings.METRICS_ENABLED:
    api_router.include_router(metrics_router)
