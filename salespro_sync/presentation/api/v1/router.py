"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from salespro_sync.presentation.api.v1.endpoints.content import router as content_router
from salespro_sync.presentation.api.v1.endpoints.health import router as health_router
from salespro_sync.presentation.api.v1.endpoints.sync_events import router as sync_events_router
from salespro_sync.presentation.api.v1.endpoints.users import router as users_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(users_router)
router.include_router(content_router)
router.include_router(sync_events_router)
