"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from dairy_dashboard.presentation.api.v1.endpoints.health import router as health_router
from dairy_dashboard.presentation.api.v1.endpoints.session import router as session_router
from dairy_dashboard.presentation.api.v1.endpoints.supervisors import router as supervisors_router
from dairy_dashboard.presentation.api.v1.modules_controller import router as modules_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(session_router)
router.include_router(modules_router)
router.include_router(supervisors_router)
