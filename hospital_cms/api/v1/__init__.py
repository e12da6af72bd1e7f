"""API routes mounted under the configured prefix."""

from fastapi import APIRouter, Depends

from hospital_cms.api.v1 import audit, auth, health, news, users
from hospital_cms.api.v1.limits import limit_api_requests

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(
    users.router, prefix="/users", tags=["users"], dependencies=[Depends(limit_api_requests)]
)
router.include_router(
    audit.router, prefix="/audit-logs", tags=["audit"], dependencies=[Depends(limit_api_requests)]
)
router.include_router(
    news.router, prefix="/news", tags=["news"], dependencies=[Depends(limit_api_requests)]
)
