"""Liveness endpoint for load balancers and the mobile client."""

from fastapi import APIRouter

from culturepass_api.app.core.config import settings
from culturepass_api.app.schemas.admin import HealthRead

router = APIRouter()


@router.get("/health", response_model=HealthRead)
async def health() -> HealthRead:
    return HealthRead(status="ok", version=settings.api_version, name=settings.project_name)
