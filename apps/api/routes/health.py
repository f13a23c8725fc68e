from fastapi import APIRouter, Depends

from apps.api.config import Settings
from apps.api.dependencies import get_settings

router = APIRouter()


@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)):
    """Health check endpoint

    Returns service status, name and version.
    Used by Docker and load balancers to verify the service is alive.
    """
    return {
        "status": "ok",
        "name": settings.app_name,
        "version": settings.app_version,
    }
