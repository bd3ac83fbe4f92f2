from fastapi import APIRouter, Depends

from usdrub.core.config import Settings
from usdrub.routers.deps import get_app_settings

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness probe")
async def health(settings: Settings = Depends(get_app_settings)):
    return {"status": "ok", "version": settings.version}
