import os
from fastapi import APIRouter, Depends

from dealcheck.core.config import Settings, get_settings

router = APIRouter(tags=["meta"])


@router.get("/api/test")
def config_check(settings: Settings = Depends(get_settings)):
    """Reports whether the model API key is set. Never returns the key itself."""
    key = settings.api_key
    return {
        "provider": settings.provider,
        "keySet": bool(key),
        "keyLength": len(key),
        "message": "API key is configured" if key else "API key is MISSING",
    }


@router.get("/version")
def version(settings: Settings = Depends(get_settings)):
    return {
        "version": settings.APP_VERSION,
        "build": settings.BUILD_ID,
        "render_git_commit": os.environ.get("RENDER_GIT_COMMIT"),
        "render_service_id": os.environ.get("RENDER_SERVICE_ID"),
    }
