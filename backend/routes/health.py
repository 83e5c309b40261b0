"""Health and readiness check routes."""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/ready")
async def ready(request: Request) -> dict:
    """Lightweight readiness check — no I/O."""
    settings = request.app.state.settings
    return {"status": "ok", "service": "mgnrega-cache", "commit": settings.git_sha}


@router.get("/health")
async def health(request: Request) -> dict:
    """Readiness plus the state of the on-disk cache. Never calls data.gov.in."""
    settings = request.app.state.settings
    result = {"status": "ok", "service": "mgnrega-cache", "commit": settings.git_sha}
    result.update(request.app.state.mgnrega.cache_status())
    return result
