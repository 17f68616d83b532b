"""Health check endpoints."""

from fastapi import APIRouter, Request

from multifaucet import __version__
from multifaucet.chains import get_registry

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "multifaucet"}


@router.get("/health/detailed")
async def detailed_health(request: Request):
    """Detailed health check with configuration info."""
    settings = request.app.state.settings
    return {
        "status": "healthy",
        "service": "multifaucet",
        "version": __version__,
        "chains": [chain.key for chain in get_registry().list_chains()],
        "config": settings.get_safe_dict(),
    }
