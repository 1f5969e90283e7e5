"""
Health check endpoint.

Provides system health status for monitoring and load balancers.
"""

from fastapi import APIRouter, Request

from tradechain import __version__
from tradechain.api.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """
    Check system health.

    Returns the version and the storage backend in use.
    """
    settings = request.app.state.settings

    return HealthResponse(
        status="healthy",
        version=__version__,
        storage="database" if settings.uses_database else "memory",
    )
