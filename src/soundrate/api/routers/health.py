"""Health check endpoint for Docker/Kubernetes probes."""

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy import text

from soundrate import __version__

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


class HealthStatus(BaseModel):
    """Overall health status response."""

    status: str = Field(description="healthy, degraded or unhealthy")
    timestamp: str = Field(description="ISO timestamp of health check")
    version: str = Field(default=__version__, description="Application version")
    checks: dict[str, Any] = Field(default_factory=dict, description="Component checks")


# Hey future me - the catalog is NOT probed here (that would burn a token exchange per probe).
# We only report whether credentials are configured and what the token cache is doing.
@router.get("/health", response_model=HealthStatus)
async def health(request: Request) -> JSONResponse:
    """Database connectivity plus catalog configuration state."""
    checks: dict[str, Any] = {}
    healthy = True

    db = getattr(request.app.state, "db", None)
    if db is None:
        checks["database"] = {"ok": False, "error": "not initialized"}
        healthy = False
    else:
        try:
            async with db.session_scope() as session:
                await session.execute(text("SELECT 1"))
            checks["database"] = {"ok": True}
        except Exception as e:
            logger.warning("Health check: database unreachable: %s", e)
            checks["database"] = {"ok": False, "error": str(e)}
            healthy = False

    settings = getattr(request.app.state, "settings", None)
    token_cache = getattr(request.app.state, "token_cache", None)
    catalog_configured = bool(settings and settings.catalog.is_configured)
    checks["catalog"] = {
        "configured": catalog_configured,
        "token_state": token_cache.state.value if token_cache else None,
    }

    if not healthy:
        overall = "unhealthy"
    elif not catalog_configured:
        overall = "degraded"
    else:
        overall = "healthy"

    body = HealthStatus(
        status=overall,
        timestamp=datetime.now(UTC).isoformat(),
        checks=checks,
    )
    return JSONResponse(
        status_code=200 if healthy else 503,
        content=body.model_dump(),
    )
