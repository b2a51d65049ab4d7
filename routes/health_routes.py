"""
GET /health, a liveness probe for the load balancer.

Only MongoDB is checked: every auth operation reads or writes the users
collection, so a failed ping makes the whole service "unhealthy" (503).
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from schemas.dto.responses.common import HealthResponse
from shared.logging import get_logger

log = get_logger(__name__)

router = APIRouter(tags=["health"])


async def _mongo_reachable(request: Request) -> bool:
    try:
        await request.app.state.db.client.admin.command("ping")
    except Exception as e:
        log.warning("health_mongo_ping_failed", error=str(e), error_type=type(e).__name__)
        return False
    return True


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> JSONResponse:
    mongo_ok = await _mongo_reachable(request)
    body = HealthResponse(
        status="healthy" if mongo_ok else "unhealthy",
        checks={"mongodb": "ok" if mongo_ok else "error"},
    )
    return JSONResponse(status_code=200 if mongo_ok else 503, content=body.model_dump())
