"""Liveness endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, status
from fastapi.responses import RedirectResponse

from api.models import StatusResponse

router = APIRouter(tags=["health"])

LIVENESS_MARKER = "🌈"


@router.get("/", include_in_schema=False)
async def root():
    return RedirectResponse(url="/status", status_code=status.HTTP_308_PERMANENT_REDIRECT)


@router.get("/status", response_model=StatusResponse)
async def get_status():
    """Liveness check; does not touch storage."""
    return StatusResponse(
        status="ok",
        marker=LIVENESS_MARKER,
        timestamp=datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
    )
