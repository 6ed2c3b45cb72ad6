"""
Bookshelf — Health Check Route
===============================

What:  GET /health for container probes and load balancers.
How:   Runs SELECT 1 on the application's engine. 200 when the database
       answers, 503 when it does not.
"""

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import Response
from sqlalchemy import text

from bookshelf import __version__
from bookshelf.responses import encode_response
from bookshelf.schemas.book import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request) -> Response:
    engine = getattr(request.app.state, "engine", None)
    db_status = "disconnected"

    if engine is not None:
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            db_status = "connected"
        except Exception as e:
            logger.warning("Health check: database unreachable: %s", e)

    healthy = db_status == "connected"
    return encode_response(
        status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        HealthResponse(
            status="healthy" if healthy else "unhealthy",
            version=__version__,
            database=db_status,
        ),
    )
