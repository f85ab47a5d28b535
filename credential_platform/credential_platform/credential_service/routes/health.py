"""
Health check endpoint
"""
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from ..db import check_db_connection
from ..schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/api/health",
    response_model=HealthResponse,
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"description": "Database unreachable"}},
)
def health_check(request: Request):
    """
    Health check including database connectivity.

    Returns:
        dict: {"status": "healthy"}, or 503 with {"status": "unhealthy", "error": ...}
    """
    if not check_db_connection(request.app.state.engine):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "error": "Database connection failed"},
        )
    return HealthResponse(status="healthy")
