"""
Health check endpoint.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from shared.config.settings import settings
from shared.infrastructure.db import get_db
from shared.utils.health import check_database

router = APIRouter(tags=["health"])


@router.get("/api/health")
def health_check(db: Session = Depends(get_db)):
    """Liveness plus a database probe; 503 when the database is unreachable."""
    database = check_database(db)
    body = {
        "status": "healthy" if database.healthy else "degraded",
        "service": "pos-api",
        "environment": settings.environment,
        "dependencies": {"database": database.to_dict()},
    }
    if not database.healthy:
        return JSONResponse(content=body, status_code=503)
    return body
