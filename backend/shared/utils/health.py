"""
Health Check Utilities.

Usage:
    from shared.utils.health import check_database

    result = check_database(db)
    # HealthCheckResult(status=HEALTHY, component="database", latency_ms=1.3)
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.config.logging import get_logger

logger = get_logger(__name__)


class HealthStatus(str, Enum):
    """Health check status values."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthCheckResult:
    """Result of a single dependency check."""
    status: HealthStatus
    component: str
    latency_ms: float | None = None
    error: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def healthy(self) -> bool:
        return self.status is HealthStatus.HEALTHY

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON response."""
        result: dict[str, Any] = {
            "status": self.status.value,
            "component": self.component,
        }
        if self.latency_ms is not None:
            result["latency_ms"] = round(self.latency_ms, 2)
        if self.error:
            result["error"] = self.error
        if self.details:
            result["details"] = self.details
        return result


def check_database(db: Session) -> HealthCheckResult:
    """Run SELECT 1 on the session's connection."""
    start_time = time.perf_counter()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        latency_ms = (time.perf_counter() - start_time) * 1000
        logger.warning("Health check failed", component="database", error=str(e))
        return HealthCheckResult(
            status=HealthStatus.UNHEALTHY,
            component="database",
            latency_ms=latency_ms,
            error=str(e),
        )
    return HealthCheckResult(
        status=HealthStatus.HEALTHY,
        component="database",
        latency_ms=(time.perf_counter() - start_time) * 1000,
    )
