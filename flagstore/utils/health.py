"""Health check utilities."""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import structlog

from flagstore.core.features import FeatureAdapter

logger = structlog.get_logger()


class HealthStatus(str, Enum):
    """Health status values."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Health status of a single component."""

    name: str
    status: HealthStatus
    latency_ms: Optional[float] = None
    message: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "latency_ms": self.latency_ms,
            "message": self.message,
        }


async def check_feature_store(
    adapter: FeatureAdapter,
    slow_ms: float = 50,
) -> ComponentHealth:
    """Check backend connectivity by reading the feature registry."""
    start = time.time()
    try:
        await adapter.features()
    except Exception as e:
        logger.error("Feature store health check failed", adapter=adapter.name, error=str(e))
        return ComponentHealth(
            name=adapter.name,
            status=HealthStatus.UNHEALTHY,
            message=str(e)[:100],
        )

    latency = (time.time() - start) * 1000
    return ComponentHealth(
        name=adapter.name,
        status=HealthStatus.HEALTHY if latency < slow_ms else HealthStatus.DEGRADED,
        latency_ms=round(latency, 2),
        message="Connected" if latency < slow_ms else "Slow response",
    )
