from datetime import datetime, timezone
from typing import NamedTuple

import redis.asyncio as aioredis

from reposync.main.config import get_settings

_redis_client = None


def _get_redis_connection():
    """Lazy initialization of Redis connection using current settings."""
    settings = get_settings()
    pool = aioredis.ConnectionPool.from_url(
        f"redis://{settings.redis_host}:{settings.redis_port}/{settings.redis_db or 0}"
    )
    return aioredis.Redis(connection_pool=pool)


def get_redis():
    """Get Redis client, creating it if needed."""
    global _redis_client
    if _redis_client is None:
        _redis_client = _get_redis_connection()
    return _redis_client


class WorkerHealth(NamedTuple):
    status: str  # "HEALTHY", "UNHEALTHY", "UNKNOWN"
    last_heartbeat: str | None
    details: str | None


async def get_worker_health(queue_name: str, redis=None) -> WorkerHealth:
    """
    Check the health of the arq worker consuming ``queue_name``.

    arq writes ``{queue_name}:health-check`` every ``health_check_interval``
    seconds; the key expires when the worker stops.
    """
    client = redis if redis is not None else get_redis()
    try:
        worker_health_data = await client.get(f"{queue_name}:health-check")
    except Exception as e:
        return WorkerHealth(
            status="UNKNOWN",
            last_heartbeat=None,
            details=f"Redis connection error: {str(e)}",
        )

    if worker_health_data:
        if isinstance(worker_health_data, bytes):
            worker_health_data = worker_health_data.decode("utf-8")
        return WorkerHealth(
            status="HEALTHY",
            last_heartbeat=datetime.now(timezone.utc).isoformat(),
            details=worker_health_data,
        )

    return WorkerHealth(
        status="UNHEALTHY",
        last_heartbeat=None,
        details="Worker health check key not found or expired",
    )
