"""Redis connection helpers shared by the job manager and the workers."""

from __future__ import annotations

from arq.connections import RedisSettings

from reposync.main.config import Settings, get_settings


def build_arq_redis_settings(settings: Settings | None = None) -> RedisSettings:
    """Build ARQ Redis settings with connection resilience defaults."""
    resolved_settings = settings or get_settings()
    return RedisSettings(
        host=resolved_settings.redis_host,
        port=resolved_settings.redis_port,
        database=resolved_settings.redis_db or 0,
        conn_timeout=resolved_settings.redis_conn_timeout,
        conn_retries=resolved_settings.redis_conn_retries,
        conn_retry_delay=resolved_settings.redis_conn_retry_delay,
    )
