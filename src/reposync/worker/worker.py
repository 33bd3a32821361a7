from __future__ import annotations

from functools import wraps

from arq.cron import cron
from dependency_injector import providers

from reposync.database.database import AsyncSession, sessionmanager
from reposync.main.config import get_settings
from reposync.main.container.container import Container
from reposync.main.job_context import clear_job_context, set_job_context
from reposync.main.logging import get_logger
from reposync.redis.connection import build_arq_redis_settings
from reposync.server.dependencies import lifespan

logger = get_logger(__name__)


class Worker:
    """
    Registry of arq functions and cron jobs.

    Every registered callable runs inside its own database session and
    transaction, with a dependency injection container bound to that session.

    Attributes:
        functions (list): Registered task functions.
        cron_jobs (list): Registered cron jobs.
        redis_settings (RedisSettings): Redis settings for the worker.
        retry_jobs (bool): Failed jobs are not retried; the next tick re-selects them.
        keep_result (int): Results are not kept, so a deterministic job id can be
            enqueued again as soon as the previous job finished.
    """

    def __init__(self):
        settings = get_settings()
        self.functions = []
        self.cron_jobs = []
        self.redis_settings = build_arq_redis_settings(settings)
        self.on_startup = self.startup
        self.on_shutdown = self.shutdown
        self.retry_jobs = False
        self.job_timeout = int(
            max(settings.http_timeout_seconds, settings.git_timeout_seconds) * 5
        )
        self.max_jobs = settings.worker_max_jobs
        self.keep_result = 0
        self.health_check_interval = 60  # seconds (default is 3600)

    def _create_container(self, session: AsyncSession) -> Container:
        return Container(session=providers.Object(session))

    async def startup(self, ctx):
        await lifespan.startup()

    async def shutdown(self, ctx):
        await lifespan.shutdown()

    def function(self):
        def decorator(func):
            @wraps(func)
            async def wrapper(*args):
                ctx, params = args[0], args[1]
                set_job_context(
                    job_id=ctx.get("job_id"),
                    task=func.__name__,
                    repository_id=str(getattr(params, "repository_id", "")) or None,
                )
                logger.debug(f"Executing {func.__name__} with params {params}")

                try:
                    async with sessionmanager.session() as session, session.begin():
                        container = self._create_container(session)
                        return await func(ctx["job_id"], params, container=container)
                finally:
                    clear_job_context()

            self.functions.append(wrapper)
            return wrapper

        return decorator

    def cron_job(self, **decorator_kwargs):
        def decorator(func):
            @wraps(func)
            async def wrapper(*args):
                set_job_context(task=func.__name__)
                logger.debug(f"Executing {func.__name__}")

                try:
                    async with sessionmanager.session() as session, session.begin():
                        container = self._create_container(session)
                        return await func(container=container)
                finally:
                    clear_job_context()

            self.cron_jobs.append(cron(wrapper, **decorator_kwargs))
            return wrapper

        return decorator
