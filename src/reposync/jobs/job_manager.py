from arq import create_pool
from arq.connections import ArqRedis

from reposync.jobs.task_models import RepositoryTaskParams, Task
from reposync.main.config import get_settings
from reposync.main.exceptions import NotReadyException
from reposync.main.logging import get_logger
from reposync.redis.connection import build_arq_redis_settings

logger = get_logger(__name__)


class JobManager:
    def __init__(self):
        self._redis: ArqRedis | None = None

    async def init(self):
        settings = get_settings()
        self._redis = await create_pool(build_arq_redis_settings(settings))

        logger.debug(
            f"Job manager connected to redis on host {settings.redis_host}"
            f" and port {settings.redis_port}"
        )

    async def close(self):
        if self._redis is None:
            return
        await self._redis.aclose()
        self._redis = None

    @property
    def redis(self) -> ArqRedis:
        if self._redis is None:
            raise NotReadyException("Job manager is not initialized!")
        return self._redis

    async def enqueue(
        self,
        task: Task,
        job_id: str,
        params: RepositoryTaskParams,
        queue_name: str,
    ) -> bool:
        """Enqueue a task under a deterministic job id.

        Returns:
            False when a job with this id is already queued or running.
        """
        job = await self.redis.enqueue_job(
            task.value, params, _job_id=job_id, _queue_name=queue_name
        )
        return job is not None

    async def queue_depth(self, queue_name: str) -> int:
        # An arq queue is a sorted set of job ids keyed by the queue name
        return await self.redis.zcard(queue_name)


job_manager = JobManager()
