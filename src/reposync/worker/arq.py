from reposync.main.config import get_settings
from reposync.worker.routes import worker

settings = get_settings()


class WorkerSettings:
    """Default queue: cron dispatch, abandoned job sweep and metadata refresh."""

    functions = worker.functions
    cron_jobs = worker.cron_jobs
    redis_settings = worker.redis_settings
    on_startup = worker.on_startup
    on_shutdown = worker.on_shutdown
    retry_jobs = worker.retry_jobs
    job_timeout = worker.job_timeout
    max_jobs = worker.max_jobs
    keep_result = worker.keep_result
    health_check_interval = worker.health_check_interval
    queue_name = settings.metadata_queue_name


class DependenciesWorkerSettings(WorkerSettings):
    cron_jobs = []
    queue_name = settings.dependencies_queue_name


class TagsWorkerSettings(WorkerSettings):
    cron_jobs = []
    queue_name = settings.tags_queue_name


class UsageWorkerSettings(WorkerSettings):
    cron_jobs = []
    queue_name = settings.usage_queue_name
