import logging
import os
import sys
from typing import Optional

from pydantic import computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="allow")

    # Infrastructure dependencies
    postgres_user: str
    postgres_host: str
    postgres_password: str
    postgres_port: int
    postgres_db: str
    redis_host: str
    redis_port: int
    redis_db: Optional[int] = None
    redis_conn_timeout: int = 5
    redis_conn_retries: int = 5
    redis_conn_retry_delay: int = 1

    # External analysis services
    parser_base_url: str = "https://parser.ecosyste.ms/api/v1"
    archives_base_url: str = "https://archives.ecosyste.ms/api/v1"
    http_timeout_seconds: float = 30.0
    git_timeout_seconds: float = 60.0

    # Background worker configuration
    worker_max_jobs: int = 20
    dispatch_enabled: bool = True

    # Per-category admission (queue name, depth ceiling, batch size)
    dependencies_queue_name: str = "arq:dependencies"
    dependencies_queue_ceiling: int = 2_000
    dependencies_batch_size: int = 2_000

    tags_queue_name: str = "arq:tags"
    tags_queue_ceiling: int = 5_000
    tags_batch_size: int = 5_000

    usage_queue_name: str = "arq:usage"
    usage_queue_ceiling: int = 2_000
    usage_batch_size: int = 2_000

    metadata_queue_name: str = "arq:queue"
    metadata_queue_ceiling: int = 10_000
    metadata_batch_size: int = 5_000

    # Job handles older than this are abandoned and the repository re-selected
    dependency_job_max_age_hours: int = 24

    # Server
    api_prefix: str = "/api/v1"

    # Dev
    testing: bool = False
    dev: bool = False

    @model_validator(mode="after")
    def validate_worker_settings(self):
        """Ensure worker and admission configuration values are sane."""
        if self.worker_max_jobs <= 0:
            logging.error(
                "WORKER_MAX_JOBS must be greater than zero. Current value: %s",
                self.worker_max_jobs,
            )
            sys.exit(1)

        for category in ("dependencies", "tags", "usage", "metadata"):
            ceiling = getattr(self, f"{category}_queue_ceiling")
            batch_size = getattr(self, f"{category}_batch_size")

            if ceiling < 0:
                logging.error(
                    "%s_QUEUE_CEILING cannot be negative. Current value: %s",
                    category.upper(),
                    ceiling,
                )
                sys.exit(1)

            if batch_size <= 0:
                logging.error(
                    "%s_BATCH_SIZE must be greater than zero. Current value: %s",
                    category.upper(),
                    batch_size,
                )
                sys.exit(1)

        if self.dependency_job_max_age_hours <= 0:
            logging.error(
                "DEPENDENCY_JOB_MAX_AGE_HOURS must be greater than zero. Current value: %s",
                self.dependency_job_max_age_hours,
            )
            sys.exit(1)

        return self

    @computed_field
    @property
    def sync_database_url(self) -> str:
        return (
            f"postgresql://{self.postgres_user}:"
            f"{self.postgres_password}@{self.postgres_host}:"
            f"{self.postgres_port}/{self.postgres_db}"
        )

    @computed_field
    @property
    def database_url(self) -> str:
        return (
            f"postgresql+asyncpg://{self.postgres_user}:"
            f"{self.postgres_password}@{self.postgres_host}:"
            f"{self.postgres_port}/{self.postgres_db}"
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get settings singleton, creating it if needed.

    Returns:
        Settings: The application settings instance.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Override settings (primarily for testing).

    Args:
        settings: The Settings instance to use.
    """
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to None (for test cleanup)."""
    global _settings
    _settings = None


def get_loglevel():
    loglevel = os.getenv("LOGLEVEL", "INFO")

    match loglevel:
        case "INFO":
            return logging.INFO
        case "WARNING":
            return logging.WARNING
        case "ERROR":
            return logging.ERROR
        case "CRITICAL":
            return logging.CRITICAL
        case "DEBUG":
            return logging.DEBUG
        case _:
            return logging.INFO
