from datetime import datetime, timezone
from typing import TYPE_CHECKING
from uuid import UUID

from reposync.main.logging import get_logger
from reposync.usage.usage_repo import summarize_usage

if TYPE_CHECKING:
    from reposync.repositories.repository_repo import RepositoryRepository
    from reposync.usage.usage_repo import PackageUsageRepository

logger = get_logger(__name__)


class PackageUsageService:
    def __init__(
        self,
        repository_repo: "RepositoryRepository",
        usage_repo: "PackageUsageRepository",
    ):
        self.repository_repo = repository_repo
        self.usage_repo = usage_repo

    async def update_package_usage(self, repository_id: UUID) -> int:
        """Rebuild the package usage snapshot from the stored dependencies."""
        repository = await self.repository_repo.get(repository_id)

        rows = await self.usage_repo.get_dependency_rows(repository.id)
        usages = summarize_usage(rows)
        await self.usage_repo.replace_usages(repository.id, usages)
        await self.repository_repo.stamp_usage_updated(
            repository.id, datetime.now(timezone.utc)
        )

        logger.info(
            "Updated package usage",
            extra={"repository": repository.full_name, "package_count": len(usages)},
        )
        return len(usages)
