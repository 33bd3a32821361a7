from typing import TYPE_CHECKING, Any, Optional
from uuid import UUID

from reposync.main.logging import get_logger
from reposync.metadata.metadata_files import (
    classify_metadata_files,
    parse_funding_yaml,
)

if TYPE_CHECKING:
    from reposync.hosts.host_adapters import HostAdapter, HostAdapterFactory
    from reposync.repositories.repository import Repository
    from reposync.repositories.repository_repo import RepositoryRepository

logger = get_logger(__name__)

DOT_GITHUB = ".github"


class MetadataService:
    def __init__(
        self,
        repository_repo: "RepositoryRepository",
        host_adapter_factory: "HostAdapterFactory",
    ):
        self.repository_repo = repository_repo
        self.host_adapter_factory = host_adapter_factory

    async def update_metadata_files(self, repository_id: UUID) -> bool:
        repository = await self.repository_repo.get(repository_id)
        adapter = self.host_adapter_factory(repository.host)

        files = classify_metadata_files(await adapter.get_file_list(repository))
        if files is None:
            logger.info(
                "No archive file list, leaving metadata untouched",
                extra={"repository": repository.full_name},
            )
            return False

        metadata = dict(repository.metadata)
        metadata["files"] = files

        funding = await self._find_funding(repository, adapter, files)
        if funding:
            metadata["funding"] = funding

        await self.repository_repo.update_metadata(repository.id, metadata)
        repository.metadata = metadata

        logger.info(
            "Updated metadata files",
            extra={
                "repository": repository.full_name,
                "found": sorted(kind for kind, path in files.items() if path),
            },
        )
        return True

    async def _find_funding(
        self,
        repository: "Repository",
        adapter: "HostAdapter",
        files: dict[str, Optional[str]],
    ) -> Optional[Any]:
        """Funding from the owner's ``.github`` repository, else from FUNDING.yml."""
        if repository.project_name != DOT_GITHUB:
            dot_github = await self.repository_repo.find_by_full_name(
                repository.host.id, f"{repository.owner}/{DOT_GITHUB}"
            )
            if dot_github is not None and dot_github.metadata.get("funding"):
                return dot_github.metadata["funding"]

        path = files.get("funding")
        if not path:
            return None

        contents = await adapter.get_file_contents(repository, path)
        if not contents:
            return None

        return parse_funding_yaml(contents["content"])
