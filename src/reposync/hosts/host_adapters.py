"""Capability interface over repository hosting providers.

Each provider kind builds its own archive, clone and browse URLs. File access
goes through the archives service for every provider, so only URL shapes
differ between variants.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional, TypedDict

from reposync.hosts.host import Host, HostKind
from reposync.main.exceptions import ArchiveServiceError, HostError
from reposync.main.logging import get_logger

if TYPE_CHECKING:
    from reposync.libs.clients.archives_client import ArchivesClient
    from reposync.repositories.repository import Repository

logger = get_logger(__name__)

DEFAULT_BRANCH = "main"


class FileContents(TypedDict):
    content: str
    sha: Optional[str]


class HostAdapter(ABC):
    kind: HostKind

    def __init__(self, host: Host, archives_client: "ArchivesClient"):
        self.host = host
        self.archives_client = archives_client

    @abstractmethod
    def download_url(
        self,
        repository: "Repository",
        branch: Optional[str] = None,
        kind: str = "branch",
    ) -> str: ...

    def html_url(self, repository: "Repository") -> str:
        return f"{self.host.url}/{repository.full_name}"

    def clone_url(self, repository: "Repository") -> str:
        return f"{self.host.url}/{repository.full_name}.git"

    async def get_file_list(self, repository: "Repository") -> list[str]:
        download_url = self.download_url(repository)
        try:
            return await self.archives_client.list_files(download_url)
        except ArchiveServiceError as exc:
            logger.warning(
                "Failed to list archive files",
                extra={"repository": repository.full_name, "error": str(exc)},
            )
            return []

    async def get_file_contents(
        self, repository: "Repository", path: str
    ) -> Optional[FileContents]:
        download_url = self.download_url(repository)
        try:
            data = await self.archives_client.file_contents(download_url, path)
        except ArchiveServiceError as exc:
            logger.warning(
                "Failed to read archive file",
                extra={
                    "repository": repository.full_name,
                    "path": path,
                    "error": str(exc),
                },
            )
            return None

        content = data.get("contents", data.get("content"))
        if not isinstance(content, str):
            return None
        return FileContents(content=content, sha=data.get("sha"))

    @staticmethod
    def _branch(repository: "Repository", branch: Optional[str]) -> str:
        return branch or repository.default_branch or DEFAULT_BRANCH


class GitHubAdapter(HostAdapter):
    kind = HostKind.GITHUB

    def download_url(self, repository, branch=None, kind="branch"):
        ref = self._branch(repository, branch)
        ref_type = "tags" if kind == "tag" else "heads"
        return (
            f"https://codeload.github.com/{repository.full_name}"
            f"/tar.gz/refs/{ref_type}/{ref}"
        )


class GitLabAdapter(HostAdapter):
    kind = HostKind.GITLAB

    def download_url(self, repository, branch=None, kind="branch"):
        ref = self._branch(repository, branch)
        return (
            f"{self.host.url}/{repository.full_name}/-/archive/{ref}/"
            f"{repository.project_slug}-{ref}.tar.gz"
        )


class GiteaAdapter(HostAdapter):
    kind = HostKind.GITEA

    def download_url(self, repository, branch=None, kind="branch"):
        ref = self._branch(repository, branch)
        return f"{self.host.url}/{repository.full_name}/archive/{ref}.tar.gz"


class BitbucketAdapter(HostAdapter):
    kind = HostKind.BITBUCKET

    def download_url(self, repository, branch=None, kind="branch"):
        ref = self._branch(repository, branch)
        return f"{self.host.url}/{repository.full_name}/get/{ref}.tar.gz"


ADAPTERS: dict[HostKind, type[HostAdapter]] = {
    adapter.kind: adapter
    for adapter in (GitHubAdapter, GitLabAdapter, GiteaAdapter, BitbucketAdapter)
}


def host_adapter_for(host: Host, archives_client: "ArchivesClient") -> HostAdapter:
    try:
        adapter_cls = ADAPTERS[HostKind(host.kind)]
    except (KeyError, ValueError) as exc:
        raise HostError(f"Unsupported host kind {host.kind!r} for {host.name}") from exc
    return adapter_cls(host, archives_client)


class HostAdapterFactory:
    """Resolves the adapter for a repository's host; injectable into services."""

    def __init__(self, archives_client: "ArchivesClient"):
        self.archives_client = archives_client

    def __call__(self, host: Host) -> HostAdapter:
        return host_adapter_for(host, self.archives_client)
