from typing import Any

from reposync.libs.clients.base_client import BaseClient
from reposync.main.config import get_settings
from reposync.main.exceptions import ArchiveServiceError


class ArchivesClient(BaseClient):
    """
    Client for the archives service, which lists and reads files inside a
    repository's downloadable archive.
    """

    transport_error = ArchiveServiceError
    payload_error = ArchiveServiceError

    def __init__(self, base_url: str | None = None, **kwargs):
        super().__init__(base_url or get_settings().archives_base_url, **kwargs)

    async def list_files(self, download_url: str) -> list[str]:
        files = await self.get("archives/list", query={"url": download_url})
        if not isinstance(files, list):
            raise ArchiveServiceError("Archive listing is not a list")
        return [path for path in files if isinstance(path, str)]

    async def file_contents(self, download_url: str, path: str) -> dict[str, Any]:
        contents = await self.get(
            "archives/contents", query={"url": download_url, "path": path}
        )
        if not isinstance(contents, dict):
            raise ArchiveServiceError("Archive contents is not an object")
        return contents
