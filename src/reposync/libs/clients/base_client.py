import asyncio
import json
from typing import Any, Callable, Optional
from urllib.parse import quote_plus

import aiohttp
from yarl import URL

from reposync.main.aiohttp_client import aiohttp_client
from reposync.main.exceptions import ReposyncException
from reposync.main.logging import get_logger

logger = get_logger(__name__)


class BaseClient:
    """JSON-over-HTTP client on top of the shared aiohttp session.

    Query values are percent-encoded with ``quote_plus`` so that a full URL
    can travel as a single query parameter. Redirects are followed by aiohttp;
    there is no retry loop here.
    """

    transport_error: type[ReposyncException] = ReposyncException
    payload_error: type[ReposyncException] = ReposyncException

    def __init__(
        self,
        base_url: str,
        session_factory: Callable[[], aiohttp.ClientSession] = aiohttp_client,
    ):
        self.base_url = base_url.rstrip("/")
        self._session_factory = session_factory

    def build_url(self, path: str, query: Optional[dict[str, Any]] = None) -> URL:
        url = f"{self.base_url}/{path.lstrip('/')}"
        if query:
            url += "?" + "&".join(
                f"{key}={quote_plus(str(value))}" for key, value in query.items()
            )
        return URL(url, encoded=True)

    async def request(
        self,
        method: str,
        path: str,
        query: Optional[dict[str, Any]] = None,
    ) -> Any:
        url = self.build_url(path, query)
        session = self._session_factory()

        try:
            async with session.request(method, url, allow_redirects=True) as response:
                response.raise_for_status()
                body = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise self.transport_error(f"{method} {url.host}{url.path} failed: {exc}") from exc

        try:
            return json.loads(body)
        except json.JSONDecodeError as exc:
            raise self.payload_error(
                f"{method} {url.host}{url.path} returned a non-JSON body"
            ) from exc

    async def get(self, path: str, query: Optional[dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, query)

    async def post(self, path: str, query: Optional[dict[str, Any]] = None) -> Any:
        return await self.request("POST", path, query)
