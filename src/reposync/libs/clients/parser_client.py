from urllib.parse import quote

from reposync.dependencies.job_models import ParseJob
from reposync.libs.clients.base_client import BaseClient
from reposync.main.config import get_settings
from reposync.main.exceptions import MalformedJobPayload, ParseServiceError
from reposync.main.logging import get_logger

logger = get_logger(__name__)


class ParserClient(BaseClient):
    """
    Client for the external dependency parsing service.

    Submitting and polling are separate calls; callers decide on which tick
    to make each one. Neither waits for the job to finish.
    """

    transport_error = ParseServiceError
    payload_error = MalformedJobPayload

    def __init__(self, base_url: str | None = None, **kwargs):
        super().__init__(base_url or get_settings().parser_base_url, **kwargs)

    async def submit(self, download_url: str) -> ParseJob:
        logger.debug("Submitting parse job", extra={"download_url": download_url})
        payload = await self.post("jobs", query={"url": download_url})
        return ParseJob.from_payload(payload)

    async def poll(self, job_id: str) -> ParseJob:
        logger.debug("Polling parse job", extra={"dependency_job_id": job_id})
        payload = await self.get(f"jobs/{quote(job_id, safe='')}")
        return ParseJob.from_payload(payload)
