"""Dependency parsing - one step per repository per tick.

A step either submits the repository to the parsing service (no handle yet)
or checks the status of the outstanding job (handle present), never both,
and never waits for the job to finish. When the job reaches a terminal
status, the manifests are reconciled and the handle is cleared in the same
transaction.

Failures talking to the service are logged and leave the repository row as
it was, so the next tick picks it up again.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from reposync.dependencies.reconciliation import plan_reconciliation
from reposync.main.exceptions import MalformedJobPayload, ParseServiceError
from reposync.main.logging import get_logger
from reposync.repositories.repository import ParseState

if TYPE_CHECKING:
    from reposync.dependencies.job_models import ParseJob
    from reposync.dependencies.manifest_repo import ManifestRepository
    from reposync.hosts.host_adapters import HostAdapterFactory
    from reposync.libs.clients.parser_client import ParserClient
    from reposync.repositories.repository import Repository
    from reposync.repositories.repository_repo import RepositoryRepository

logger = get_logger(__name__)


class ParseOutcome(str, Enum):
    SKIPPED = "skipped"
    SUBMITTED = "submitted"
    PENDING = "pending"
    RECONCILED = "reconciled"
    FAILED = "failed"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class DependencyParsingService:
    def __init__(
        self,
        repository_repo: "RepositoryRepository",
        manifest_repo: "ManifestRepository",
        parser_client: "ParserClient",
        host_adapter_factory: "HostAdapterFactory",
    ):
        self.repository_repo = repository_repo
        self.manifest_repo = manifest_repo
        self.parser_client = parser_client
        self.host_adapter_factory = host_adapter_factory

    async def parse_dependencies(self, repository_id: UUID) -> ParseOutcome:
        repository = await self.repository_repo.get(repository_id, for_update=True)

        match repository.parse_state:
            case ParseState.SUBMITTED:
                return await self._poll(repository)
            case ParseState.NEVER_ATTEMPTED:
                return await self._submit(repository)
            case _:
                logger.debug(
                    "Dependencies already parsed, skipping",
                    extra={"repository": repository.full_name},
                )
                return ParseOutcome.SKIPPED

    async def _submit(self, repository: "Repository") -> ParseOutcome:
        adapter = self.host_adapter_factory(repository.host)
        download_url = adapter.download_url(repository)

        try:
            job = await self.parser_client.submit(download_url)
        except (ParseServiceError, MalformedJobPayload) as exc:
            logger.warning(
                "Failed to submit repository for dependency parsing",
                extra={"repository": repository.full_name, "error": str(exc)},
            )
            return ParseOutcome.FAILED

        outcome = await self.record_job(repository, job)
        return ParseOutcome.SUBMITTED if outcome == ParseOutcome.PENDING else outcome

    async def _poll(self, repository: "Repository") -> ParseOutcome:
        try:
            job = await self.parser_client.poll(repository.dependency_job_id)
        except (ParseServiceError, MalformedJobPayload) as exc:
            logger.warning(
                "Failed to check dependency parsing job",
                extra={
                    "repository": repository.full_name,
                    "dependency_job_id": repository.dependency_job_id,
                    "error": str(exc),
                },
            )
            return ParseOutcome.FAILED

        return await self.record_job(repository, job)

    async def record_job(self, repository: "Repository", job: "ParseJob") -> ParseOutcome:
        """Record a job payload, whether it came from a poll or a callback."""
        if not job.is_terminal:
            if job.id and job.id != repository.dependency_job_id:
                repository.mark_submitted(job.id, _now())
                await self.repository_repo.record_job_handle(
                    repository.id,
                    repository.dependency_job_id,
                    repository.dependency_job_submitted_at,
                )
                logger.info(
                    "Recorded dependency parsing job handle",
                    extra={
                        "repository": repository.full_name,
                        "dependency_job_id": job.id,
                        "status": job.status,
                    },
                )
            return ParseOutcome.PENDING

        repository.begin_reconciling()
        existing = await self.manifest_repo.get_manifests(repository.id)
        plan = plan_reconciliation(existing, job)
        await self.manifest_repo.apply(repository.id, plan)

        repository.finish_parsing(_now())
        await self.repository_repo.record_parse_finished(
            repository.id, repository.dependencies_parsed_at
        )

        logger.info(
            "Reconciled dependency manifests",
            extra={
                "repository": repository.full_name,
                "status": job.status,
                "created_manifests": len(plan.to_create),
                "deleted_manifests": len(plan.to_delete),
            },
        )
        return ParseOutcome.RECONCILED

    async def clear_abandoned_jobs(self, max_age: timedelta) -> int:
        """Drop job handles that have been outstanding for longer than ``max_age``.

        The external job is not cancelled; the repository simply becomes
        eligible for a fresh submission.
        """
        cutoff = _now() - max_age
        cleared = await self.repository_repo.clear_job_handles_older_than(cutoff)
        if cleared:
            logger.info(
                "Abandoned stale dependency parsing jobs",
                extra={"cleared_count": cleared, "cutoff": cutoff.isoformat()},
            )
        return cleared
