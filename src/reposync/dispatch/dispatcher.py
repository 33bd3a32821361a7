"""Dispatch loop - one pass per work category per scheduler tick.

A pass enqueues status checks for work already in flight, asks the admission
controller whether the category's queue has room, and if so enqueues the next
batch of candidates. Job ids are deterministic per (task, repository), so a
repository already waiting in a queue is never enqueued twice.

A pass never waits on external work: it only enqueues and returns.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import UUID

from reposync.jobs.task_models import RepositoryTaskParams
from reposync.main.logging import get_logger

if TYPE_CHECKING:
    from reposync.dispatch.admission import AdmissionController
    from reposync.dispatch.candidate_selector import CandidateSelector
    from reposync.dispatch.categories import WorkCategory
    from reposync.jobs.job_manager import JobManager

logger = get_logger(__name__)


@dataclass
class DispatchResult:
    category: str
    admitted: bool = False
    polled: int = 0
    enqueued: int = 0
    duplicates: int = 0
    failed: int = 0


class Dispatcher:
    def __init__(
        self,
        admission_controller: "AdmissionController",
        candidate_selector: "CandidateSelector",
        job_manager: "JobManager",
    ):
        self.admission_controller = admission_controller
        self.candidate_selector = candidate_selector
        self.job_manager = job_manager

    async def _enqueue(
        self, category: "WorkCategory", repository_id: UUID, result: DispatchResult
    ) -> bool:
        try:
            enqueued = await self.job_manager.enqueue(
                task=category.task,
                job_id=category.job_id(repository_id),
                params=RepositoryTaskParams(repository_id=repository_id),
                queue_name=category.queue_name,
            )
        except Exception as exc:
            logger.error(
                "Failed to enqueue repository",
                extra={
                    "category": category.name.value,
                    "repository_id": str(repository_id),
                    "error": str(exc),
                },
            )
            result.failed += 1
            return False

        if not enqueued:
            result.duplicates += 1
        return enqueued

    async def dispatch(self, category: "WorkCategory") -> DispatchResult:
        result = DispatchResult(category=category.name.value)

        # Status checks for in-flight work are not subject to admission
        for repository_id in await self.candidate_selector.select_in_flight(
            category, category.batch_size
        ):
            if await self._enqueue(category, repository_id, result):
                result.polled += 1

        result.admitted = await self.admission_controller.can_admit(category)
        if result.admitted:
            for repository_id in await self.candidate_selector.select_batch(
                category, category.batch_size
            ):
                if await self._enqueue(category, repository_id, result):
                    result.enqueued += 1

        if result.polled or result.enqueued or result.failed:
            logger.info(
                f"Dispatch complete for {category.name.value}: "
                f"{result.polled} polled, {result.enqueued} enqueued, "
                f"{result.duplicates} already queued, {result.failed} failed",
                extra={"category": category.name.value, "admitted": result.admitted},
            )
        else:
            logger.debug(
                "Dispatch found nothing to do",
                extra={"category": category.name.value, "admitted": result.admitted},
            )

        return result
