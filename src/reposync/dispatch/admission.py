"""Admission control for background work categories.

Each category feeds a downstream arq queue with a configured depth ceiling.
New work is admitted only while that queue is not deeper than its ceiling;
when the depth cannot be read, nothing is admitted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from reposync.main.logging import get_logger

if TYPE_CHECKING:
    from reposync.dispatch.categories import WorkCategory
    from reposync.jobs.job_manager import JobManager

logger = get_logger(__name__)


class QueueDepthProvider(Protocol):
    async def depth(self, queue_name: str) -> int: ...


class ArqQueueMonitor:
    """Reads arq queue depth (the size of the queue's sorted set)."""

    def __init__(self, job_manager: "JobManager"):
        self._job_manager = job_manager

    async def depth(self, queue_name: str) -> int:
        return int(await self._job_manager.queue_depth(queue_name))


class AdmissionController:
    def __init__(self, monitor: QueueDepthProvider):
        self._monitor = monitor

    async def can_admit(self, category: "WorkCategory") -> bool:
        """Whether new work for ``category`` may be enqueued right now.

        Returns:
            False iff the queue is deeper than the ceiling, or its depth is unknown.
        """
        try:
            depth = await self._monitor.depth(category.queue_name)
        except Exception as exc:
            logger.warning(
                "Queue depth unavailable, denying admission",
                extra={
                    "category": category.name.value,
                    "queue_name": category.queue_name,
                    "error": str(exc),
                },
            )
            return False

        admitted = depth <= category.ceiling
        if not admitted:
            logger.debug(
                "Queue over ceiling, suppressing new work",
                extra={
                    "category": category.name.value,
                    "queue_name": category.queue_name,
                    "depth": depth,
                    "ceiling": category.ceiling,
                },
            )
        return admitted
