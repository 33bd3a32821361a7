"""Dispatch of background work with queue-depth admission control.

- WorkCategory: one kind of work, its queue, ceiling and batch size
- AdmissionController: gates new work on downstream queue depth
- CandidateSelector: picks the next batch of repositories per category
- Dispatcher: ties the three together once per category per tick
"""

from reposync.dispatch.admission import (
    AdmissionController,
    ArqQueueMonitor,
    QueueDepthProvider,
)
from reposync.dispatch.candidate_selector import CandidateSelector
from reposync.dispatch.categories import WorkCategory, WorkCategoryName, work_categories
from reposync.dispatch.dispatcher import DispatchResult, Dispatcher

__all__ = [
    "AdmissionController",
    "ArqQueueMonitor",
    "CandidateSelector",
    "DispatchResult",
    "Dispatcher",
    "QueueDepthProvider",
    "WorkCategory",
    "WorkCategoryName",
    "work_categories",
]
