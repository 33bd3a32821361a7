"""Unit tests for the per-category dispatch pass."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from reposync.dispatch.categories import WorkCategory, WorkCategoryName
from reposync.dispatch.dispatcher import Dispatcher
from reposync.jobs.task_models import RepositoryTaskParams, Task


@pytest.fixture
def category():
    return WorkCategory(
        name=WorkCategoryName.DEPENDENCY_PARSING,
        queue_name="arq:dependencies",
        ceiling=10,
        batch_size=3,
        task=Task.PARSE_DEPENDENCIES,
    )


@pytest.fixture
def admission_controller():
    controller = AsyncMock()
    controller.can_admit.return_value = True
    return controller


@pytest.fixture
def candidate_selector():
    selector = AsyncMock()
    selector.select_in_flight.return_value = []
    selector.select_batch.return_value = []
    return selector


@pytest.fixture
def job_manager():
    manager = AsyncMock()
    manager.enqueue.return_value = True
    return manager


@pytest.fixture
def dispatcher(admission_controller, candidate_selector, job_manager):
    return Dispatcher(admission_controller, candidate_selector, job_manager)


async def test_enqueues_batch_when_admitted(
    dispatcher, category, candidate_selector, job_manager
):
    ids = [uuid4(), uuid4()]
    candidate_selector.select_batch.return_value = ids

    result = await dispatcher.dispatch(category)

    assert result.admitted is True
    assert result.enqueued == 2
    candidate_selector.select_batch.assert_awaited_once_with(category, 3)

    first_call = job_manager.enqueue.await_args_list[0].kwargs
    assert first_call == {
        "task": Task.PARSE_DEPENDENCIES,
        "job_id": f"parse_dependencies:{ids[0]}",
        "params": RepositoryTaskParams(repository_id=ids[0]),
        "queue_name": "arq:dependencies",
    }


async def test_suppresses_new_work_when_not_admitted(
    dispatcher, category, admission_controller, candidate_selector, job_manager
):
    admission_controller.can_admit.return_value = False

    result = await dispatcher.dispatch(category)

    assert result.admitted is False
    assert result.enqueued == 0
    candidate_selector.select_batch.assert_not_awaited()
    job_manager.enqueue.assert_not_awaited()


async def test_status_checks_are_enqueued_even_when_not_admitted(
    dispatcher, category, admission_controller, candidate_selector, job_manager
):
    admission_controller.can_admit.return_value = False
    pending = uuid4()
    candidate_selector.select_in_flight.return_value = [pending]

    result = await dispatcher.dispatch(category)

    assert result.polled == 1
    assert result.enqueued == 0
    job_manager.enqueue.assert_awaited_once()
    assert job_manager.enqueue.await_args.kwargs["job_id"] == (
        f"parse_dependencies:{pending}"
    )


async def test_counts_duplicates_already_queued(
    dispatcher, category, candidate_selector, job_manager
):
    candidate_selector.select_batch.return_value = [uuid4(), uuid4()]
    job_manager.enqueue.side_effect = [True, False]

    result = await dispatcher.dispatch(category)

    assert result.enqueued == 1
    assert result.duplicates == 1


async def test_enqueue_failure_is_counted_and_does_not_stop_the_pass(
    dispatcher, category, candidate_selector, job_manager
):
    candidate_selector.select_batch.return_value = [uuid4(), uuid4(), uuid4()]
    job_manager.enqueue.side_effect = [True, ConnectionError("redis"), True]

    result = await dispatcher.dispatch(category)

    assert result.enqueued == 2
    assert result.failed == 1
