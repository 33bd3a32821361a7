"""DependencyParsingService against an in-memory database and a fake parser."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from reposync.dependencies.dependency_parsing_service import (
    DependencyParsingService,
    ParseOutcome,
)
from reposync.dependencies.job_models import ParseJob
from reposync.dependencies.manifest_repo import ManifestRepository
from reposync.hosts.host_adapters import HostAdapterFactory
from reposync.main.exceptions import MalformedJobPayload, ParseServiceError
from reposync.repositories.repository_repo import RepositoryRepository

SUBMITTED_AT = datetime(2024, 3, 1, tzinfo=timezone.utc)

NPM_RESULT = {
    "manifests": [
        {
            "platform": "npm",
            "kind": "manifest",
            "path": "package.json",
            "sha": "abc",
            "dependencies": [
                {"name": "react", "requirement": "^18.0.0", "type": "runtime"}
            ],
        }
    ]
}


def pending(job_id="job-1"):
    return ParseJob.from_payload({"id": job_id, "status": "pending"})


def complete(results=NPM_RESULT, job_id="job-1"):
    return ParseJob.from_payload({"id": job_id, "status": "complete", "results": results})


@pytest.fixture
def parser_client():
    return AsyncMock()


@pytest.fixture
def repository_repo(async_session):
    return RepositoryRepository(async_session)


@pytest.fixture
def manifest_repo(async_session):
    return ManifestRepository(async_session)


@pytest.fixture
def service(repository_repo, manifest_repo, parser_client):
    return DependencyParsingService(
        repository_repo=repository_repo,
        manifest_repo=manifest_repo,
        parser_client=parser_client,
        host_adapter_factory=HostAdapterFactory(archives_client=MagicMock()),
    )


class TestSubmit:
    async def test_submits_download_url_and_persists_handle(
        self, service, parser_client, repository_repo, add_repository
    ):
        record = await add_repository("ecosyste-ms/repos")
        parser_client.submit.return_value = pending("job-1")

        outcome = await service.parse_dependencies(record.id)

        assert outcome == ParseOutcome.SUBMITTED
        parser_client.submit.assert_awaited_once_with(
            "https://codeload.github.com/ecosyste-ms/repos/tar.gz/refs/heads/main"
        )
        parser_client.poll.assert_not_awaited()

        repository = await repository_repo.get(record.id)
        assert repository.dependency_job_id == "job-1"
        assert repository.dependency_job_submitted_at is not None
        assert repository.dependencies_parsed_at is None

    async def test_network_failure_leaves_row_untouched(
        self, service, parser_client, repository_repo, add_repository
    ):
        record = await add_repository()
        parser_client.submit.side_effect = ParseServiceError("connection reset")

        outcome = await service.parse_dependencies(record.id)

        assert outcome == ParseOutcome.FAILED
        repository = await repository_repo.get(record.id)
        assert repository.dependency_job_id is None
        assert repository.dependency_job_submitted_at is None
        assert repository.dependencies_parsed_at is None

    async def test_immediately_complete_job_is_reconciled(
        self, service, parser_client, repository_repo, manifest_repo, add_repository
    ):
        record = await add_repository()
        parser_client.submit.return_value = complete()

        outcome = await service.parse_dependencies(record.id)

        assert outcome == ParseOutcome.RECONCILED
        assert len(await manifest_repo.get_manifests(record.id)) == 1
        repository = await repository_repo.get(record.id)
        assert repository.dependency_job_id is None
        assert repository.dependencies_parsed_at is not None

    async def test_parsed_repository_without_handle_is_skipped(
        self, service, parser_client, add_repository
    ):
        record = await add_repository(dependencies_parsed_at=SUBMITTED_AT)

        outcome = await service.parse_dependencies(record.id)

        assert outcome == ParseOutcome.SKIPPED
        parser_client.submit.assert_not_awaited()
        parser_client.poll.assert_not_awaited()


class TestPoll:
    async def test_still_pending_keeps_handle_and_submission_time(
        self, service, parser_client, repository_repo, add_repository
    ):
        record = await add_repository(
            dependency_job_id="job-1", dependency_job_submitted_at=SUBMITTED_AT
        )
        parser_client.poll.return_value = pending("job-1")

        outcome = await service.parse_dependencies(record.id)

        assert outcome == ParseOutcome.PENDING
        parser_client.poll.assert_awaited_once_with("job-1")
        parser_client.submit.assert_not_awaited()
        repository = await repository_repo.get(record.id)
        assert repository.dependency_job_id == "job-1"
        assert repository.dependency_job_submitted_at.replace(tzinfo=None) == (
            SUBMITTED_AT.replace(tzinfo=None)
        )

    async def test_pending_with_new_handle_persists_it(
        self, service, parser_client, repository_repo, add_repository
    ):
        record = await add_repository(
            dependency_job_id="job-1", dependency_job_submitted_at=SUBMITTED_AT
        )
        parser_client.poll.return_value = pending("job-2")

        await service.parse_dependencies(record.id)

        repository = await repository_repo.get(record.id)
        assert repository.dependency_job_id == "job-2"

    async def test_malformed_payload_keeps_handle(
        self, service, parser_client, repository_repo, add_repository
    ):
        record = await add_repository(
            dependency_job_id="job-1", dependency_job_submitted_at=SUBMITTED_AT
        )
        parser_client.poll.side_effect = MalformedJobPayload("<html>")

        outcome = await service.parse_dependencies(record.id)

        assert outcome == ParseOutcome.FAILED
        repository = await repository_repo.get(record.id)
        assert repository.dependency_job_id == "job-1"
        assert repository.dependencies_parsed_at is None

    @pytest.mark.parametrize(
        "results",
        [
            {"manifests": "garbage"},
            {"manifests": {"platform": "npm"}},
            {
                "manifests": [
                    {"platform": "npm", "path": "package.json", "dependencies": "oops"}
                ]
            },
        ],
    )
    async def test_malformed_results_keep_handle_and_manifests(
        self,
        results,
        service,
        parser_client,
        repository_repo,
        manifest_repo,
        add_repository,
    ):
        record = await add_repository(
            dependency_job_id="job-1", dependency_job_submitted_at=SUBMITTED_AT
        )
        parser_client.poll.return_value = complete()
        await service.parse_dependencies(record.id)
        await repository_repo.record_job_handle(record.id, "job-2", SUBMITTED_AT)

        def poll(job_id):
            return ParseJob.from_payload(
                {"id": job_id, "status": "complete", "results": results}
            )

        parser_client.poll.side_effect = poll

        outcome = await service.parse_dependencies(record.id)

        assert outcome == ParseOutcome.FAILED
        manifests = await manifest_repo.get_manifests(record.id)
        assert [(m.ecosystem, m.filepath) for m in manifests] == [("npm", "package.json")]
        repository = await repository_repo.get(record.id)
        assert repository.dependency_job_id == "job-2"

    async def test_complete_job_reconciles_and_clears_handle(
        self, service, parser_client, repository_repo, manifest_repo, add_repository
    ):
        record = await add_repository(
            dependency_job_id="job-1", dependency_job_submitted_at=SUBMITTED_AT
        )
        parser_client.poll.return_value = complete()

        outcome = await service.parse_dependencies(record.id)

        assert outcome == ParseOutcome.RECONCILED
        dependencies = await manifest_repo.get_dependencies(record.id)
        assert [(d.package_name, d.direct) for d in dependencies] == [("react", True)]

        repository = await repository_repo.get(record.id)
        assert repository.dependency_job_id is None
        assert repository.dependency_job_submitted_at is None
        assert repository.dependencies_parsed_at is not None

    async def test_empty_result_clears_manifests_and_stamps_parsed_time(
        self, service, parser_client, repository_repo, manifest_repo, add_repository
    ):
        record = await add_repository(
            dependency_job_id="job-1", dependency_job_submitted_at=SUBMITTED_AT
        )
        parser_client.poll.return_value = complete()
        await service.parse_dependencies(record.id)

        await service.record_job(
            await repository_repo.get(record.id), complete(results={"manifests": []})
        )

        assert await manifest_repo.get_manifests(record.id) == []
        repository = await repository_repo.get(record.id)
        assert repository.dependency_job_id is None
        assert repository.dependencies_parsed_at is not None

    async def test_error_job_clears_manifests(
        self, service, parser_client, repository_repo, manifest_repo, add_repository
    ):
        record = await add_repository()
        parser_client.submit.return_value = complete()
        await service.parse_dependencies(record.id)

        await service.record_job(
            await repository_repo.get(record.id),
            ParseJob.from_payload({"id": "job-9", "status": "error"}),
        )

        assert await manifest_repo.get_manifests(record.id) == []


class TestClearAbandonedJobs:
    async def test_clears_only_stale_handles(
        self, service, async_session, repository_repo, add_repository
    ):
        now = datetime.now(timezone.utc)
        stale = await add_repository(
            "a/stale",
            dependency_job_id="job-1",
            dependency_job_submitted_at=now - timedelta(hours=30),
        )
        untracked = await add_repository("a/untracked", dependency_job_id="job-2")
        recent = await add_repository(
            "a/recent",
            dependency_job_id="job-3",
            dependency_job_submitted_at=now - timedelta(hours=1),
        )

        cleared = await service.clear_abandoned_jobs(timedelta(hours=24))
        async_session.expire_all()

        assert cleared == 2
        assert (await repository_repo.get(stale.id)).dependency_job_id is None
        assert (await repository_repo.get(untracked.id)).dependency_job_id is None
        assert (await repository_repo.get(recent.id)).dependency_job_id == "job-3"
