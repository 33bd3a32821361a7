"""Tag listing, convergence and the download task."""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from reposync.hosts.host_adapters import HostAdapterFactory
from reposync.main.exceptions import HostError
from reposync.repositories.repository_repo import RepositoryRepository
from reposync.tags.git_tags import GitTagFetcher
from reposync.tags.tag import RemoteTag, parse_ls_remote
from reposync.tags.tag_repo import TagRepository
from reposync.tags.tag_service import TagService

LS_REMOTE = (
    "1111111111111111111111111111111111111111\trefs/tags/v1.0.0\n"
    "2222222222222222222222222222222222222222\trefs/tags/v1.1.0\n"
    "3333333333333333333333333333333333333333\trefs/tags/v1.1.0^{}\n"
    "4444444444444444444444444444444444444444\trefs/heads/main\n"
    "garbage line\n"
)


class TestParseLsRemote:
    def test_peeled_sha_wins_for_annotated_tags(self):
        tags = parse_ls_remote(LS_REMOTE)

        assert tags == [
            RemoteTag(name="v1.0.0", sha="1" * 40),
            RemoteTag(name="v1.1.0", sha="3" * 40),
        ]

    def test_peeled_line_before_tag_line(self):
        output = "bbbb\trefs/tags/v2^{}\naaaa\trefs/tags/v2\n"

        assert parse_ls_remote(output) == [RemoteTag(name="v2", sha="bbbb")]

    def test_empty_output(self):
        assert parse_ls_remote("") == []


class FakeProcess:
    def __init__(self, stdout=b"", stderr=b"", returncode=0, hang=False):
        self._stdout = stdout
        self._stderr = stderr
        self.returncode = returncode
        self.hang = hang
        self.killed = False

    async def communicate(self):
        if self.hang:
            await asyncio.sleep(10)
        return self._stdout, self._stderr

    def kill(self):
        self.killed = True

    async def wait(self):
        return self.returncode


class TestGitTagFetcher:
    async def test_runs_ls_remote_and_parses_output(self):
        process = FakeProcess(stdout=LS_REMOTE.encode())

        with patch(
            "reposync.tags.git_tags.asyncio.create_subprocess_exec",
            AsyncMock(return_value=process),
        ) as create:
            tags = await GitTagFetcher().fetch("https://github.com/a/b.git")

        assert [tag.name for tag in tags] == ["v1.0.0", "v1.1.0"]
        assert create.await_args.args == (
            "git", "ls-remote", "--tags", "https://github.com/a/b.git"
        )

    async def test_non_zero_exit_raises_host_error(self):
        process = FakeProcess(stderr=b"repository not found", returncode=128)

        with patch(
            "reposync.tags.git_tags.asyncio.create_subprocess_exec",
            AsyncMock(return_value=process),
        ):
            with pytest.raises(HostError, match="repository not found"):
                await GitTagFetcher().fetch("https://github.com/a/missing.git")

    async def test_timeout_kills_process(self):
        process = FakeProcess(hang=True)

        with patch(
            "reposync.tags.git_tags.asyncio.create_subprocess_exec",
            AsyncMock(return_value=process),
        ):
            with pytest.raises(HostError, match="timed out"):
                await GitTagFetcher(timeout=0.01).fetch("https://github.com/a/b.git")

        assert process.killed


class TestTagRepository:
    async def test_converge_inserts_updates_and_deletes(
        self, async_session, add_repository
    ):
        record = await add_repository()
        tag_repo = TagRepository(async_session)
        await tag_repo.converge(
            record.id, [RemoteTag("v1", "aaa"), RemoteTag("v2", "bbb")]
        )

        counts = await tag_repo.converge(
            record.id, [RemoteTag("v2", "ccc"), RemoteTag("v3", "ddd")]
        )

        assert counts == (1, 1, 1)
        assert await tag_repo.get_tags(record.id) == {"v2": "ccc", "v3": "ddd"}

    async def test_converge_is_idempotent(self, async_session, add_repository):
        record = await add_repository()
        tag_repo = TagRepository(async_session)
        tags = [RemoteTag("v1", "aaa")]
        await tag_repo.converge(record.id, tags)

        assert await tag_repo.converge(record.id, tags) == (0, 0, 0)


class TestTagService:
    @pytest.fixture
    def tag_fetcher(self):
        return AsyncMock()

    @pytest.fixture
    def service(self, async_session, tag_fetcher):
        return TagService(
            repository_repo=RepositoryRepository(async_session),
            tag_repo=TagRepository(async_session),
            tag_fetcher=tag_fetcher,
            host_adapter_factory=HostAdapterFactory(archives_client=MagicMock()),
        )

    async def test_syncs_tags_and_stamps_time(
        self, service, tag_fetcher, async_session, add_repository
    ):
        record = await add_repository("ecosyste-ms/repos")
        tag_fetcher.fetch.return_value = [RemoteTag("v1", "aaa")]

        assert await service.download_tags(record.id) is True

        tag_fetcher.fetch.assert_awaited_once_with(
            "https://github.com/ecosyste-ms/repos.git"
        )
        assert await TagRepository(async_session).get_tags(record.id) == {"v1": "aaa"}
        assert record.tags_last_synced_at is not None

    async def test_unreachable_remote_still_stamps_time(
        self, service, tag_fetcher, add_repository
    ):
        record = await add_repository()
        tag_fetcher.fetch.side_effect = HostError("unreachable")

        assert await service.download_tags(record.id) is False
        assert record.tags_last_synced_at is not None
