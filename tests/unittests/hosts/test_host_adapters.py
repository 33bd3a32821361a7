from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from reposync.hosts.host import Host, HostKind
from reposync.hosts.host_adapters import (
    BitbucketAdapter,
    GiteaAdapter,
    GitHubAdapter,
    GitLabAdapter,
    HostAdapterFactory,
    host_adapter_for,
)
from reposync.main.exceptions import ArchiveServiceError, HostError
from reposync.repositories.repository import Repository


def make_host(kind: HostKind, url: str) -> Host:
    return Host(id=uuid4(), created_at=None, updated_at=None, name=kind.value, url=url, kind=kind)


def make_repository(host: Host, full_name="group/sub/project", default_branch="develop"):
    return Repository(
        id=uuid4(),
        created_at=None,
        updated_at=None,
        host=host,
        full_name=full_name,
        default_branch=default_branch,
    )


@pytest.mark.parametrize(
    "kind, url, expected",
    [
        (
            HostKind.GITHUB,
            "https://github.com",
            "https://codeload.github.com/group/sub/project/tar.gz/refs/heads/develop",
        ),
        (
            HostKind.GITLAB,
            "https://gitlab.com/",
            "https://gitlab.com/group/sub/project/-/archive/develop/project-develop.tar.gz",
        ),
        (
            HostKind.GITEA,
            "https://codeberg.org",
            "https://codeberg.org/group/sub/project/archive/develop.tar.gz",
        ),
        (
            HostKind.BITBUCKET,
            "https://bitbucket.org",
            "https://bitbucket.org/group/sub/project/get/develop.tar.gz",
        ),
    ],
)
def test_download_url_per_provider(kind, url, expected):
    host = make_host(kind, url)

    adapter = host_adapter_for(host, archives_client=AsyncMock())

    assert adapter.download_url(make_repository(host)) == expected


def test_github_tag_archive():
    host = make_host(HostKind.GITHUB, "https://github.com")
    adapter = GitHubAdapter(host, AsyncMock())

    url = adapter.download_url(make_repository(host), branch="v1.0.0", kind="tag")

    assert url.endswith("/tar.gz/refs/tags/v1.0.0")


def test_branch_falls_back_to_main():
    host = make_host(HostKind.GITEA, "https://codeberg.org")
    repository = make_repository(host, default_branch=None)

    assert GiteaAdapter(host, AsyncMock()).download_url(repository).endswith("/main.tar.gz")


def test_clone_and_html_urls():
    host = make_host(HostKind.GITLAB, "https://gitlab.com/")
    adapter = GitLabAdapter(host, AsyncMock())
    repository = make_repository(host)

    assert adapter.html_url(repository) == "https://gitlab.com/group/sub/project"
    assert adapter.clone_url(repository) == "https://gitlab.com/group/sub/project.git"


def test_unknown_host_kind_raises():
    host = make_host(HostKind.GITHUB, "https://example.com")
    host.kind = "sourcehut"

    with pytest.raises(HostError):
        host_adapter_for(host, archives_client=AsyncMock())


def test_factory_resolves_adapter_for_host():
    host = make_host(HostKind.BITBUCKET, "https://bitbucket.org")

    adapter = HostAdapterFactory(archives_client=AsyncMock())(host)

    assert isinstance(adapter, BitbucketAdapter)


async def test_file_list_failure_returns_empty_list():
    host = make_host(HostKind.GITHUB, "https://github.com")
    archives_client = AsyncMock()
    archives_client.list_files.side_effect = ArchiveServiceError("down")

    files = await GitHubAdapter(host, archives_client).get_file_list(make_repository(host))

    assert files == []


async def test_file_contents():
    host = make_host(HostKind.GITHUB, "https://github.com")
    archives_client = AsyncMock()
    archives_client.file_contents.return_value = {"contents": "github: [octocat]", "sha": "1"}
    adapter = GitHubAdapter(host, archives_client)

    contents = await adapter.get_file_contents(make_repository(host), ".github/FUNDING.yml")

    assert contents == {"content": "github: [octocat]", "sha": "1"}

    archives_client.file_contents.side_effect = ArchiveServiceError("down")
    assert await adapter.get_file_contents(make_repository(host), "x") is None
