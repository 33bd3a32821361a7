import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from reposync.database.tables import Base, Hosts, Repositories
from reposync.hosts.host import Host, HostKind
from reposync.main.config import Settings, reset_settings, set_settings
from reposync.repositories.repository import Repository


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings with explicit values for unit tests.

    Provides a clean, isolated configuration that doesn't depend on the
    .env file or environment variables.
    """
    return Settings(
        # Minimal database settings (not used in unit tests)
        postgres_user="unit_test_user",
        postgres_host="localhost",
        postgres_password="unit_test_password",
        postgres_port=5432,
        postgres_db="unit_test_db",

        # Redis settings (not used in unit tests)
        redis_host="localhost",
        redis_port=6379,

        # Small admission limits keep the tests readable
        dependencies_queue_ceiling=10,
        dependencies_batch_size=5,

        # Testing mode
        testing=True,
        dev=True,
    )


@pytest.fixture(autouse=True)
def use_test_settings(test_settings):
    """Install the test settings and reset them after each test."""
    set_settings(test_settings)
    yield
    reset_settings()


@pytest.fixture
async def async_session():
    """Create an in-memory SQLite database for testing.

    SQLite has no JSONB and ignores FOR UPDATE, but SQLAlchemy emulates the
    JSON columns. This is sufficient for unit testing the repository logic.
    """
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_factory = async_sessionmaker(engine, expire_on_commit=False)

    async with async_session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
async def github_host(async_session) -> Hosts:
    host = Hosts(name="GitHub", url="https://github.com", kind=HostKind.GITHUB.value)
    async_session.add(host)
    await async_session.flush()
    return host


@pytest.fixture
def add_repository(async_session, github_host):
    """Factory inserting a repository row; keyword arguments override columns."""
    created = datetime(2024, 1, 1, tzinfo=timezone.utc)

    async def _add_repository(full_name: str | None = None, **columns) -> Repositories:
        nonlocal created
        created += timedelta(minutes=1)

        values = {
            "host_id": github_host.id,
            "host": github_host,
            "full_name": full_name or f"owner/repo-{uuid.uuid4().hex[:8]}",
            "default_branch": "main",
            "created_at": created,
            "updated_at": created,
        }
        values.update(columns)

        record = Repositories(**values)
        async_session.add(record)
        await async_session.flush()
        return record

    return _add_repository


@pytest.fixture
def host() -> Host:
    return Host(
        id=uuid.uuid4(),
        created_at=None,
        updated_at=None,
        name="GitHub",
        url="https://github.com/",
        kind=HostKind.GITHUB,
    )


@pytest.fixture
def repository(host: Host) -> Repository:
    return Repository(
        id=uuid.uuid4(),
        created_at=None,
        updated_at=None,
        host=host,
        full_name="ecosyste-ms/repos",
        default_branch="main",
    )
