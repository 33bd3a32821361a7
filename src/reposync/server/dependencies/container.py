from dependency_injector import providers
from fastapi import Depends

from reposync.database.database import AsyncSession, get_session_with_transaction
from reposync.main.container.container import Container


def get_container():
    """FastAPI dependency: a container bound to the request's transaction."""

    async def _get_container(
        session: AsyncSession = Depends(get_session_with_transaction),
    ) -> Container:
        return Container(session=providers.Object(session))

    return _get_container
