from contextlib import asynccontextmanager

from fastapi import FastAPI

from reposync.database.database import sessionmanager
from reposync.jobs.job_manager import job_manager
from reposync.main.aiohttp_client import aiohttp_client
from reposync.main.config import get_settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup()
    yield
    await shutdown()


async def startup():
    settings = get_settings()

    aiohttp_client.start()
    sessionmanager.init(settings.database_url)
    await job_manager.init()


async def shutdown():
    await sessionmanager.close()
    await aiohttp_client.stop()
    await job_manager.close()
