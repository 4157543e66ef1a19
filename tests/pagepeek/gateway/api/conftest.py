import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import AsyncClient

from pagepeek.gateway import create_app
from pagepeek.gateway.config import Settings


@pytest.fixture
def settings(storage_root) -> Settings:
    return Settings(basepath=storage_root, mode="production", render_timeout_seconds=10.0, render_workers=2)


@pytest_asyncio.fixture(scope="function")
async def app(settings) -> FastAPI:
    app = create_app(settings)

    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        yield client
