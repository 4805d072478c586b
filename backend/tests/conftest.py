"""
Shared fixtures for the job search worker tests.

Run with: pytest -v
"""
import uuid
from typing import Callable

import httpx
import pytest
import pytest_asyncio

from jobsearch.config import Settings
from jobsearch.database import create_session_factory, init_db


@pytest.fixture
def settings() -> Settings:
    """Settings with every external credential configured."""
    return Settings(
        database_url="sqlite:///:memory:",
        openai_api_key="test-openai-key",
        brave_api_key="test-brave-key",
    )


@pytest.fixture
def offline_settings() -> Settings:
    """Settings with no external credentials."""
    return Settings(
        database_url="sqlite:///:memory:",
        openai_api_key="",
        brave_api_key="",
    )


@pytest.fixture
def user_id() -> uuid.UUID:
    return uuid.UUID("3f1c2b7e-8a4d-4e6f-9b2a-1c0d5e7f8a9b")


@pytest.fixture
def make_client() -> Callable[[Callable], httpx.AsyncClient]:
    """Build an httpx client whose requests are answered by handler."""

    def factory(handler: Callable) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Session factory over a fresh SQLite file with all tables created."""
    engine, factory = create_session_factory(f"sqlite:///{tmp_path / 'jobs.db'}")
    await init_db(engine)
    yield factory
    await engine.dispose()
