# tests/conftest.py

from __future__ import annotations

import os

# Must be set before config.settings is created.
os.environ["SQLMODE"] = "SQLITE"
os.environ["SQLITE_URL"] = "sqlite://:memory:"
os.environ["ENVIRONMENT"] = "development"
os.environ["OPENAI_API_KEY"] = ""

from collections.abc import Iterator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from tortoise import Tortoise

from api.openai_api import get_summarizer
from main import app

from .fakes import FakeSummarizer


@pytest.fixture()
def summarizer() -> FakeSummarizer:
    return FakeSummarizer()


@pytest.fixture()
def client(summarizer: FakeSummarizer) -> Iterator[TestClient]:
    """
    The real app (lifespan included) on a fresh in-memory SQLite database.

    The summarizer is swapped out so no test ever reaches the network.
    """
    app.dependency_overrides[get_summarizer] = lambda: summarizer
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def db():
    """Bare Tortoise setup for repository tests."""
    await Tortoise.init(
        db_url="sqlite://:memory:",
        modules={"models": ["database.models"]},
        use_tz=True,
    )
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()
