"""
Fixtures for integration tests against a real PostgreSQL (testcontainers).
"""

import logging
from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from sqlalchemy import delete
from testcontainers.postgres import PostgresContainer

from starsync.core.database.service import DatabaseService
from starsync.database.models.claim import Claim

logger = logging.getLogger(__name__)


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """
    Start PostgreSQL testcontainer for integration tests.

    Scope: session (container persists across all tests)
    """
    logger.info("Starting PostgreSQL testcontainer...")
    container = PostgresContainer(image="postgres:17-alpine", driver="asyncpg")
    try:
        container.start()
    except Exception as exc:
        pytest.skip(f"Docker is not available: {exc}")

    logger.info("PostgreSQL testcontainer started: %s", container.get_connection_url())

    yield container

    logger.info("Stopping PostgreSQL testcontainer...")
    container.stop()


@pytest_asyncio.fixture
async def database(postgres_container: PostgresContainer) -> AsyncGenerator[None, None]:
    """
    Initialize DatabaseService against the container with an empty claims table.

    Scope: function (engine is disposed after every test)
    """
    await DatabaseService.initialize(url=postgres_container.get_connection_url())
    async with DatabaseService.get_transaction() as session:
        await session.execute(delete(Claim))

    yield

    await DatabaseService.shutdown()
