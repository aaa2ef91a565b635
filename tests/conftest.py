import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from app.dependencies.database import DatabaseSessionManager, get_db_session
from app.main import app


def make_sqlite_manager() -> DatabaseSessionManager:
    # StaticPool keeps a single connection so the in-memory database survives between sessions
    return DatabaseSessionManager(
        "sqlite+aiosqlite://",
        {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}},
    )


@pytest.fixture
def run_in_session() -> Callable[[Callable[[Any], Awaitable[Any]]], Any]:
    """Run an async scenario against a fresh in-memory database session."""

    def runner(scenario: Callable[[Any], Awaitable[Any]]) -> Any:
        async def main() -> Any:
            manager = make_sqlite_manager()
            await manager.configure()
            await manager.create_all()
            try:
                async with manager.session() as session:
                    return await scenario(session)
            finally:
                await manager.close()

        return asyncio.run(main())

    return runner


@pytest.fixture
def db_client():
    manager = make_sqlite_manager()
    ready = False

    async def override_get_db_session():
        nonlocal ready
        if not ready:
            await manager.configure()
            await manager.create_all()
            ready = True
        async with manager.session() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db_session
    with TestClient(app) as client:
        yield client
        client.portal.call(manager.close)
    app.dependency_overrides.clear()
