"""Shared fixtures: in-memory stand-ins for the SQLAlchemy async engine.

``FakePool`` / ``FakeConnection`` implement the ``ConnectionPool`` /
``Connection`` protocols used by ``StatsRepository``, recording every
statement and its bind parameters so tests can assert on both.
"""

from __future__ import annotations

import os

os.environ.setdefault("DB_HOST", "localhost")
os.environ.setdefault("DB_USER", "test_user")
os.environ.setdefault("DB_PASSWORD", "test_password")
os.environ.setdefault("DB_NAME", "test_db")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Iterable, Mapping, Optional

import pytest

from slowlog.core.stats_repository import StatsRepository


class FakeConnection:
    """Records executed statements and replays configured rows or errors."""

    def __init__(
        self,
        rows: Optional[Iterable[Any]] = None,
        execute_error: Optional[BaseException] = None,
        fail_on: Optional[str] = None,
    ) -> None:
        self.rows = list(rows or [])
        self.execute_error = execute_error
        self.fail_on = fail_on
        self.executed: list[tuple[str, Optional[Mapping[str, Any]]]] = []
        self.commits = 0

    async def execute(self, statement: Any, parameters: Optional[Mapping[str, Any]] = None):
        sql = getattr(statement, "text", None) or str(statement)
        self.executed.append((sql, parameters))
        if self.execute_error is not None and (self.fail_on is None or self.fail_on in sql):
            raise self.execute_error
        return iter(self.rows)

    async def commit(self) -> None:
        self.commits += 1


class FakePool:
    def __init__(self, connection: FakeConnection, connect_error: Optional[BaseException] = None):
        self.connection = connection
        self.connect_error = connect_error
        self.acquired = 0
        self.released = 0
        self.disposed = False

    @asynccontextmanager
    async def connect(self) -> AsyncGenerator[FakeConnection, None]:
        if self.connect_error is not None:
            raise self.connect_error
        self.acquired += 1
        try:
            yield self.connection
        finally:
            self.released += 1

    async def dispose(self) -> None:
        self.disposed = True


FIXTURE_ROWS = [("select * from users", "14"), ("select * from users", "12")]


@pytest.fixture
def connection() -> FakeConnection:
    return FakeConnection(rows=FIXTURE_ROWS)


@pytest.fixture
def pool(connection: FakeConnection) -> FakePool:
    return FakePool(connection)


@pytest.fixture
def repo(pool: FakePool) -> StatsRepository:
    return StatsRepository(pool)
