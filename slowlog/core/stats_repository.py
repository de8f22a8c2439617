"""
PostgreSQL-backed repository for the slow query log.

Responsibilities:
- Build and run the paginated, filtered, sorted lookup against
  ``pg_stat_statements``.
- Seed the demo ``users`` table so the statistics view has something to show.

The repository is written against the small ``ConnectionPool`` / ``Connection``
protocols below. SQLAlchemy's ``AsyncEngine`` satisfies them in production;
tests pass in-memory fakes.
"""

import asyncio
from typing import Any, AsyncContextManager, Iterable, Mapping, Optional, Protocol, Sequence

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.expression import Executable

from slowlog.core.errors import ExecutionError, RowsError
from slowlog.core.params import resolve_query_params
from slowlog.models.schemas import QueryParams, ResolvedQuery, SlowQueryLog

_DRIVER_ERRORS = (SQLAlchemyError, asyncio.TimeoutError)

SLOW_QUERY_SOURCE = "SELECT query, total_exec_time FROM public.pg_stat_statements"


# ---------------------------------------------------------------------------
# Driver seam
# ---------------------------------------------------------------------------


class Connection(Protocol):
    async def execute(
        self,
        statement: Executable,
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> Iterable[Sequence[Any]]: ...

    async def commit(self) -> None: ...


class ConnectionPool(Protocol):
    def connect(self) -> AsyncContextManager[Connection]: ...

    async def dispose(self) -> None: ...


# ---------------------------------------------------------------------------
# Statement building
# ---------------------------------------------------------------------------


def build_slow_query_statement(resolved: ResolvedQuery) -> tuple[str, dict[str, Any]]:
    """Return the lookup statement and its bind parameters.

    Clauses are appended in a fixed order: prefix filter (only when a query
    type is set), ORDER BY, then LIMIT/OFFSET. The sort direction comes from a
    closed set and is the only value written into the statement text.
    """
    sql = SLOW_QUERY_SOURCE
    bind: dict[str, Any] = {}

    if resolved.query_type:
        sql += " WHERE query ILIKE :query_type_prefix"
        bind["query_type_prefix"] = f"{resolved.query_type}%"

    sql += f" ORDER BY total_exec_time {resolved.order_by}"

    sql += " LIMIT :limit OFFSET :offset"
    bind["limit"] = resolved.limit
    bind["offset"] = resolved.offset

    return sql, bind


# Demo seed: (step name, statement). Each step is committed on its own.
DEMO_STEPS: tuple[tuple[str, str], ...] = (
    ("enable pg_stat_statements", "CREATE EXTENSION IF NOT EXISTS pg_stat_statements"),
    ("drop users table", "DROP TABLE IF EXISTS users"),
    (
        "create users table",
        """
        CREATE TABLE users (
            id SERIAL PRIMARY KEY,
            first_name TEXT,
            last_name TEXT,
            email TEXT UNIQUE NOT NULL,
            phone TEXT
        )
        """,
    ),
    (
        "insert demo user",
        """
        INSERT INTO users (first_name, last_name, email, phone)
        VALUES ('Oliver', 'Andersson', 'oliver@example.com', '123456789')
        """,
    ),
    ("sample read", "SELECT * FROM users WHERE first_name ILIKE 'O%'"),
    ("delete demo user", "DELETE FROM users WHERE first_name ILIKE 'O%'"),
)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class StatsRepository:
    """Reads ``pg_stat_statements`` through an explicitly owned connection pool.

    Holds no per-request state; one instance is shared by all requests and
    every call acquires its own pooled connection.
    """

    def __init__(self, pool: ConnectionPool, max_page_size: Optional[int] = None):
        self._pool = pool
        self._max_page_size = max_page_size

    async def get(self, params: QueryParams) -> list[SlowQueryLog]:
        """Return one page of slow query statistics.

        Raises:
            InvalidArgument: before touching the database.
            ExecutionError: the statement could not be run.
            RowsError: the rows could not be read back.
        """
        resolved = resolve_query_params(params, max_page_size=self._max_page_size)
        sql, bind = build_slow_query_statement(resolved)

        try:
            async with self._pool.connect() as conn:
                result = await conn.execute(text(sql), bind)
                return _scan_rows(result)
        except _DRIVER_ERRORS as exc:
            raise ExecutionError(f"slow query lookup failed: {exc}") from exc

    async def demo(self) -> None:
        """Run the demo seed.

        Steps run in order and stop at the first failure. Steps that already
        committed stay committed.
        """
        try:
            async with self._pool.connect() as conn:
                for name, statement in DEMO_STEPS:
                    try:
                        await conn.execute(text(statement))
                        await conn.commit()
                    except _DRIVER_ERRORS as exc:
                        raise ExecutionError(f"demo step '{name}' failed: {exc}") from exc
        except _DRIVER_ERRORS as exc:
            raise ExecutionError(f"demo seed failed: {exc}") from exc

    async def close(self) -> None:
        await self._pool.dispose()


def _scan_rows(result: Iterable[Sequence[Any]]) -> list[SlowQueryLog]:
    records: list[SlowQueryLog] = []
    try:
        for row in result:
            query, total_exec_time = row[0], row[1]
            # query is NULL when the server cannot read the stored statement text
            records.append(SlowQueryLog(
                query="" if query is None else query,
                total_exec_time=str(total_exec_time),
            ))
    except (SQLAlchemyError, IndexError, TypeError, ValueError) as exc:
        raise RowsError(f"reading slow query rows failed: {exc}") from exc
    return records
