"""
Slow Queries Endpoint: statement statistics

GET /slow-queries?page=&page_size=&query_type=&order_by=

Returns one page of ``pg_stat_statements`` rows as ``{query, total_exec_time}``
objects. An empty page is an empty array, not an error. Invalid
``query_type`` / ``order_by`` values are rejected with 400 before the
database is queried.

Successful pages are cached per parameter set (``X-Cache: HIT|MISS``). The
cache is consulted inside the handler, after the rate limit has been applied,
so cached pages count against the limit too.
"""

from typing import List

from fastapi import APIRouter, Depends, Query, Request, Response
from pydantic import TypeAdapter

from slowlog.core.cache import ResponseCache
from slowlog.core.config import settings
from slowlog.core.database import get_stats_repository
from slowlog.core.limiter import limiter
from slowlog.core.stats_repository import StatsRepository
from slowlog.models.schemas import QueryParams, SlowQueryLog

router = APIRouter()

_page_adapter = TypeAdapter(List[SlowQueryLog])


@router.get(
    "/slow-queries",
    response_model=List[SlowQueryLog],
    summary="List statement statistics",
    description=(
        "Paginated rows from pg_stat_statements, optionally filtered by the "
        "leading SQL verb and sorted by total execution time."
    ),
)
@limiter.limit(settings.RATE_LIMIT)
async def list_slow_queries(
    request: Request,
    page: int = Query(0, ge=0, description="Zero-based page number"),
    page_size: int = Query(0, ge=0, description="Rows per page, 0 = default (50)"),
    query_type: str = Query("", description="select | insert | update | delete"),
    order_by: str = Query("", description="asc | desc (default desc)"),
    repo: StatsRepository = Depends(get_stats_repository),
) -> Response:
    params = QueryParams(
        page=page,
        page_size=page_size,
        query_type=query_type,
        order_by=order_by,
    )
    # Only the four known parameters form the key; anything else in the
    # query string is ignored by this route and must not split the cache.
    key = (page, page_size, query_type.lower(), order_by.lower())
    cache: ResponseCache = request.app.state.response_cache

    body = cache.get(key)
    if body is not None:
        return Response(content=body, media_type="application/json", headers={"X-Cache": "HIT"})

    records = await repo.get(params)
    body = _page_adapter.dump_json(records)
    cache.set(key, body)
    return Response(content=body, media_type="application/json", headers={"X-Cache": "MISS"})
