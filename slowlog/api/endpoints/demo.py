"""
Demo Endpoint

GET /demo/init  →  enables pg_stat_statements and runs a few statements
against a throwaway ``users`` table so the statistics view has rows.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from slowlog.core.config import settings
from slowlog.core.database import get_stats_repository
from slowlog.core.limiter import limiter
from slowlog.core.stats_repository import StatsRepository

router = APIRouter()


@router.get(
    "/init",
    response_class=PlainTextResponse,
    summary="Seed the demo schema",
    description="Drops and recreates the demo `users` table, then runs sample statements.",
)
@limiter.limit(settings.RATE_LIMIT)
async def init_demo(
    request: Request,
    repo: StatsRepository = Depends(get_stats_repository),
) -> str:
    await repo.demo()
    return "init demo"
