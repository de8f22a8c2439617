"""
Entry point for the Slow Query Log API.

Run with:
    uvicorn slowlog.main:app --port 3000
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text

from slowlog.core.config import settings

# ---------------------------------------------------------------------------
# Logging configuration, applied once at module load
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# Silence noisy third-party loggers
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("asyncpg").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

from slowlog.api.endpoints import demo, slow_queries  # noqa: E402
from slowlog.core.cache import ResponseCache  # noqa: E402
from slowlog.core.database import create_engine_from_settings  # noqa: E402
from slowlog.core.errors import InvalidArgument, SlowLogError  # noqa: E402
from slowlog.core.limiter import limiter  # noqa: E402
from slowlog.core.stats_repository import StatsRepository  # noqa: E402


# ---------------------------------------------------------------------------
# Lifespan: owns the connection pool for the whole process
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s v%s", settings.APP_NAME, settings.APP_VERSION)

    engine = create_engine_from_settings(settings)
    app.state.engine = engine
    app.state.stats_repository = StatsRepository(
        engine,
        max_page_size=settings.MAX_PAGE_SIZE or None,
    )
    logger.info(
        "Connection pool ready for %s:%s/%s", settings.DB_HOST, settings.DB_PORT, settings.DB_NAME
    )

    yield

    await app.state.stats_repository.close()
    logger.info("Database engine disposed. Shutdown complete.")


# ---------------------------------------------------------------------------
# Application instance
# ---------------------------------------------------------------------------

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "Paginated, filtered and sorted access to PostgreSQL's "
        "pg_stat_statements view, plus a demo seed route."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.state.response_cache = ResponseCache(
    ttl_seconds=settings.CACHE_TTL_SECONDS,
    max_entries=settings.CACHE_MAX_ENTRIES,
)
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

@app.exception_handler(InvalidArgument)
async def invalid_argument_handler(request: Request, exc: InvalidArgument) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc), "field": exc.field},
    )


@app.exception_handler(SlowLogError)
async def slowlog_error_handler(request: Request, exc: SlowLogError) -> JSONResponse:
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    detail = str(exc) if settings.DEBUG else "The database request failed. Please try again later."
    return JSONResponse(
        status_code=500,
        content={"detail": detail},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    detail = str(exc) if settings.DEBUG else "An unexpected error occurred. Please try again later."
    return JSONResponse(
        status_code=500,
        content={"detail": detail},
    )


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s → %d  (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


origins = [o.strip() for o in settings.ALLOWED_ORIGINS.split(",") if o.strip()]
if origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["GET"],
        allow_headers=["Content-Type"],
    )

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(
    slow_queries.router,
    tags=["Slow Queries"],
)

app.include_router(
    demo.router,
    prefix="/demo",
    tags=["Demo"],
)

# ---------------------------------------------------------------------------
# Health endpoints
# ---------------------------------------------------------------------------

@app.get("/health", tags=["Health"], summary="Health check")
async def health_check() -> dict:
    return {"status": "healthy"}


@app.get("/health/db", tags=["Health"], summary="Database connectivity check")
async def health_db(request: Request) -> JSONResponse:
    try:
        async with request.app.state.engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
            row = result.scalar()
        return JSONResponse({"status": "ok", "result": row})
    except Exception as exc:
        logger.warning("Database health check failed: %s", exc)
        return JSONResponse(status_code=503, content={"status": "error", "error": str(exc)})
