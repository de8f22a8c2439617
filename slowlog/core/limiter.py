"""
Per-client rate limiting for the slow query routes.

Endpoints decorate themselves with ``@limiter.limit(settings.RATE_LIMIT)``;
``slowlog.main`` attaches the limiter to ``app.state`` and installs the 429
handler.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from slowlog.core.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.RATE_LIMIT_ENABLED,
)
