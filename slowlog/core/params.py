"""
Query parameter resolution for the slow query log.

Turns the raw ``page`` / ``page_size`` / ``query_type`` / ``order_by`` values
of a request into a ``ResolvedQuery``. Pure: no SQL, no HTTP, no I/O.

Pagination contract:
  - ``page_size == 0`` falls back to ``DEFAULT_LIMIT``.
  - ``offset`` is ``page * limit`` using the *effective* limit, so a client
    that changes ``page_size`` between requests changes what a page number
    points at. Keep ``page_size`` constant while paginating.
  - There is no upper bound on ``page_size`` unless ``max_page_size`` is given.

When both ``query_type`` and ``order_by`` are invalid, ``order_by`` is the one
reported: ``query_type`` is checked first and the last failing check wins.
"""

from typing import Optional

from slowlog.core.errors import InvalidArgument
from slowlog.models.schemas import QueryParams, ResolvedQuery

DEFAULT_LIMIT = 50

SELECT = "select"
INSERT = "insert"
UPDATE = "update"
DELETE = "delete"
QUERY_TYPES = frozenset({SELECT, INSERT, UPDATE, DELETE})

ORDER_BY_ASC = "asc"
ORDER_BY_DESC = "desc"
ORDER_DIRECTIONS = frozenset({ORDER_BY_ASC, ORDER_BY_DESC})

# LIMIT and OFFSET are bigint in PostgreSQL.
MAX_BIGINT = 2**63 - 1


def resolve_query_params(
    params: QueryParams,
    max_page_size: Optional[int] = None,
) -> ResolvedQuery:
    """Validate and normalize request parameters.

    Args:
        params: Raw request values.
        max_page_size: Optional cap on ``page_size``. ``None`` or ``0`` keeps
            the page size unbounded.

    Returns:
        The resolved query.

    Raises:
        InvalidArgument: naming the offending field and its raw value.
    """
    if params.page < 0:
        raise InvalidArgument("page", params.page)
    if params.page_size < 0:
        raise InvalidArgument("page_size", params.page_size)
    if max_page_size and params.page_size > max_page_size:
        raise InvalidArgument("page_size", params.page_size)

    limit = params.page_size or DEFAULT_LIMIT
    offset = params.page * limit if params.page > 0 else 0
    if limit > MAX_BIGINT:
        raise InvalidArgument("page_size", params.page_size)
    if offset > MAX_BIGINT:
        raise InvalidArgument("page", params.page)

    error: Optional[InvalidArgument] = None

    query_type: Optional[str] = params.query_type.lower()
    if query_type == "":
        query_type = None
    elif query_type not in QUERY_TYPES:
        error = InvalidArgument("query_type", params.query_type)

    order_by = params.order_by.lower() or ORDER_BY_DESC
    if order_by not in ORDER_DIRECTIONS:
        error = InvalidArgument("order_by", params.order_by)

    if error is not None:
        raise error

    return ResolvedQuery(
        limit=limit,
        offset=offset,
        query_type=query_type,
        order_by=order_by,
    )
