"""
Pydantic models shared by the resolver, the repository and the endpoints.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class QueryParams(BaseModel):
    """Raw, untrusted pagination/filter/sort values taken from the request.

    ``page_size == 0`` means "unset". Validation happens in
    ``slowlog.core.params.resolve_query_params``, not here, so any value the
    HTTP layer lets through reaches the resolver unchanged.
    """

    model_config = ConfigDict(frozen=True)

    page: int = 0
    page_size: int = 0
    query_type: str = ""
    order_by: str = ""


class ResolvedQuery(BaseModel):
    """Validated, normalized and fully defaulted pagination, filter and sort values.

    Only built by ``resolve_query_params``.
    """

    model_config = ConfigDict(frozen=True)

    limit: int = Field(gt=0)
    offset: int = Field(ge=0)
    query_type: Optional[Literal["select", "insert", "update", "delete"]] = None
    order_by: Literal["asc", "desc"]


class SlowQueryLog(BaseModel):
    query: str
    # Kept as text so the value is not reformatted on its way to the client.
    total_exec_time: str
