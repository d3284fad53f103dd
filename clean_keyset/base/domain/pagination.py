# (c) Nelen & Schuurmans

from collections.abc import Callable
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import NonNegativeInt

from .types import OrderDirection

__all__ = ["PaginationRequest", "PageInfo", "Edge", "Connection"]

# Callbacks receive the column identifiers of the paginated query and return
# SQL expressions (SQLAlchemy clauses).
OrderByCallback = Callable[[Any], Sequence[tuple[Any, OrderDirection | str]]]
WhereCallback = Callable[[Any], Any]


class PaginationRequest(BaseModel):
    """The parameters of one paginated list request.

    - cursor: resume after (or before, if reverse) the record this cursor points to
    - limit: the maximum number of edges, None means unbounded
    - reverse: paginate from the tail instead of the head
    - order_by: callback returning (expression, direction) pairs
    - where: callback returning an additional filter expression
    - requested_fields: the connection fields the caller needs (edges, pageInfo,
      count); takes precedence over 'info'
    - info: GraphQL resolve info to derive the requested fields from
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    cursor: str | None = None
    limit: NonNegativeInt | None = None
    reverse: bool = False
    order_by: OrderByCallback | None = None
    where: WhereCallback | None = None
    requested_fields: frozenset[str] | None = None
    info: Any = Field(default=None, repr=False)


class PageInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    has_next_page: bool
    has_previous_page: bool
    start_cursor: str | None = None
    end_cursor: str | None = None


class Edge(BaseModel):
    """A record with its own cursor.

    The fields of the record are available on the edge itself and as 'node'.
    """

    model_config = ConfigDict(extra="allow")

    cursor: str
    node: Any


class Connection(BaseModel):
    edges: list[Edge] = []
    page_info: PageInfo
    # only filled if 'count' was requested
    count: int = 0
