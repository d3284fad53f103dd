import logging
from collections import defaultdict
from collections.abc import Awaitable
from collections.abc import Callable
from collections.abc import Hashable
from collections.abc import Iterable
from collections.abc import Sequence
from typing import Any

import inject
from pydantic import BaseModel
from sqlalchemy import FromClause
from sqlalchemy import Select
from sqlalchemy.dialects import postgresql
from sqlalchemy.sql import ClauseElement
from strawberry.dataloader import DataLoader

from clean_keyset import Connection
from clean_keyset import DEFAULT_REQUESTED_FIELDS
from clean_keyset import Edge
from clean_keyset import InvalidCursorError
from clean_keyset import MalformedCursorError
from clean_keyset import Mapper
from clean_keyset import needed_queries
from clean_keyset import PageInfo
from clean_keyset import PaginationRequest
from clean_keyset import SchemaMapper
from clean_keyset import to_cursor
from clean_keyset.graphql import get_requested_fields

from .column_identifiers import to_snake_case
from .connection_builder import ConnectionBuilder
from .connection_builder import KEY_COLUMN
from .connection_builder import SORT_COLUMN
from .sql_provider import SQLDatabase
from .sql_provider import SQLProvider

__all__ = ["ConnectionLoader", "EdgeRecord", "to_connection"]

logger = logging.getLogger(__name__)

DIALECT = postgresql.dialect()

# (sort key values, node)
EdgeRecord = tuple[list[Any], Any]


def to_connection(
    request: PaginationRequest, records: Sequence[EdgeRecord], count: int = 0
) -> Connection:
    """Shape the rows fetched for one request into a Connection.

    'records' are the rows of the edges query for this request, in query order. As
    they were fetched with limit + 1, an extra record means there are more.
    """
    edges = []
    for sort_values, node in records:
        fields = node if isinstance(node, dict) else dict(node)
        edges.append(
            Edge.model_validate(
                {**fields, "cursor": to_cursor(sort_values), "node": node}
            )
        )
    sliced = edges[: request.limit]
    if request.reverse:
        sliced.reverse()
    has_more = len(edges) > len(sliced)
    # whether there is something at the cursor side is only known from the cursor
    has_cursor = bool(request.cursor)
    return Connection(
        edges=sliced,
        count=count,
        page_info=PageInfo(
            has_next_page=has_cursor if request.reverse else has_more,
            has_previous_page=has_more if request.reverse else has_cursor,
            start_cursor=sliced[0].cursor if sliced else None,
            end_cursor=sliced[-1].cursor if sliced else None,
        ),
    )


def _fingerprint(clauses: Iterable[ClauseElement]) -> str:
    parts = []
    for clause in clauses:
        compiled = clause.compile(dialect=DIALECT)
        parts.append(f"{compiled}|{sorted(compiled.params.items())!r}")
    return ";".join(parts)


class ConnectionLoader:
    """Loads connections (edges, pageInfo, count) of one query, batched.

    All requests done in the same event loop iteration are combined into at most
    two statements: one for the edges and one for the counts.

    Usage:

        class BarConnectionLoader(ConnectionLoader, query=select(bar)):
            pass

        loader = BarConnectionLoader(provider)
        connection = await loader.load(
            PaginationRequest(order_by=lambda c: [(c.uid, "ASC")], limit=10)
        )

    Args (class definition):
        query: the query (or table) to paginate, it is aliased as 't1'
        column_name_transformer: maps field names to column names (to_snake_case)
        schema: optional pydantic model to validate and parse the records with
        default_requested_fields: fields assumed when a request has no
            'requested_fields' and no 'info'
    """

    builder: ConnectionBuilder
    mapper: Mapper
    default_requested_fields: frozenset[str]

    def __init_subclass__(
        cls,
        query: Select | FromClause,
        column_name_transformer: Callable[[str], str] = to_snake_case,
        schema: type[BaseModel] | None = None,
        default_requested_fields: Iterable[str] = DEFAULT_REQUESTED_FIELDS,
    ) -> None:
        cls.builder = ConnectionBuilder(query, column_name_transformer)
        cls.mapper = Mapper() if schema is None else SchemaMapper(schema)
        cls.default_requested_fields = frozenset(default_requested_fields)
        super().__init_subclass__()

    def __init__(
        self,
        provider_override: SQLProvider | None = None,
        cache: bool = True,
        max_batch_size: int | None = None,
    ):
        self.provider_override = provider_override
        self._loader: DataLoader[PaginationRequest, Connection] = DataLoader(
            load_fn=self._batch_load,
            cache=cache,
            max_batch_size=max_batch_size,
            cache_key_fn=self.cache_key,
        )

    @property
    def provider(self) -> SQLProvider:
        return self.provider_override or inject.instance(SQLDatabase)

    def requested_fields(self, request: PaginationRequest) -> frozenset[str]:
        if request.requested_fields is not None:
            return request.requested_fields
        if request.info is not None:
            return frozenset(get_requested_fields(request.info))
        return self.default_requested_fields

    def cache_key(self, request: PaginationRequest) -> Hashable:
        """Requests with equal keys are loaded once (if caching is enabled)"""
        where = self.builder.filter(request)
        return (
            request.cursor,
            request.reverse,
            request.limit,
            _fingerprint(self.builder.keyset(request).order_by()),
            "" if where is None else _fingerprint([where]),
            self.requested_fields(request),
        )

    def load(self, request: PaginationRequest) -> Awaitable[Connection]:
        """Load one connection; batched with other loads of the same iteration."""
        return self._loader.load(request)

    def load_many(
        self, requests: Iterable[PaginationRequest]
    ) -> Awaitable[list[Connection]]:
        return self._loader.load_many(requests)

    def clear(self, request: PaginationRequest) -> None:
        self._loader.clear(request)

    def clear_all(self) -> None:
        self._loader.clear_all()

    def _to_edge_record(
        self, row: dict[str, Any], query: Any
    ) -> tuple[str, EdgeRecord]:
        row = dict(row)
        key = str(row.pop(KEY_COLUMN))
        sort_values = row.pop(SORT_COLUMN) or []
        return key, (list(sort_values), self.mapper.to_internal(row, query))

    async def _fetch_edges(
        self, queries: list[Select]
    ) -> dict[str, list[EdgeRecord]]:
        query = ConnectionBuilder.combine(queries)
        result: dict[str, list[EdgeRecord]] = defaultdict(list)
        if query is None:
            return result
        for row in await self.provider.execute(query):
            key, record = self._to_edge_record(row, query)
            result[key].append(record)
        return result

    async def _fetch_counts(self, queries: list[Select]) -> dict[str, int]:
        query = ConnectionBuilder.combine(queries)
        if query is None:
            return {}
        return {
            str(row[KEY_COLUMN]): row["count"]
            for row in await self.provider.execute(query)
        }

    async def _batch_load(
        self, requests: list[PaginationRequest]
    ) -> list[Connection | Exception]:
        results: list[Connection | Exception | None] = [None] * len(requests)
        needs: list[tuple[bool, bool]] = []
        edges_queries = []
        count_queries = []
        for index, request in enumerate(requests):
            key = str(index)
            need_edges, need_count = needed_queries(self.requested_fields(request))
            needs.append((need_edges, need_count))
            try:
                if need_edges:
                    edges_query = self.builder.edges(key, request)
                if need_count:
                    count_query = self.builder.count(key, request)
            except (MalformedCursorError, InvalidCursorError) as e:
                results[index] = e
                continue
            if need_edges:
                edges_queries.append(edges_query)
            if need_count:
                count_queries.append(count_query)

        logger.debug(
            "loading %d connection(s): %d edges and %d count sub-queries",
            len(requests),
            len(edges_queries),
            len(count_queries),
        )

        # The statements fail independently: an error only rejects the requests
        # that needed the failing statement.
        edges: dict[str, list[EdgeRecord]] | Exception
        counts: dict[str, int] | Exception
        try:
            edges = await self._fetch_edges(edges_queries)
        except Exception as e:
            logger.info(f"edges query failed: {e!r}")
            edges = e
        try:
            counts = await self._fetch_counts(count_queries)
        except Exception as e:
            logger.info(f"count query failed: {e!r}")
            counts = e

        for index, request in enumerate(requests):
            if results[index] is not None:
                continue
            key = str(index)
            need_edges, need_count = needs[index]
            if need_edges and isinstance(edges, Exception):
                results[index] = edges
            elif need_count and isinstance(counts, Exception):
                results[index] = counts
            else:
                results[index] = to_connection(
                    request,
                    [] if isinstance(edges, Exception) else edges.get(key, []),
                    0 if isinstance(counts, Exception) else counts.get(key, 0),
                )
        return results  # type: ignore
