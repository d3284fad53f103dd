from collections.abc import Callable
from collections.abc import Sequence

from sqlalchemy import and_
from sqlalchemy import FromClause
from sqlalchemy import func
from sqlalchemy import JSON
from sqlalchemy import literal
from sqlalchemy import select
from sqlalchemy import Select
from sqlalchemy import union_all
from sqlalchemy.sql import Executable
from sqlalchemy.sql.expression import ColumnElement

from clean_keyset import from_cursor
from clean_keyset import PaginationRequest

from .column_identifiers import ColumnIdentifiers
from .column_identifiers import to_snake_case
from .keyset_builder import KeysetBuilder

__all__ = ["ConnectionBuilder", "KEY_COLUMN", "SORT_COLUMN", "TABLE_ALIAS"]


KEY_COLUMN = "key"
SORT_COLUMN = "s1"
TABLE_ALIAS = "t1"


class ConnectionBuilder:
    """Builds the per-request sub-queries of a connection and combines them.

    Every sub-query selects from the caller's query, aliased as t1, and is tagged
    with a key so that the rows of the combined (UNION ALL) statement can be
    attributed to the request again.
    """

    def __init__(
        self,
        query: Select | FromClause,
        column_name_transformer: Callable[[str], str] = to_snake_case,
    ):
        if isinstance(query, FromClause):
            query = select(query)
        self.subquery = query.subquery(TABLE_ALIAS)
        self.columns = ColumnIdentifiers(self.subquery, column_name_transformer)

    def keyset(self, request: PaginationRequest) -> KeysetBuilder:
        if request.order_by is None:
            return KeysetBuilder([], request.reverse)
        return KeysetBuilder(request.order_by(self.columns), request.reverse)

    def filter(self, request: PaginationRequest) -> ColumnElement | None:
        if request.where is None:
            return None
        return request.where(self.columns)

    def edges(self, key: str, request: PaginationRequest) -> Select:
        """SELECT key, t1.*, [sort keys] ... ORDER BY ... LIMIT limit + 1

        The extra row tells whether there is a next page.
        """
        keyset = self.keyset(request)
        conditions = []
        where = self.filter(request)
        if where is not None:
            conditions.append(where)
        if request.cursor:
            seek = keyset.seek(from_cursor(request.cursor))
            if seek is not None:
                conditions.append(seek)
        query = select(
            literal(key).label(KEY_COLUMN),
            self.subquery,
            func.json_build_array(*keyset.sort_keys(), type_=JSON).label(SORT_COLUMN),
        )
        if conditions:
            query = query.where(and_(*conditions))
        if len(keyset) > 0:
            query = query.order_by(*keyset.order_by())
        if request.limit is not None:
            query = query.limit(request.limit + 1)
        return query

    def count(self, key: str, request: PaginationRequest) -> Select:
        query = select(
            literal(key).label(KEY_COLUMN), func.count().label("count")
        ).select_from(self.subquery)
        where = self.filter(request)
        if where is not None:
            query = query.where(where)
        return query

    @staticmethod
    def combine(queries: Sequence[Select]) -> Executable | None:
        if len(queries) == 0:
            return None
        elif len(queries) == 1:
            return queries[0]
        else:
            return union_all(*queries)
