from collections.abc import Awaitable
from collections.abc import Callable
from typing import Any

import inject
from pydantic import BaseModel
from sqlalchemy import cast
from sqlalchemy import FromClause
from sqlalchemy import literal
from sqlalchemy import select
from sqlalchemy import Select
from sqlalchemy import Subquery
from strawberry.dataloader import DataLoader

from clean_keyset import Id
from clean_keyset import Mapper
from clean_keyset import SchemaMapper

from .column_identifiers import ColumnIdentifiers
from .column_identifiers import to_snake_case
from .connection_builder import TABLE_ALIAS
from .sql_provider import SQLDatabase
from .sql_provider import SQLProvider

__all__ = ["NodeLoader"]


class NodeLoader:
    """Loads single records by a (unique) column, batched.

    Usage:

        class BarNodeLoader(NodeLoader, query=select(bar), type_name="Bar"):
            pass

        bar = await BarNodeLoader(provider).load(2)  # None if it doesn't exist

    Values are compared to the column as strings when matching the results.
    """

    subquery: Subquery
    column: Any
    column_name: str
    mapper: Mapper
    type_name: str | Callable[[Any], str] | None

    def __init_subclass__(
        cls,
        query: Select | FromClause,
        column: str = "id",
        column_name_transformer: Callable[[str], str] = to_snake_case,
        schema: type[BaseModel] | None = None,
        type_name: str | Callable[[Any], str] | None = None,
    ) -> None:
        if schema is not None and type_name is not None:
            raise ValueError("Can't use a NodeLoader with both a schema and type_name")
        if isinstance(query, FromClause):
            query = select(query)
        cls.subquery = query.subquery(TABLE_ALIAS)
        cls.column = ColumnIdentifiers(cls.subquery, column_name_transformer)[column]
        cls.column_name = cls.column.key
        cls.mapper = Mapper() if schema is None else SchemaMapper(schema)
        cls.type_name = staticmethod(type_name) if callable(type_name) else type_name
        super().__init_subclass__()

    def __init__(
        self, provider_override: SQLProvider | None = None, cache: bool = True
    ):
        self.provider_override = provider_override
        self._loader: DataLoader[Id, Any] = DataLoader(
            load_fn=self._batch_load, cache=cache, cache_key_fn=str
        )

    @property
    def provider(self) -> SQLProvider:
        return self.provider_override or inject.instance(SQLDatabase)

    def load(self, value: Id) -> Awaitable[Any]:
        return self._loader.load(value)

    def load_many(self, values: list[Id]) -> Awaitable[list[Any]]:
        return self._loader.load_many(values)

    def _add_type_name(self, record: dict[str, Any]) -> dict[str, Any]:
        if self.type_name is None:
            return record
        elif callable(self.type_name):
            record["__typename"] = self.type_name(record)
        else:
            record["__typename"] = self.type_name
        return record

    async def _batch_load(self, values: list[Id]) -> list[Any]:
        # keys may be strings (GraphQL IDs): bind as text, cast to the column type
        keys = [cast(literal(str(value)), self.column.type) for value in values]
        query = select(self.subquery).where(self.column.in_(keys))
        records = {}
        for row in await self.provider.execute(query):
            record = self.mapper.to_internal(row, query)
            if isinstance(record, dict):
                record = self._add_type_name(record)
            records[str(row[self.column_name])] = record
        return [records.get(str(value)) for value in values]
