import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import asyncpg
from async_lru import alru_cache
from sqlalchemy.dialects.postgresql.asyncpg import dialect as asyncpg_dialect
from sqlalchemy.sql import Executable

from clean_keyset import Json

from .sql_provider import SQLDatabase
from .sql_provider import SQLProvider

__all__ = ["AsyncpgSQLDatabase"]


DIALECT = asyncpg_dialect()


def compile(
    query: Executable, bind_params: dict[str, Any] | None = None
) -> tuple[Any, ...]:
    # Rendering SQLAlchemy expressions to SQL, see:
    # - https://docs.sqlalchemy.org/en/20/faq/sqlexpressions.html
    # Note that this circumvents the SQLAlchemy caching system; the UNION ALL
    # statements built per batch are different every time anyway.
    compiled = query.compile(
        dialect=DIALECT, compile_kwargs={"render_postcompile": True}
    )
    params = (
        compiled.params if bind_params is None else {**compiled.params, **bind_params}
    )
    # add params in positional order
    return (str(compiled),) + tuple(params[k] for k in compiled.positiontup)


async def init_db_types(conn: asyncpg.Connection):
    # the packed sort keys (json_build_array) must arrive as lists
    await conn.set_type_codec(
        "json", encoder=json.dumps, decoder=json.loads, schema="pg_catalog"
    )
    await conn.set_type_codec(
        "jsonb", encoder=json.dumps, decoder=json.loads, schema="pg_catalog"
    )


class AsyncpgSQLDatabase(SQLDatabase):
    def __init__(
        self, url: str, *, isolation_level: str = "repeatable_read", pool_size: int = 1
    ):
        self.url = url
        self.pool_size = pool_size
        self.isolation_level = isolation_level

    @alru_cache
    async def get_pool(self):
        # Note: disable JIT because it makes the initial queries very slow
        # see https://github.com/MagicStack/asyncpg/issues/530
        return await asyncpg.create_pool(
            f"postgresql://{self.url}",
            server_settings={"jit": "off"},
            min_size=1,
            max_size=self.pool_size,
            init=init_db_types,
        )

    async def dispose(self) -> None:
        pool = await self.get_pool()
        await pool.close()

    async def execute(
        self, query: Executable, bind_params: dict[str, Any] | None = None
    ) -> list[Json]:
        # compile before acquiring the connection
        args = compile(query, bind_params)
        pool = await self.get_pool()
        result = await pool.fetch(*args)
        return list(map(dict, result))

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[SQLProvider]:  # type: ignore
        pool = await self.get_pool()
        connection: asyncpg.Connection
        async with pool.acquire() as connection:
            async with connection.transaction(isolation=self.isolation_level):
                yield AsyncpgSQLTransaction(connection)

    @asynccontextmanager
    async def testing_transaction(self) -> AsyncIterator[SQLProvider]:  # type: ignore
        pool = await self.get_pool()
        connection: asyncpg.Connection
        async with pool.acquire() as connection:
            transaction = connection.transaction()
            await transaction.start()
            try:
                yield AsyncpgSQLTransaction(connection)
            finally:
                await transaction.rollback()


class AsyncpgSQLTransaction(SQLProvider):
    def __init__(self, connection: asyncpg.Connection):
        self.connection = connection

    async def execute(
        self, query: Executable, bind_params: dict[str, Any] | None = None
    ) -> list[Json]:
        result = await self.connection.fetch(*compile(query, bind_params))
        return list(map(dict, result))

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[SQLProvider]:  # type: ignore
        async with self.connection.transaction():
            yield self
