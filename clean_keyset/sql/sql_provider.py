from collections.abc import AsyncIterator
from typing import Any

from sqlalchemy.sql import Executable

from clean_keyset import Json

__all__ = ["SQLProvider", "SQLDatabase"]


class SQLProvider:
    """Executes SQLAlchemy queries and returns the rows as dictionaries."""

    async def execute(
        self, query: Executable, bind_params: dict[str, Any] | None = None
    ) -> list[Json]:
        raise NotImplementedError()

    async def transaction(self) -> AsyncIterator["SQLProvider"]:
        raise NotImplementedError()
        yield

    async def testing_transaction(self) -> AsyncIterator["SQLProvider"]:
        raise NotImplementedError()
        yield


class SQLDatabase(SQLProvider):
    async def dispose(self) -> None:
        pass
