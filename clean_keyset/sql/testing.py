from typing import Any
from unittest import mock

from sqlalchemy.dialects import postgresql
from sqlalchemy.sql import ClauseElement
from sqlalchemy.sql import Executable

from clean_keyset import Json
from clean_keyset.sql import SQLProvider

__all__ = ["FakeSQLDatabase", "assert_query_equal", "compile_query"]


DIALECT = postgresql.dialect()


class FakeSQLDatabase(SQLProvider):
    """Records the executed queries and returns canned rows.

    Set 'result.return_value' for one result, or 'result.side_effect' to a list
    of results (or exceptions) for consecutive queries.
    """

    def __init__(self):
        self.queries: list[Executable] = []
        self.result = mock.Mock(return_value=[])

    async def execute(
        self, query: Executable, _: dict[str, Any] | None = None
    ) -> list[Json]:
        self.queries.append(query)
        return self.result()


def compile_query(q: ClauseElement, literal_binds: bool = True) -> str:
    compiled = q.compile(
        compile_kwargs={"literal_binds": literal_binds},
        dialect=DIALECT,
    )
    if not literal_binds:
        actual = str(compiled) % compiled.params
    else:
        actual = str(compiled)
    return actual.replace("\n", "").replace("  ", " ")


def assert_query_equal(q: ClauseElement, expected: str, literal_binds: bool = True):
    """There are two ways of 'binding' parameters (for testing!):

    literal_binds=True: use the built-in sqlalchemy way, which fails on some datatypes (Range)
    literal_binds=False: do it yourself using %, there is no 'mogrify' so don't expect quotes.

    Besides whole queries, this also accepts expressions (e.g. a WHERE clause).
    """
    assert isinstance(q, ClauseElement)
    assert compile_query(q, literal_binds) == expected
