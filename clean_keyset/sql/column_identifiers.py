import re
from collections.abc import Callable

from sqlalchemy import FromClause
from sqlalchemy.sql.expression import ColumnElement

__all__ = ["ColumnIdentifiers", "to_snake_case"]


# lower or digit followed by upper, or an acronym followed by a word
WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def to_snake_case(name: str) -> str:
    """camelCase to snake_case; digits stay with the preceding word.

    >>> to_snake_case("createdAt"), to_snake_case("line2"), to_snake_case("HTTPCode")
    ('created_at', 'line2', 'http_code')
    """
    return WORD_BOUNDARY.sub("_", name).lower()


class ColumnIdentifiers:
    """Resolve field names to columns of a (sub)query, on attribute access.

    No field list is declared up front: every access transforms the field name
    (default: camelCase -> snake_case) and looks the column up on the selectable.

    >>> ids = ColumnIdentifiers(select(bar).subquery("t1"))
    >>> ids.createdAt  # t1.created_at
    """

    def __init__(
        self,
        selectable: FromClause,
        column_name_transformer: Callable[[str], str] = to_snake_case,
    ):
        self._selectable = selectable
        self._column_name_transformer = column_name_transformer

    def __getitem__(self, name: str) -> ColumnElement:
        column_name = self._column_name_transformer(name)
        try:
            return self._selectable.c[column_name]
        except KeyError:
            raise KeyError(
                f"'{name}' (column '{column_name}') is not a column of "
                f"'{self._selectable.name}'"
            )

    def __getattr__(self, name: str) -> ColumnElement:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self[name]
        except KeyError as e:
            raise AttributeError(e.args[0])
