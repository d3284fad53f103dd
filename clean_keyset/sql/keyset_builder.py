from collections.abc import Sequence
from typing import Any

from sqlalchemy import and_
from sqlalchemy import asc
from sqlalchemy import desc
from sqlalchemy import or_
from sqlalchemy.sql.expression import ColumnElement

from clean_keyset import InvalidCursorError
from clean_keyset import OrderDirection

__all__ = ["KeysetBuilder"]


class KeysetBuilder:
    """Builds ORDER BY and seek (keyset) conditions for a list of sort expressions.

    With reverse=True every direction is flipped, so that the rows are read from
    the tail. The caller is responsible for flipping the resulting page back.
    """

    def __init__(
        self,
        expressions: Sequence[tuple[ColumnElement, OrderDirection | str]],
        reverse: bool = False,
    ):
        self.expressions = [
            (expression, OrderDirection(direction))
            for (expression, direction) in expressions
        ]
        self.reverse = reverse

    def __len__(self) -> int:
        return len(self.expressions)

    def _is_ascending(self, direction: OrderDirection) -> bool:
        ascending = OrderDirection.DESC if self.reverse else OrderDirection.ASC
        return direction is ascending

    def sort_keys(self) -> list[ColumnElement]:
        return [expression for (expression, _) in self.expressions]

    def order_by(self) -> list[ColumnElement]:
        return [
            asc(expression) if self._is_ascending(direction) else desc(expression)
            for (expression, direction) in self.expressions
        ]

    def seek(self, values: Sequence[Any]) -> ColumnElement | None:
        """Return the condition for rows strictly after 'values' in the sort order.

        For sort expressions (a, b, c) this is:

            a > :a OR (a = :a AND b > :b) OR (a = :a AND b = :b AND c > :c)

        with < instead of > for descending expressions.
        """
        if len(values) != len(self.expressions):
            raise InvalidCursorError(expected=len(self.expressions), actual=len(values))
        if not self.expressions:
            return None
        clauses = []
        for i, (expression, direction) in enumerate(self.expressions):
            terms = [
                previous == value
                for ((previous, _), value) in zip(self.expressions[:i], values)
            ]
            if self._is_ascending(direction):
                terms.append(expression > values[i])
            else:
                terms.append(expression < values[i])
            clauses.append(and_(*terms))
        return or_(*clauses)
