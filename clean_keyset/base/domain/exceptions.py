# (c) Nelen & Schuurmans

import json
from typing import Any

from pydantic_core import ErrorDetails

__all__ = [
    "MalformedCursorError",
    "InvalidCursorError",
    "SchemaValidationError",
]


class MalformedCursorError(ValueError):
    def __init__(self, cursor: str):
        super().__init__(f"malformed cursor: {cursor!r}")
        self.cursor = cursor


class InvalidCursorError(ValueError):
    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"cursor has {actual} value(s), but the ordering has {expected} expression(s)"
        )
        self.expected = expected
        self.actual = actual


def sanitize_row(row: Any) -> Any:
    # round trip through json so that the row can be logged / serialized
    return json.loads(json.dumps(row, default=str))


class SchemaValidationError(Exception):
    """A row returned by the database does not match the declared schema."""

    def __init__(self, query: Any, row: Any, issues: list[ErrorDetails]):
        self.query = query
        self.row = sanitize_row(row)
        self.issues = issues
        super().__init__(f"row does not match schema: {self._describe()}")

    def _describe(self) -> str:
        if not self.issues:
            return "unknown error"
        details = self.issues[0]
        loc = ",".join([str(x) for x in details["loc"]])
        return f"'{loc}' {details['msg']}" if loc else details["msg"]
