from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError

from ..domain import Json
from ..domain import SchemaValidationError

__all__ = ["Mapper", "SchemaMapper"]


class Mapper:
    def to_internal(self, row: Json, query: Any = None) -> Any:
        return row


class SchemaMapper(Mapper):
    """Validates rows against a pydantic model.

    Rows are never coerced silently: an invalid row raises SchemaValidationError.
    """

    def __init__(self, schema: type[BaseModel]):
        self.schema = schema

    def to_internal(self, row: Json, query: Any = None) -> BaseModel:
        try:
            return self.schema.model_validate(row)
        except ValidationError as e:
            raise SchemaValidationError(query, row, e.errors())
