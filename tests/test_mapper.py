import pytest
from pydantic import BaseModel

from clean_keyset import Mapper
from clean_keyset import SchemaMapper
from clean_keyset import SchemaValidationError


class Book(BaseModel):
    id: int
    title: str


def test_mapper_passes_row():
    row = {"id": 1, "title": "Foo"}

    assert Mapper().to_internal(row) is row


def test_schema_mapper():
    actual = SchemaMapper(Book).to_internal({"id": "1", "title": "Foo"})

    assert actual == Book(id=1, title="Foo")


def test_schema_mapper_invalid():
    with pytest.raises(SchemaValidationError) as e:
        SchemaMapper(Book).to_internal({"id": "one", "title": "Foo"}, query="q")

    assert e.value.query == "q"
    assert e.value.row == {"id": "one", "title": "Foo"}
    assert e.value.issues[0]["loc"] == ("id",)
