import pytest
from sqlalchemy import Column
from sqlalchemy import Integer
from sqlalchemy import MetaData
from sqlalchemy import select
from sqlalchemy import Table
from sqlalchemy import Text

from clean_keyset.sql import ColumnIdentifiers
from clean_keyset.sql import to_snake_case

bar = Table(
    "bar",
    MetaData(),
    Column("id", Integer, primary_key=True),
    Column("uid", Text, nullable=False),
    Column("created_by", Text, nullable=True),
    Column("line2", Text, nullable=True),
)


@pytest.fixture
def subquery():
    return select(bar).subquery("t1")


@pytest.fixture
def columns(subquery) -> ColumnIdentifiers:
    return ColumnIdentifiers(subquery)


def test_attribute_access(columns, subquery):
    assert columns.uid is subquery.c.uid


def test_item_access(columns, subquery):
    assert columns["id"] is subquery.c.id


def test_camel_case_is_transformed(columns, subquery):
    assert columns.createdBy is subquery.c.created_by


def test_custom_transformer(subquery):
    columns = ColumnIdentifiers(subquery, column_name_transformer=str.lower)

    assert columns.UID is subquery.c.uid


def test_unknown_attribute(columns):
    with pytest.raises(AttributeError, match="'nonexisting'"):
        columns.nonexisting


def test_unknown_item(columns):
    with pytest.raises(KeyError):
        columns["nonexisting"]


def test_private_attributes_are_not_resolved(columns):
    with pytest.raises(AttributeError):
        columns._uid


def test_digits_are_kept(columns, subquery):
    assert columns.line2 is subquery.c.line2


@pytest.mark.parametrize(
    "name,expected",
    [
        ("id", "id"),
        ("createdBy", "created_by"),
        ("created_by", "created_by"),
        ("line2", "line2"),
        ("s1", "s1"),
        ("address2Line", "address2_line"),
        ("HTTPCode", "http_code"),
        ("userID", "user_id"),
    ],
)
def test_to_snake_case(name, expected):
    assert to_snake_case(name) == expected
