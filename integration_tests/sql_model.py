from sqlalchemy import Column
from sqlalchemy import insert
from sqlalchemy import Integer
from sqlalchemy import MetaData
from sqlalchemy import Table
from sqlalchemy import Text
from sqlalchemy import text

bar = Table(
    "bar",
    MetaData(),
    Column("id", Integer, primary_key=True),
    Column("uid", Text, nullable=False),
    Column("value", Text, nullable=False),
)

BARS = [
    {"id": 1, "uid": "z", "value": "aaa"},
    {"id": 2, "uid": "y", "value": "aaa"},
    {"id": 3, "uid": "x", "value": "bbb"},
    {"id": 4, "uid": "w", "value": "bbb"},
    {"id": 5, "uid": "v", "value": "ccc"},
    {"id": 6, "uid": "u", "value": "ccc"},
    {"id": 7, "uid": "t", "value": "ddd"},
    {"id": 8, "uid": "s", "value": "ddd"},
    {"id": 9, "uid": "r", "value": "eee"},
]

insert_bars = insert(bar).values(BARS)


### For SQLDatabase integration tests
count_query = text("SELECT COUNT(*) FROM bar")
insert_query = text(
    "INSERT INTO bar (id, uid, value) VALUES (10, 'q', 'fff') RETURNING id"
)
