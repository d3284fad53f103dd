# (c) Nelen & Schuurmans

import os

import pytest

from clean_keyset.sql import AsyncpgSQLDatabase
from clean_keyset.sql import SQLAlchemyAsyncSQLDatabase


@pytest.fixture(scope="session")
def postgres_url():
    return os.environ.get("POSTGRES_URL", "postgres:postgres@localhost:5432")


@pytest.fixture(scope="session")
def postgres_db_url(postgres_url) -> str:
    from sqlalchemy import create_engine
    from sqlalchemy import text

    from sql_model import bar
    from sql_model import insert_bars

    dbname = "cleankeyset_test"
    root_engine = create_engine(
        f"postgresql+psycopg2://{postgres_url}", isolation_level="AUTOCOMMIT"
    )
    with root_engine.connect() as connection:
        connection.execute(text(f"DROP DATABASE IF EXISTS {dbname}"))
        connection.execute(text(f"CREATE DATABASE {dbname}"))
    root_engine.dispose()

    engine = create_engine(
        f"postgresql+psycopg2://{postgres_url}/{dbname}", isolation_level="AUTOCOMMIT"
    )
    with engine.connect() as connection:
        bar.metadata.drop_all(engine)
        bar.metadata.create_all(engine)
        connection.execute(insert_bars)
    engine.dispose()
    return f"{postgres_url}/{dbname}"


@pytest.fixture(params=[SQLAlchemyAsyncSQLDatabase, AsyncpgSQLDatabase])
async def database(request, postgres_db_url):
    db = request.param(postgres_db_url)
    yield db
    await db.dispose()
