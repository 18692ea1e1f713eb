import pytest
from sqlalchemy import create_engine

from moviechat.db_init import ensure_database_initialized
from moviechat.query_executor import QueryExecutor
from moviechat.schema_context import load_schema_context


@pytest.fixture(scope="session")
def schema_context():
    return load_schema_context()


# File-backed SQLite so the engine uses a real connection pool
@pytest.fixture()
def engine(tmp_path, schema_context):
    db_engine = create_engine(f"sqlite:///{tmp_path / 'movies.db'}")
    ensure_database_initialized(db_engine, schema_context)
    yield db_engine
    db_engine.dispose()


@pytest.fixture()
def executor(engine):
    return QueryExecutor(engine)
