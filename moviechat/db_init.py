from __future__ import annotations

import logging

from sqlalchemy import MetaData, create_engine, func, select
from sqlalchemy.engine import Engine

from moviechat.config import Settings
from moviechat.schema_context import SchemaContext

logger = logging.getLogger(__name__)


def create_db_engine(settings: Settings) -> Engine:
    return create_engine(
        settings.database_url,
        pool_size=settings.db_pool_size,
        pool_pre_ping=True,
    )


def ensure_database_initialized(engine: Engine, schema_context: SchemaContext) -> dict[str, str | int]:
    """Create the target table if it is missing and seed it when empty.

    Safe to call on every start-up.
    """
    table = schema_context.build_table(MetaData())
    table.metadata.create_all(engine, checkfirst=True)

    with engine.begin() as conn:
        count = conn.execute(select(func.count()).select_from(table)).scalar_one()
        if count or not schema_context.seed_rows:
            logger.info("Database initialized successfully (%s existing rows)", count)
            return {"status": "already_initialized", "inserted_rows": 0}

        conn.execute(table.insert(), [dict(row) for row in schema_context.seed_rows])

    logger.info("Sample %s data inserted (%d rows)", schema_context.table_name, len(schema_context.seed_rows))
    return {"status": "seeded", "inserted_rows": len(schema_context.seed_rows)}
