"""Create the dataset tables."""

from __future__ import annotations

import logging
import pathlib
import sys

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from customer_sync.db.session import create_engine_from_env

logger = logging.getLogger(__name__)

SCHEMA_PATH = pathlib.Path(__file__).with_name("schema.sql")
DATASET_TABLES = ("customer_trends", "customer_locations")


def split_statements(sql: str) -> list[str]:
    statements = [chunk.strip() for chunk in sql.split(";")]
    return [stmt for stmt in statements if stmt]


def ensure_schema(engine: Engine) -> list[str]:
    """Apply schema.sql; returns the dataset tables that did not exist before."""
    existing = set(inspect(engine).get_table_names())
    with engine.begin() as conn:
        for stmt in split_statements(SCHEMA_PATH.read_text(encoding="utf-8")):
            conn.execute(text(stmt))
    created = [name for name in DATASET_TABLES if name not in existing]
    if created:
        logger.info("Created tables: %s", ", ".join(created))
    return created


def main() -> None:
    engine = create_engine_from_env()
    try:
        ensure_schema(engine)
    except SQLAlchemyError as exc:
        print(f"Migration failed: {exc}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
