"""Append-only dataset storage."""

from __future__ import annotations

import dataclasses
import logging
from typing import Protocol, Sequence

from sqlalchemy.engine import Engine
from sqlalchemy.sql import text

from customer_sync.ingest.models import LocationRecord, RecordKind, TrendRecord

logger = logging.getLogger(__name__)

Record = TrendRecord | LocationRecord

TABLES: dict[RecordKind, tuple[str, type]] = {
    RecordKind.TRENDS: ("customer_trends", TrendRecord),
    RecordKind.LOCATIONS: ("customer_locations", LocationRecord),
}


class DatasetStore(Protocol):
    def read_all(self, kind: RecordKind) -> list[Record]: ...

    def append_batch(self, kind: RecordKind, records: Sequence[Record]) -> None: ...


class SqlDatasetStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def read_all(self, kind: RecordKind) -> list[Record]:
        table, model = TABLES[kind]
        columns = [f.name for f in dataclasses.fields(model)]
        query = text(f"SELECT {', '.join(columns)} FROM {table}")
        with self.engine.connect() as conn:
            result = conn.execute(query)
            return [model(**row) for row in result.mappings()]

    def append_batch(self, kind: RecordKind, records: Sequence[Record]) -> None:
        if not records:
            return
        table, model = TABLES[kind]
        columns = [f.name for f in dataclasses.fields(model)]
        stmt = text(
            f"INSERT INTO {table} ({', '.join(columns)}) "
            f"VALUES ({', '.join(':' + name for name in columns)})"
        )
        with self.engine.begin() as conn:
            conn.execute(stmt, [dataclasses.asdict(record) for record in records])
        logger.info("Appended %s rows to %s", len(records), table)
