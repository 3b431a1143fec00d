"""Classify, normalize and deduplicate downloaded exports."""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from typing import Mapping, Sequence

from sqlalchemy.exc import SQLAlchemyError

from customer_sync.db.store import DatasetStore, Record
from customer_sync.errors import StorageAppendError, StorageReadError
from customer_sync.ingest.classify import classify
from customer_sync.ingest.csv_reader import read_csv
from customer_sync.ingest.keys import key_for
from customer_sync.ingest.models import IngestResult, Period, RecordKind, RunReport
from customer_sync.ingest.normalize import normalize_location_row, normalize_trend_row
from customer_sync.utils.blobs import BlobSink
from customer_sync.utils.dates import iso_timestamp, run_stamp

logger = logging.getLogger(__name__)

DATASET_KINDS = (RecordKind.TRENDS, RecordKind.LOCATIONS)


class IngestionPipeline:
    """Run-scoped ingestion state for one store.

    Key sets are loaded once from the store and grow as rows are accepted,
    so duplicates are dropped across CSVs within the same run as well as
    against history. Build a fresh instance per run.
    """

    def __init__(
        self,
        store: DatasetStore,
        *,
        store_id: str,
        store_name: str,
        period: Period,
        archive: BlobSink | None = None,
        existing_keys: Mapping[RecordKind, set[str]] | None = None,
    ) -> None:
        self.store = store
        self.store_id = store_id
        self.store_name = store_name
        self.period = period
        self.archive = archive
        if existing_keys is None:
            self.keys = self._load_keys()
        else:
            self.keys = {kind: set(existing_keys.get(kind, ())) for kind in DATASET_KINDS}
        self.accepted: dict[RecordKind, int] = defaultdict(int)
        self.skipped: dict[RecordKind, int] = defaultdict(int)
        self.unknown_csvs = 0

    def ingest_csv(self, payload: bytes, *, source: str = "") -> IngestResult:
        table = read_csv(payload, source=source)
        return self.ingest(table.rows, table.headers, source=source, payload=payload)

    def ingest(
        self,
        rows: Sequence[Mapping[str, str | None]],
        headers: Sequence[str],
        *,
        source: str = "",
        payload: bytes | None = None,
    ) -> IngestResult:
        """Append the rows not seen before. ``payload`` is the raw export, archived as-is when unrecognized."""
        kind = classify(headers)
        if kind is RecordKind.UNKNOWN:
            self._archive_unknown(rows, headers, source, payload)
            return IngestResult(kind=kind, source=source)

        known = self.keys[kind]
        downloaded_at = iso_timestamp()
        batch: list[Record] = []
        skipped = 0
        for raw in rows:
            record = self._normalize(kind, raw, downloaded_at)
            key = key_for(record)
            if key in known:
                skipped += 1
                continue
            known.add(key)
            batch.append(record)

        if batch:
            try:
                self.store.append_batch(kind, batch)
            except (SQLAlchemyError, OSError) as exc:
                raise StorageAppendError(kind.value, len(batch), exc) from exc
        self.accepted[kind] += len(batch)
        self.skipped[kind] += skipped
        logger.info(
            "%s export %s: %s new, %s duplicates",
            kind.value,
            source or "(unnamed)",
            len(batch),
            skipped,
        )
        return IngestResult(kind=kind, accepted=len(batch), skipped=skipped, source=source)

    def report(self, errors: Sequence[str] = (), *, days_remaining: float | None = None) -> RunReport:
        return RunReport(
            store_id=self.store_id,
            accepted={kind: self.accepted[kind] for kind in DATASET_KINDS},
            skipped={kind: self.skipped[kind] for kind in DATASET_KINDS},
            unknown_csvs=self.unknown_csvs,
            errors=list(errors),
            days_remaining=days_remaining,
        )

    def _load_keys(self) -> dict[RecordKind, set[str]]:
        keys = {}
        for kind in DATASET_KINDS:
            try:
                records = self.store.read_all(kind)
            except (SQLAlchemyError, OSError) as exc:
                raise StorageReadError(f"Failed to read existing {kind.value} records: {exc}") from exc
            keys[kind] = {key_for(record) for record in records}
        return keys

    def _normalize(self, kind: RecordKind, raw: Mapping[str, str | None], downloaded_at: str) -> Record:
        if kind is RecordKind.TRENDS:
            return normalize_trend_row(
                raw, store_id=self.store_id, store_name=self.store_name, downloaded_at=downloaded_at
            )
        return normalize_location_row(
            raw,
            store_id=self.store_id,
            store_name=self.store_name,
            period=self.period,
            downloaded_at=downloaded_at,
        )

    def _archive_unknown(
        self,
        rows: Sequence[Mapping[str, str | None]],
        headers: Sequence[str],
        source: str,
        payload: bytes | None,
    ) -> None:
        self.unknown_csvs += 1
        logger.warning("Unrecognized export %s with headers %s", source or "(unnamed)", list(headers))
        if self.archive is None:
            return
        blob = json.dumps(
            {"source": source, "headers": list(headers), "rows": [dict(row) for row in rows]},
            ensure_ascii=False,
            indent=2,
        )
        stem = f"unknown_{self.store_id}_{run_stamp()}_{self.unknown_csvs}"
        self.archive.put(f"{stem}.json", blob, "application/json")
        if payload is not None:
            self.archive.put(f"{stem}.csv", payload, "text/csv")
