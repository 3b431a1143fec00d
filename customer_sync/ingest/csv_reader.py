"""Decode downloaded export bytes."""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass

from customer_sync.errors import DownloadFailureError


@dataclass(slots=True)
class CsvTable:
    headers: list[str]
    rows: list[dict[str, str | None]]


def read_csv(payload: bytes, *, source: str = "") -> CsvTable:
    """Parse UTF-8 (optionally BOM-prefixed) comma-separated bytes."""
    try:
        text = payload.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise DownloadFailureError(f"{source or 'export'} is not valid UTF-8: {exc}") from exc
    reader = csv.DictReader(io.StringIO(text, newline=""))
    try:
        rows = [dict(row) for row in reader]
    except csv.Error as exc:
        raise DownloadFailureError(f"{source or 'export'} is not a readable CSV: {exc}") from exc
    headers = [name.strip() for name in (reader.fieldnames or [])]
    if headers != list(reader.fieldnames or []):
        rows = [{(k.strip() if isinstance(k, str) else k): v for k, v in row.items()} for row in rows]
    return CsvTable(headers=headers, rows=rows)
