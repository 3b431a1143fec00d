"""Ingestion helpers."""

from __future__ import annotations

from customer_sync.ingest.classify import classify
from customer_sync.ingest.keys import key_for
from customer_sync.ingest.models import LocationRecord, Period, RecordKind, TrendRecord

__all__ = ["LocationRecord", "Period", "RecordKind", "TrendRecord", "classify", "key_for"]
