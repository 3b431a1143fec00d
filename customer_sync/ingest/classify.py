"""CSV shape classification."""

from __future__ import annotations

from typing import Iterable

from customer_sync.ingest.models import RecordKind

TREND_MARKERS = frozenset({"date", "日付"})
LOCATION_MARKERS = frozenset({"郵便番号", "pincode", "postal code"})


def classify(headers: Iterable[str]) -> RecordKind:
    normalized = {header.strip().lower() for header in headers if header}
    # Trends wins when both marker sets are present.
    if normalized & TREND_MARKERS:
        return RecordKind.TRENDS
    if normalized & LOCATION_MARKERS:
        return RecordKind.LOCATIONS
    return RecordKind.UNKNOWN
