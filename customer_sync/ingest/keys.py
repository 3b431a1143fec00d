"""Identity keys for deduplication."""

from __future__ import annotations

from customer_sync.ingest.models import LocationRecord, TrendRecord

# Store UUIDs and ISO dates never contain "_"; preset labels do, hence "|".
TREND_SEPARATOR = "_"
LOCATION_SEPARATOR = "|"


def key_for(record: TrendRecord | LocationRecord) -> str:
    if isinstance(record, TrendRecord):
        return TREND_SEPARATOR.join((record.store_id, record.date))
    if isinstance(record, LocationRecord):
        return LOCATION_SEPARATOR.join(
            (
                record.store_id,
                record.period_preset,
                record.period_start,
                record.period_end,
                record.pincode,
            )
        )
    raise TypeError(f"Unsupported record type: {type(record).__name__}")
