"""Map raw export rows onto canonical records.

Exports arrive with either Japanese or English headers depending on the
dashboard locale. Each logical field lists its candidate columns in priority
order: English canonical name, Japanese name, lowercase alias.
"""

from __future__ import annotations

import re
from typing import Mapping

from customer_sync.ingest.models import LocationRecord, Period, TrendRecord
from customer_sync.utils.dates import iso_timestamp

TREND_COLUMNS: dict[str, tuple[str, ...]] = {
    "date": ("Date", "日付", "date"),
    "new_customers": ("New", "新着", "new"),
    "frequent_customers": ("Frequent", "高頻度", "frequent"),
    "occasional_customers": ("Occasional", "低頻度", "occasional"),
}

LOCATION_COLUMNS: dict[str, tuple[str, ...]] = {
    "pincode": ("Postal Code", "郵便番号", "pincode", "Pincode", "postal code"),
    "new_customers": ("New", "新着", "new"),
    "occasional_customers": ("Occasional", "低頻度", "occasional"),
    "frequent_customers": ("Frequent", "高頻度", "frequent"),
    "total": ("All", "すべて", "all", "Total", "total"),
}

DATE_RE = re.compile(r"^\s*(\d{4})\s*[-/.年]\s*(\d{1,2})\s*[-/.月]\s*(\d{1,2})\s*日?\s*$")


def lookup(raw: Mapping[str, str | None], candidates: tuple[str, ...]) -> str | None:
    for column in candidates:
        if column in raw:
            return raw[column]
    return None


def parse_count(value: str | None) -> int:
    if value is None:
        return 0
    cleaned = str(value).strip().replace(",", "")
    if not (cleaned.isascii() and cleaned.isdigit()):
        return 0
    return int(cleaned)


def parse_date(value: str | None) -> str:
    if value is None:
        return ""
    match = DATE_RE.match(str(value))
    if not match:
        return str(value).strip()
    year, month, day = (int(part) for part in match.groups())
    return f"{year:04d}-{month:02d}-{day:02d}"


def normalize_trend_row(
    raw: Mapping[str, str | None],
    *,
    store_id: str,
    store_name: str,
    downloaded_at: str | None = None,
) -> TrendRecord:
    new = parse_count(lookup(raw, TREND_COLUMNS["new_customers"]))
    frequent = parse_count(lookup(raw, TREND_COLUMNS["frequent_customers"]))
    occasional = parse_count(lookup(raw, TREND_COLUMNS["occasional_customers"]))
    return TrendRecord(
        store_id=store_id,
        store_name=store_name,
        date=parse_date(lookup(raw, TREND_COLUMNS["date"])),
        new_customers=new,
        frequent_customers=frequent,
        occasional_customers=occasional,
        total=new + frequent + occasional,
        downloaded_at=downloaded_at or iso_timestamp(),
    )


def normalize_location_row(
    raw: Mapping[str, str | None],
    *,
    store_id: str,
    store_name: str,
    period: Period,
    downloaded_at: str | None = None,
) -> LocationRecord:
    pincode = lookup(raw, LOCATION_COLUMNS["pincode"])
    return LocationRecord(
        store_id=store_id,
        store_name=store_name,
        period_preset=period.preset,
        period_start=period.start,
        period_end=period.end,
        pincode=(pincode or "").strip(),
        new_customers=parse_count(lookup(raw, LOCATION_COLUMNS["new_customers"])),
        occasional_customers=parse_count(lookup(raw, LOCATION_COLUMNS["occasional_customers"])),
        frequent_customers=parse_count(lookup(raw, LOCATION_COLUMNS["frequent_customers"])),
        # Upstream total is trusted as-is for locations.
        total=parse_count(lookup(raw, LOCATION_COLUMNS["total"])),
        downloaded_at=downloaded_at or iso_timestamp(),
    )
