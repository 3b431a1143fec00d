"""Ingestion data models."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, timedelta


class RecordKind(str, enum.Enum):
    TRENDS = "trends"
    LOCATIONS = "locations"
    UNKNOWN = "unknown"


PRESET_DAYS = {
    "last_7_days": 7,
    "last_30_days": 30,
    "last_4_weeks": 28,
    "last_12_weeks": 84,
}


@dataclass(slots=True, frozen=True)
class Period:
    preset: str
    start: str = ""
    end: str = ""

    @classmethod
    def from_preset(cls, preset: str, today: date) -> "Period":
        days = PRESET_DAYS.get(preset)
        if days is None:
            return cls(preset=preset)
        end = today - timedelta(days=1)
        start = end - timedelta(days=days - 1)
        return cls(preset=preset, start=start.isoformat(), end=end.isoformat())


@dataclass(slots=True)
class TrendRecord:
    store_id: str
    store_name: str
    date: str
    new_customers: int
    frequent_customers: int
    occasional_customers: int
    total: int
    downloaded_at: str


@dataclass(slots=True)
class LocationRecord:
    store_id: str
    store_name: str
    period_preset: str
    period_start: str
    period_end: str
    pincode: str
    new_customers: int
    occasional_customers: int
    frequent_customers: int
    total: int
    downloaded_at: str


@dataclass(slots=True)
class IngestResult:
    kind: RecordKind
    accepted: int = 0
    skipped: int = 0
    source: str = ""


@dataclass(slots=True)
class RunReport:
    store_id: str
    accepted: dict[RecordKind, int] = field(default_factory=dict)
    skipped: dict[RecordKind, int] = field(default_factory=dict)
    unknown_csvs: int = 0
    errors: list[str] = field(default_factory=list)
    days_remaining: float | None = None

    def summary_lines(self) -> list[str]:
        lines = [f"Store {self.store_id}"]
        for kind in (RecordKind.TRENDS, RecordKind.LOCATIONS):
            lines.append(
                f"  {kind.value}: {self.accepted.get(kind, 0)} accepted, "
                f"{self.skipped.get(kind, 0)} skipped"
            )
        if self.unknown_csvs:
            lines.append(f"  unknown CSVs archived: {self.unknown_csvs}")
        if self.days_remaining is not None:
            lines.append(f"  session days remaining: {_format_days(self.days_remaining)}")
        for error in self.errors:
            lines.append(f"  error: {error}")
        return lines


def _format_days(days: float) -> str:
    if days == float("inf"):
        return "no expiry"
    return str(int(days))
