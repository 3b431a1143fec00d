"""Datetime helpers."""

from __future__ import annotations

import os
from datetime import date

import pendulum

DEFAULT_TZ = "Asia/Tokyo"


def timezone_name() -> str:
    return os.environ.get("TIMEZONE", DEFAULT_TZ)


def now_in_tz() -> pendulum.DateTime:
    tz = pendulum.timezone(timezone_name())
    return pendulum.now(tz)


def today_in_tz() -> date:
    return now_in_tz().date()


def iso_timestamp() -> str:
    return now_in_tz().isoformat()


def run_stamp() -> str:
    return now_in_tz().format("YYYYMMDD-HHmmss")
