"""Database engine helpers."""

from __future__ import annotations

import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine


DEFAULT_DATABASE_URL = "sqlite:///customer_sync.db"


def create_engine_from_env() -> Engine:
    """Create an engine using the DATABASE_URL environment variable."""
    url = os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL)
    return create_engine(url, pool_pre_ping=True, future=True)
