import time

import pytest
from sqlalchemy import create_engine

from customer_sync.db.migrate import ensure_schema
from customer_sync.ingest.models import RecordKind


class MemoryStore:
    def __init__(self, *, fail: bool = False):
        self.records = {RecordKind.TRENDS: [], RecordKind.LOCATIONS: []}
        self.appends = []
        self.fail = fail

    def read_all(self, kind):
        return list(self.records[kind])

    def append_batch(self, kind, records):
        if self.fail:
            raise OSError("disk full")
        self.appends.append((kind, list(records)))
        self.records[kind].extend(records)


@pytest.fixture()
def engine():
    engine = create_engine("sqlite:///:memory:", future=True)
    ensure_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def memory_store():
    return MemoryStore()


@pytest.fixture()
def failing_store():
    return MemoryStore(fail=True)


@pytest.fixture()
def raw_cookies():
    now = time.time()
    return [
        {
            "name": "sid",
            "value": "abc123",
            "domain": ".ubereats.com",
            "path": "/",
            "secure": True,
            "httpOnly": True,
            "sameSite": "no_restriction",
            "expirationDate": now + 30 * 86400,
        },
        {
            "name": "jwt-session",
            "value": "xyz",
            "domain": "merchants.ubereats.com",
            "sameSite": "lax",
        },
        {"name": "orphan", "value": "1"},
    ]
