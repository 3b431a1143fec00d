"""Celery configuration for scheduled syncs."""

from __future__ import annotations

import os

from celery import Celery
from celery.schedules import crontab

from customer_sync.config import load_stores
from customer_sync.utils.dates import timezone_name

broker_url = os.environ.get("REDIS_URL", "redis://redis:6379/0")
backend_url = os.environ.get("REDIS_URL", "redis://redis:6379/0")

celery_app = Celery("customer_sync", broker=broker_url, backend=backend_url)
celery_app.conf.timezone = timezone_name()


def build_beat_schedule() -> dict[str, dict[str, object]]:
    hour = int(os.environ.get("SYNC_HOUR", "6"))
    minute = int(os.environ.get("SYNC_MINUTE", "15"))
    return {
        f"sync-{store.store_id}": {
            "task": "customer_sync.jobs.sync.run_store",
            "schedule": crontab(hour=hour, minute=minute),
            "args": (store.store_id,),
        }
        for store in load_stores()
    }


celery_app.conf.beat_schedule = build_beat_schedule()


@celery_app.task(name="customer_sync.jobs.sync.run_store")
def run_store_task(store_id: str) -> dict[str, object]:  # pragma: no cover - executed by worker
    import asyncio

    from customer_sync.config import resolve_store
    from customer_sync.jobs.sync import run_sync

    report = asyncio.run(run_sync(resolve_store(store_id)))
    return {
        "store_id": report.store_id,
        "accepted": {kind.value: count for kind, count in report.accepted.items()},
        "errors": report.errors,
    }
