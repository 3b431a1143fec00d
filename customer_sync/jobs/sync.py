"""Sync job orchestration."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

from customer_sync.browser.dashboard import DashboardBrowser, DownloadStatus
from customer_sync.config import RunSettings, StoreConfig, resolve_store
from customer_sync.db.migrate import ensure_schema
from customer_sync.db.session import create_engine_from_env
from customer_sync.db.store import SqlDatasetStore
from customer_sync.errors import (
    DownloadFailureError,
    SessionError,
    SessionRejectedError,
    StorageAppendError,
    StorageError,
    StorageReadError,
)
from customer_sync.ingest.models import Period, RunReport
from customer_sync.ingest.pipeline import IngestionPipeline
from customer_sync.session.cookies import check_landing_url, parse_cookies, sanitize_cookies, validate
from customer_sync.session.sources import CookieSource, FileCookieSource, KeyValueStoreCookieSource
from customer_sync.utils.blobs import BlobSink
from customer_sync.utils.dates import run_stamp, today_in_tz

logger = logging.getLogger(__name__)


def build_cookie_source(settings: RunSettings) -> CookieSource:
    if settings.kv_store_token:
        return KeyValueStoreCookieSource(settings.kv_store_token)
    return FileCookieSource(settings.cookie_dir)


async def run_sync(store: StoreConfig, settings: RunSettings | None = None) -> RunReport:
    settings = settings or RunSettings.from_env()
    engine = create_engine_from_env()

    source = build_cookie_source(settings)
    try:
        raw_cookies = await source.load(store.cookie_store_id)
    finally:
        await source.close()
    cookies = parse_cookies(raw_cookies)
    status = validate(cookies)
    if status.renew_soon:
        logger.warning("Session cookie expires in %s days; capture it again soon", int(status.days_remaining))
    else:
        logger.info("Session cookie valid (%s days remaining)", status.days_remaining)
    injectable = sanitize_cookies(cookies)

    # Storage must be usable before the dashboard is touched.
    try:
        ensure_schema(engine)
    except SQLAlchemyError as exc:
        raise StorageReadError(f"Failed to prepare dataset tables: {exc}") from exc
    sink = BlobSink(settings.debug_dir / store.store_id)
    pipeline = IngestionPipeline(
        SqlDatasetStore(engine),
        store_id=store.store_id,
        store_name=store.store_name,
        period=Period.from_preset(store.period_preset, today_in_tz()),
        archive=sink,
    )

    stamp = run_stamp()
    errors: list[str] = []
    async with DashboardBrowser(headless=settings.headless) as browser:
        landing_url = await browser.open(settings.target_url(store), injectable)
        try:
            check_landing_url(landing_url)
        except SessionRejectedError:
            if settings.debug_mode:
                await browser.capture(sink, f"login_failed_{stamp}")
            raise
        if not await browser.has_customer_data():
            errors.append(f"{landing_url}: customer analytics content not found")
        if settings.debug_mode:
            await browser.capture(sink, f"page_{stamp}")
        outcomes = await browser.download_exports(settings.download_strategy)

    for outcome in outcomes:
        if outcome.status is DownloadStatus.NO_TARGET:
            logger.warning("No download button for %s", outcome.label)
            errors.append(f"{outcome.label}: no download button found")
            continue
        if outcome.status is DownloadStatus.FAILED or outcome.payload is None:
            logger.warning("Download of %s failed: %s", outcome.label, outcome.error)
            errors.append(f"{outcome.label}: download failed ({outcome.error or 'no data'})")
            continue
        try:
            pipeline.ingest_csv(outcome.payload, source=outcome.label)
        except DownloadFailureError as exc:
            logger.warning("Skipping %s: %s", outcome.label, exc)
            errors.append(f"{outcome.label}: {exc}")

    report = pipeline.report(errors, days_remaining=status.days_remaining)
    for line in report.summary_lines():
        logger.info(line)
    return report


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Sync customer analytics exports for one store")
    parser.add_argument("store_id", nargs="?", help="store id from STORE_ID or stores.yml")
    args = parser.parse_args(argv)

    load_dotenv()
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    store = resolve_store(args.store_id)
    try:
        asyncio.run(run_sync(store))
    except SessionError as exc:
        logger.error("Session check failed: %s", exc)
        sys.exit(1)
    except StorageAppendError as exc:
        logger.error("Storage append failed (%s rows pending): %s", exc.pending, exc)
        sys.exit(2)
    except StorageError as exc:
        logger.error("Storage unavailable: %s", exc)
        sys.exit(2)


if __name__ == "__main__":
    main()
