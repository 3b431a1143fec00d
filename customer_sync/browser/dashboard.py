"""Playwright driver for the merchant dashboard customer analytics page."""

from __future__ import annotations

import enum
import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from playwright.async_api import Browser, BrowserContext, Error as PlaywrightError, Locator, Page, Playwright, async_playwright

from customer_sync.session.cookies import SessionCookie
from customer_sync.utils.blobs import BlobSink

logger = logging.getLogger(__name__)

LAUNCH_ARGS = ["--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage"]
DOWNLOAD_BUTTON = 'button:has-text("ダウンロード"), button:has-text("Download"), [aria-label*="ownload"]'

# Expected order of the export buttons on the page, top to bottom.
POSITIONAL_TARGETS = ("locations", "trends")

# Text that only appears once the customer analytics view has rendered.
CUSTOMER_DATA_MARKERS = ("注文者グループの概要", "注文者分析データ", "Customer")

SECTION_LABELS: dict[str, tuple[str, ...]] = {
    "locations": ("注文者の所在地", "Customer locations"),
    "trends": ("注文者の傾向", "Customer trends"),
}


class DownloadStatus(str, enum.Enum):
    OK = "ok"
    FAILED = "failed"
    NO_TARGET = "no_target"


@dataclass(slots=True)
class DownloadOutcome:
    label: str
    status: DownloadStatus
    payload: bytes | None = None
    error: str | None = None


class DashboardBrowser:
    def __init__(self, *, headless: bool = True, timeout_ms: int = 60_000) -> None:
        self.headless = headless
        self.timeout_ms = timeout_ms
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    async def __aenter__(self) -> "DashboardBrowser":  # pragma: no cover - requires browser
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=self.headless, args=LAUNCH_ARGS)
        self._context = await self._browser.new_context(accept_downloads=True, locale="ja-JP")
        self._context.set_default_timeout(self.timeout_ms)
        self._page = await self._context.new_page()
        return self

    async def __aexit__(self, *exc_info) -> None:  # pragma: no cover - requires browser
        if self._context:
            await self._context.close()
        if self._browser:
            await self._browser.close()
        if self._playwright:
            await self._playwright.stop()

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("DashboardBrowser must be used as an async context manager")
        return self._page

    async def open(self, url: str, cookies: Sequence[SessionCookie]) -> str:
        """Inject cookies, navigate, and return the URL the page settled on."""
        await self.page.context.add_cookies([cookie.to_playwright() for cookie in cookies])
        logger.info("Injected %s cookies; opening %s", len(cookies), url)
        await self.page.goto(url, wait_until="networkidle")
        await self.page.wait_for_timeout(random.randint(2000, 5000))
        logger.info("Landed on %s (%s)", self.page.url, await self.page.title())
        return self.page.url

    async def has_customer_data(self) -> bool:
        body = await self.page.locator("body").inner_text()
        found = any(marker in body for marker in CUSTOMER_DATA_MARKERS)
        if not found:
            logger.warning("Page %s loaded without customer analytics content", self.page.url)
        return found

    async def download_exports(self, strategy: str) -> list[DownloadOutcome]:
        if strategy == "positional":
            return await self._download_positional()
        if strategy == "label":
            return await self._download_by_label()
        return await self._download_all()

    async def capture(self, sink: BlobSink, prefix: str) -> None:
        screenshot = await self.page.screenshot(full_page=True)
        sink.put(f"{prefix}.png", screenshot, "image/png")
        sink.put(f"{prefix}.html", await self.page.content(), "text/html")

    async def _download_positional(self) -> list[DownloadOutcome]:
        buttons = self.page.locator(DOWNLOAD_BUTTON)
        count = await buttons.count()
        outcomes = []
        for index, label in enumerate(POSITIONAL_TARGETS):
            if index >= count:
                outcomes.append(DownloadOutcome(label=label, status=DownloadStatus.NO_TARGET))
                continue
            outcomes.append(await self._download(label, buttons.nth(index)))
        return outcomes

    async def _download_by_label(self) -> list[DownloadOutcome]:
        outcomes = []
        for label, headings in SECTION_LABELS.items():
            button = None
            for heading in headings:
                section = self.page.locator("section, div").filter(has_text=heading).filter(
                    has=self.page.locator(DOWNLOAD_BUTTON)
                )
                if await section.count():
                    button = section.last.locator(DOWNLOAD_BUTTON).first
                    break
            if button is None:
                outcomes.append(DownloadOutcome(label=label, status=DownloadStatus.NO_TARGET))
                continue
            outcomes.append(await self._download(label, button))
        return outcomes

    async def _download_all(self) -> list[DownloadOutcome]:
        buttons = self.page.locator(DOWNLOAD_BUTTON)
        count = await buttons.count()
        if not count:
            return [DownloadOutcome(label="export", status=DownloadStatus.NO_TARGET)]
        return [await self._download(f"export_{index + 1}", buttons.nth(index)) for index in range(count)]

    async def _download(self, label: str, button: Locator) -> DownloadOutcome:
        try:
            await button.scroll_into_view_if_needed()
            async with self.page.expect_download() as download_info:
                await button.click()
            download = await download_info.value
            failure = await download.failure()
            if failure:
                return DownloadOutcome(label=label, status=DownloadStatus.FAILED, error=failure)
            path = await download.path()
            payload = Path(path).read_bytes()
        except (PlaywrightError, OSError) as exc:
            logger.warning("Download %s failed: %s", label, exc)
            return DownloadOutcome(label=label, status=DownloadStatus.FAILED, error=str(exc))
        logger.info("Downloaded %s (%s, %s bytes)", label, download.suggested_filename, len(payload))
        return DownloadOutcome(label=label, status=DownloadStatus.OK, payload=payload)
