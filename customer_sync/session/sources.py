"""Cookie sources.

Cookies are captured out-of-band (for example with a browser extension) and
stored as a JSON list under a store id. Both sources return the raw list
exactly as stored, or ``None`` when nothing is stored.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

import httpx

from customer_sync.utils.retry import retry_async

logger = logging.getLogger(__name__)

KV_STORE_ENDPOINT = "https://api.apify.com/v2/key-value-stores/{store_id}/records/{key}"
COOKIES_KEY = "cookies"


class CookieSource(Protocol):
    async def load(self, cookie_store_id: str) -> list[dict[str, Any]] | None: ...

    async def close(self) -> None: ...


def _extract_cookies(data: Any) -> list[dict[str, Any]] | None:
    if isinstance(data, dict):
        data = data.get(COOKIES_KEY)
    if not isinstance(data, list):
        return None
    return data


class FileCookieSource:
    def __init__(self, directory: Path) -> None:
        self.directory = directory

    async def close(self) -> None:
        return None

    async def load(self, cookie_store_id: str) -> list[dict[str, Any]] | None:
        path = self.directory / f"{cookie_store_id}.json"
        if not path.exists():
            logger.info("No cookie file at %s", path)
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Invalid cookie file %s", path)
            return None
        return _extract_cookies(data)


class KeyValueStoreCookieSource:
    def __init__(self, token: str | None = None, *, session: httpx.AsyncClient | None = None) -> None:
        self.token = token
        self.session = session or httpx.AsyncClient(timeout=30.0)

    async def close(self) -> None:
        await self.session.aclose()

    async def load(self, cookie_store_id: str) -> list[dict[str, Any]] | None:
        url = KV_STORE_ENDPOINT.format(store_id=cookie_store_id, key=COOKIES_KEY)
        params = {"token": self.token} if self.token else None
        response = await retry_async(self.session.get)(url, params=params)
        if response.status_code == 404:
            logger.info("Key-value store %s has no '%s' record", cookie_store_id, COOKIES_KEY)
            return None
        response.raise_for_status()
        return _extract_cookies(response.json())
