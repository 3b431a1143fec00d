"""Run configuration from the environment and stores.yml."""

from __future__ import annotations

import os
import pathlib
from dataclasses import dataclass

import yaml

STORES_PATH = pathlib.Path(__file__).with_name("stores.yml")

DEFAULT_BASE_URL = "https://merchants.ubereats.com"
DEFAULT_PERIOD_PRESET = "last_12_weeks"
DOWNLOAD_STRATEGIES = ("positional", "label", "content")


@dataclass(slots=True)
class StoreConfig:
    store_id: str
    store_name: str
    cookie_store_id: str
    period_preset: str = DEFAULT_PERIOD_PRESET


@dataclass(slots=True)
class RunSettings:
    headless: bool = True
    debug_mode: bool = False
    download_strategy: str = "content"
    debug_dir: pathlib.Path = pathlib.Path("artifacts/debug")
    cookie_dir: pathlib.Path = pathlib.Path(".cookies")
    kv_store_token: str | None = None
    base_url: str = DEFAULT_BASE_URL

    @classmethod
    def from_env(cls) -> "RunSettings":
        strategy = os.environ.get("DOWNLOAD_STRATEGY", "content").lower()
        if strategy not in DOWNLOAD_STRATEGIES:
            raise ValueError(f"DOWNLOAD_STRATEGY must be one of {', '.join(DOWNLOAD_STRATEGIES)}")
        return cls(
            headless=_env_flag("HEADLESS", True),
            debug_mode=_env_flag("DEBUG_MODE", False),
            download_strategy=strategy,
            debug_dir=pathlib.Path(os.environ.get("DEBUG_DIR", "artifacts/debug")),
            cookie_dir=pathlib.Path(os.environ.get("COOKIE_DIR", ".cookies")),
            kv_store_token=os.environ.get("APIFY_TOKEN") or None,
            base_url=os.environ.get("DASHBOARD_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
        )

    def target_url(self, store: StoreConfig) -> str:
        return (
            f"{self.base_url}/manager/home/{store.store_id}/analytics/customers/"
            f"?dateRangePreset={store.period_preset}"
        )


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_stores(path: pathlib.Path = STORES_PATH) -> list[StoreConfig]:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or []
    return [StoreConfig(**item) for item in data]


def store_from_env() -> StoreConfig | None:
    store_id = os.environ.get("STORE_ID")
    cookie_store_id = os.environ.get("COOKIE_STORE_ID")
    if not store_id or not cookie_store_id:
        return None
    return StoreConfig(
        store_id=store_id,
        store_name=os.environ.get("STORE_NAME", store_id),
        cookie_store_id=cookie_store_id,
        period_preset=os.environ.get("PERIOD_PRESET", DEFAULT_PERIOD_PRESET),
    )


def resolve_store(store_id: str | None = None) -> StoreConfig:
    """Pick the store for a run: environment first, then stores.yml."""
    from_env = store_from_env()
    if from_env and (store_id is None or from_env.store_id == store_id):
        return from_env
    stores = load_stores()
    for store in stores:
        if store_id is None or store.store_id == store_id:
            return store
    raise LookupError(f"Store {store_id or '(any)'} is not configured")
