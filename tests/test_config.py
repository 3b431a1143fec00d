from pathlib import Path

import pytest

from customer_sync import config
from customer_sync.config import RunSettings, StoreConfig, load_stores, resolve_store, store_from_env


def test_load_stores(tmp_path):
    path = tmp_path / "stores.yml"
    path.write_text("- store_id: S1\n  store_name: Main\n  cookie_store_id: C1\n", encoding="utf-8")
    assert load_stores(path) == [StoreConfig(store_id="S1", store_name="Main", cookie_store_id="C1")]


def test_bundled_stores_file_parses():
    stores = load_stores()
    assert stores
    assert all(store.cookie_store_id for store in stores)


def test_store_from_env(monkeypatch):
    monkeypatch.delenv("STORE_ID", raising=False)
    monkeypatch.delenv("COOKIE_STORE_ID", raising=False)
    monkeypatch.delenv("STORE_NAME", raising=False)
    assert store_from_env() is None
    monkeypatch.setenv("STORE_ID", "S9")
    monkeypatch.setenv("COOKIE_STORE_ID", "C9")
    monkeypatch.setenv("PERIOD_PRESET", "last_30_days")
    store = store_from_env()
    assert store == StoreConfig(store_id="S9", store_name="S9", cookie_store_id="C9", period_preset="last_30_days")
    assert resolve_store() == store


def test_resolve_store_falls_back_to_yaml(monkeypatch, tmp_path):
    monkeypatch.delenv("STORE_ID", raising=False)
    path = tmp_path / "stores.yml"
    path.write_text("- store_id: S1\n  store_name: Main\n  cookie_store_id: C1\n", encoding="utf-8")
    monkeypatch.setattr(config, "load_stores", lambda: load_stores(path))
    assert resolve_store("S1").store_name == "Main"
    with pytest.raises(LookupError):
        resolve_store("missing")


def test_run_settings_from_env(monkeypatch):
    monkeypatch.setenv("HEADLESS", "false")
    monkeypatch.setenv("DEBUG_MODE", "1")
    monkeypatch.setenv("DOWNLOAD_STRATEGY", "Label")
    monkeypatch.setenv("COOKIE_DIR", "/tmp/cookies")
    monkeypatch.setenv("DASHBOARD_BASE_URL", "https://example.test/")
    monkeypatch.delenv("APIFY_TOKEN", raising=False)
    settings = RunSettings.from_env()
    assert settings.headless is False
    assert settings.debug_mode is True
    assert settings.download_strategy == "label"
    assert settings.cookie_dir == Path("/tmp/cookies")
    assert settings.kv_store_token is None
    store = StoreConfig(store_id="S1", store_name="Main", cookie_store_id="C1")
    assert settings.target_url(store) == (
        "https://example.test/manager/home/S1/analytics/customers/?dateRangePreset=last_12_weeks"
    )


def test_run_settings_rejects_unknown_strategy(monkeypatch):
    monkeypatch.setenv("DOWNLOAD_STRATEGY", "guess")
    with pytest.raises(ValueError):
        RunSettings.from_env()
