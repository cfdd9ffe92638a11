from __future__ import annotations

from typing import Iterable

from datastore.file_index import build_default_index
from settings import DEFAULT_INSIGHTS_BASE_URL, get_settings
from storage.object_store import build_default_store


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


def test_environment_overrides_apply(monkeypatch, tmp_path) -> None:
    store_root = tmp_path / "files"
    index_path = tmp_path / "index.json"

    monkeypatch.setenv("SENSOR_STORE_ROOT_PATH", str(store_root))
    monkeypatch.setenv("SENSOR_METADATA_PATH", str(index_path))
    monkeypatch.setenv("SYNTHESIS_TARGET_POINTS", "50")
    monkeypatch.setenv("SYNTHESIS_SEED", "42")
    monkeypatch.setenv("SMOOTHING_WINDOW", "3")
    monkeypatch.setenv("DASHBOARD_TIMEZONE", "Europe/Berlin")
    monkeypatch.setenv("INSIGHTS_API_KEY", "secret")
    monkeypatch.setenv("INSIGHTS_TIMEOUT", "12.5")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    caches = (get_settings, build_default_store, build_default_index)
    _clear_caches(caches)

    try:
        settings = get_settings()
        store = build_default_store()
        index = build_default_index()

        assert settings.synthesis_target_points == 50
        assert settings.synthesis_seed == 42
        assert settings.smoothing_window == 3
        assert settings.display_timezone == "Europe/Berlin"
        assert settings.insights_api_key == "secret"
        assert settings.insights_timeout == 12.5
        assert settings.log_level == "DEBUG"
        assert store.root_path == store_root
        assert store_root.is_dir()
        assert index.persistence_path == index_path
    finally:
        _clear_caches(caches)


def test_invalid_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("SYNTHESIS_TARGET_POINTS", "-5")
    monkeypatch.setenv("SYNTHESIS_SEED", "not-a-number")
    monkeypatch.setenv("SMOOTHING_WINDOW", "zero")
    monkeypatch.setenv("INSIGHTS_TIMEOUT", "")
    monkeypatch.delenv("INSIGHTS_API_KEY", raising=False)
    monkeypatch.delenv("INSIGHTS_BASE_URL", raising=False)
    get_settings.cache_clear()

    try:
        settings = get_settings()

        assert settings.synthesis_target_points == 140
        assert settings.synthesis_seed is None
        assert settings.smoothing_window == 5
        assert settings.insights_timeout == 30.0
        assert settings.insights_api_key is None
        assert settings.insights_base_url == DEFAULT_INSIGHTS_BASE_URL
    finally:
        get_settings.cache_clear()


def test_blank_store_path_disables_persistence(monkeypatch) -> None:
    monkeypatch.setenv("SENSOR_STORE_ROOT_PATH", "  ")
    monkeypatch.setenv("SENSOR_METADATA_PATH", "")
    caches = (get_settings, build_default_store, build_default_index)
    _clear_caches(caches)

    try:
        assert build_default_store().root_path is None
        assert build_default_index().persistence_path is None
    finally:
        _clear_caches(caches)
