import json

import pytest

from routekit.app import default_interceptors
from routekit.config import PipelineSettings, load_config, save_config
from routekit.config.loader import camel_to_snake, convert_keys, snake_to_camel
from routekit.interceptors import CacheInterceptor, LoggingInterceptor, TimeoutInterceptor, TransformInterceptor


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("ROUTEKIT_TIMEOUT_MS", "ROUTEKIT_LOG_REQUESTS", "ROUTEKIT_CACHE__ENABLED"):
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = PipelineSettings()

    assert settings.timeout_ms == 5000
    assert settings.timeout_seconds == 5.0
    assert settings.cancel_on_timeout is True
    assert settings.cache.enabled is False


def test_load_camel_case_file(tmp_path) -> None:
    path = tmp_path / "routekit.json"
    path.write_text(json.dumps({"timeoutMs": 250, "transformResponses": False, "cache": {"enabled": True, "ttlSeconds": 5}}))

    settings = load_config(path)

    assert settings.timeout_ms == 250
    assert settings.transform_responses is False
    assert settings.cache.enabled is True
    assert settings.cache.ttl_seconds == 5


@pytest.mark.parametrize("content", ["{not json", "[1, 2]", json.dumps({"timeoutMs": 0})])
def test_invalid_file_falls_back_to_defaults(tmp_path, content) -> None:
    path = tmp_path / "routekit.json"
    path.write_text(content)

    assert load_config(path).timeout_ms == 5000


def test_missing_file_gives_defaults(tmp_path) -> None:
    assert load_config(tmp_path / "absent.json") == PipelineSettings()


def test_environment_fills_unset_fields(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("ROUTEKIT_TIMEOUT_MS", "750")
    monkeypatch.setenv("ROUTEKIT_CACHE__ENABLED", "true")
    path = tmp_path / "routekit.json"
    path.write_text(json.dumps({"logRequests": False}))

    settings = load_config(path)

    assert settings.timeout_ms == 750
    assert settings.cache.enabled is True
    assert settings.log_requests is False


def test_save_then_load(tmp_path) -> None:
    path = tmp_path / "nested" / "routekit.json"
    original = PipelineSettings(timeout_ms=42, cancel_on_timeout=False)

    assert save_config(original, path) == path
    raw = json.loads(path.read_text())
    assert raw["timeoutMs"] == 42
    assert raw["cache"]["maxEntries"] == 1024
    assert load_config(path) == original


def test_key_conversion() -> None:
    assert camel_to_snake("timeoutMs") == "timeout_ms"
    assert snake_to_camel("cancel_on_timeout") == "cancelOnTimeout"
    assert convert_keys({"cache": {"ttlSeconds": 1}}) == {"cache": {"ttl_seconds": 1}}


def test_default_interceptors_follow_settings() -> None:
    settings = PipelineSettings(timeout_ms=123, cache={"enabled": True})

    chain = default_interceptors(settings)

    assert [type(i) for i in chain] == [LoggingInterceptor, TransformInterceptor, TimeoutInterceptor, CacheInterceptor]
    assert chain[2].timeout_ms == 123


def test_default_interceptors_minimal() -> None:
    settings = PipelineSettings(log_requests=False, transform_responses=False)

    assert [type(i) for i in default_interceptors(settings)] == [TimeoutInterceptor]
