import logging

import pytest
import structlog

from celine.opa_client import config as config_module
from celine.opa_client.cache import DecisionCache
from celine.opa_client.config import PolicyClientConfig, Settings
from celine.opa_client.logs import configure_logging, resolve_level


def test_settings_singleton_exists_and_matches_get_settings():
    assert hasattr(config_module, "settings")
    assert config_module.get_settings() is config_module.settings


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("CELINE_OPA_URL", "http://opa:8181")
    monkeypatch.setenv("CELINE_OPA_METHOD", "GET")
    monkeypatch.setenv("CELINE_OPA_CACHE_ENABLED", "true")

    s = Settings()

    assert s.url == "http://opa:8181"
    assert s.method == "GET"
    assert s.cache_enabled is True


def test_config_from_settings_attaches_cache():
    s = Settings(url="http://opa:8181/", cache_enabled=True, cache_maxsize=5)

    cfg = PolicyClientConfig.from_settings(s)

    assert cfg.url == "http://opa:8181"
    assert isinstance(cfg.cache, DecisionCache)
    assert cfg.cache.stats["maxsize"] == 5


def test_config_from_settings_without_cache():
    cfg = PolicyClientConfig.from_settings(Settings(cache_enabled=False))
    assert cfg.cache is None


@pytest.mark.parametrize("field, value", [("url", ""), ("opa_version", "/")])
def test_config_rejects_empty_values(field, value):
    kwargs = {"url": "https://opa.test", field: value}
    with pytest.raises(ValueError):
        PolicyClientConfig(**kwargs)


@pytest.mark.parametrize(
    "log_level, expected",
    [("debug", logging.DEBUG), ("WARNING", logging.WARNING), (20, 20), ("15", 15), ("bogus", logging.INFO)],
)
def test_resolve_level(log_level, expected):
    assert resolve_level(log_level) == expected


def test_configure_logging_uses_settings_level(monkeypatch):
    # Default settings.log_level is INFO in config.py
    captured = {}

    def fake_basicConfig(*, level=None, **kwargs):
        captured["level"] = level

    orig_make = structlog.make_filtering_bound_logger

    def fake_make_filtering_bound_logger(level):
        captured["structlog_level"] = level
        return orig_make(level)

    monkeypatch.setattr(logging, "basicConfig", fake_basicConfig)
    monkeypatch.setattr(structlog, "make_filtering_bound_logger", fake_make_filtering_bound_logger)

    configure_logging()

    assert captured["level"] == logging.INFO
    assert captured["structlog_level"] == logging.INFO


def test_configure_logging_explicit_level(monkeypatch):
    captured = {}

    def fake_basicConfig(*, level=None, **kwargs):
        captured["level"] = level

    monkeypatch.setattr(logging, "basicConfig", fake_basicConfig)

    configure_logging(log_level="ERROR", json_format=True)

    assert captured["level"] == logging.ERROR
    assert logging.getLogger("httpx").level == logging.WARNING


def test_settings_accept_lowercase_enum_values(monkeypatch):
    monkeypatch.setenv("CELINE_OPA_METHOD", "get")
    monkeypatch.setenv("CELINE_OPA_LOG_LEVEL", "debug")

    s = Settings()

    assert s.method == "GET"
    assert s.log_level == "DEBUG"
    assert PolicyClientConfig.from_settings(s).method == "GET"
