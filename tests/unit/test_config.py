# pylint: disable=missing-module-docstring,missing-function-docstring

import pytest

from config import AppConfig, strip_api_suffix
from constants import DEFAULT_API_BASE_URL, KEEP_ALIVE_INTERVAL_S


def test_defaults(monkeypatch: pytest.MonkeyPatch):
    for name in ("ENV", "API_BASE_URL", "KEEP_ALIVE_INTERVAL_S"):
        monkeypatch.delenv(name, raising=False)

    config = AppConfig.load_from_env()

    assert config.env == "dev"
    assert config.api_base_url == DEFAULT_API_BASE_URL
    assert config.keep_alive_interval_s == KEEP_ALIVE_INTERVAL_S


def test_env_overrides(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ENV", "prod")
    monkeypatch.setenv("API_BASE_URL", "https://api.example/api/")
    monkeypatch.setenv("KEEP_ALIVE_INTERVAL_S", "60")

    config = AppConfig.load_from_env()

    assert config.env == "prod"
    assert config.api_base_url == "https://api.example/api"
    assert config.analytics_base_url == "https://api.example"
    assert config.keep_alive_interval_s == 60.0


@pytest.mark.parametrize("value", ["0", "-5", "soon"])
def test_invalid_keep_alive_interval(monkeypatch: pytest.MonkeyPatch, value: str):
    monkeypatch.setenv("KEEP_ALIVE_INTERVAL_S", value)

    with pytest.raises(ValueError):
        AppConfig.load_from_env()


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://a.example/api", "https://a.example"),
        ("https://a.example/api/", "https://a.example"),
        ("https://a.example", "https://a.example"),
        ("https://a.example/apis", "https://a.example/apis"),
    ],
)
def test_strip_api_suffix(url: str, expected: str):
    assert strip_api_suffix(url) == expected
