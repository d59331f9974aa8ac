"""
Tests for environment-driven configuration.
"""

import logging

import pytest

from settings.portal_config import PortalConfig, configure_logging, load_config


ENV_KEYS = [
    "PORTAL_HISTOGRAM_BINS",
    "PORTAL_BUCKET_DECIMALS",
    "PORTAL_MAX_EXTRA_FIELDS",
    "PORTAL_MAX_SEARCH_LENGTH",
    "PORTAL_DEFAULT_RECORD_ID",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults():
    assert load_config() == PortalConfig()


def test_overrides(monkeypatch):
    monkeypatch.setenv("PORTAL_HISTOGRAM_BINS", "5")
    monkeypatch.setenv("PORTAL_BUCKET_DECIMALS", "1")
    monkeypatch.setenv("PORTAL_DEFAULT_RECORD_ID", " 2024331082 ")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = load_config()

    assert config.histogram_bins == 5
    assert config.bucket_decimals == 1
    assert config.default_record_id == "2024331082"
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize("raw", ["abc", "0", "-3", ""])
def test_invalid_bin_count_keeps_default(monkeypatch, raw):
    monkeypatch.setenv("PORTAL_HISTOGRAM_BINS", raw)
    assert load_config().histogram_bins == 8


class TestConfigureLogging:

    @pytest.fixture(autouse=True)
    def restore_root_level(self):
        root = logging.getLogger()
        level = root.level
        yield
        root.setLevel(level)

    def test_applies_configured_level(self):
        assert configure_logging(PortalConfig(log_level="DEBUG")) == logging.DEBUG
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        assert configure_logging(PortalConfig(log_level="CHATTY")) == logging.INFO
