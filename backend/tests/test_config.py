"""
Tests for config.py.

Covers:
  - Defaults and ESG_* environment overrides
  - Validation of bad values
  - build_feed() for every verification mode
"""

import logging
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from config import Settings, build_feed, configure_logging, get_settings
from tools.verification_feed import HttpVerificationFeed, SimulatedVerificationFeed

ENV_VARS = [
    "ESG_VERIFICATION_MODE",
    "ESG_VERIFICATION_URL",
    "ESG_VERIFICATION_TIMEOUT",
    "ESG_SIMULATION_SEED",
    "ESG_TOTAL_METRICS",
    "ESG_MAX_CONCURRENCY",
    "ESG_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestGetSettings:

    def test_defaults(self):
        settings = get_settings()
        assert settings.verification_mode == "simulated"
        assert settings.verification_url is None
        assert settings.verification_timeout == 10.0
        assert settings.simulation_seed is None
        assert settings.total_metrics == 47
        assert settings.max_concurrency == 4
        assert settings.log_level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("ESG_VERIFICATION_MODE", "HTTP")
        monkeypatch.setenv("ESG_VERIFICATION_URL", "https://verify.example.test")
        monkeypatch.setenv("ESG_VERIFICATION_TIMEOUT", "2.5")
        monkeypatch.setenv("ESG_SIMULATION_SEED", "42")
        monkeypatch.setenv("ESG_TOTAL_METRICS", "30")
        monkeypatch.setenv("ESG_MAX_CONCURRENCY", "8")
        monkeypatch.setenv("ESG_LOG_LEVEL", "debug")

        settings = get_settings()
        assert settings.verification_mode == "http"
        assert settings.verification_url == "https://verify.example.test"
        assert settings.verification_timeout == 2.5
        assert settings.simulation_seed == 42
        assert settings.total_metrics == 30
        assert settings.max_concurrency == 8
        assert settings.log_level == "DEBUG"

    def test_blank_values_use_defaults(self, monkeypatch):
        monkeypatch.setenv("ESG_TOTAL_METRICS", "   ")
        assert get_settings().total_metrics == 47

    def test_cached(self):
        assert get_settings() is get_settings()

    @pytest.mark.parametrize("name,value", [
        ("ESG_VERIFICATION_MODE", "carrier-pigeon"),
        ("ESG_TOTAL_METRICS", "0"),
        ("ESG_MAX_CONCURRENCY", "0"),
        ("ESG_VERIFICATION_TIMEOUT", "-1"),
        ("ESG_SIMULATION_SEED", "abc"),
    ])
    def test_invalid_values(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ValidationError):
            get_settings()


class TestBuildFeed:

    def test_none_mode(self):
        assert build_feed(Settings(verification_mode="none")) is None

    def test_http_mode(self):
        feed = build_feed(Settings(
            verification_mode="http",
            verification_url="https://verify.example.test",
            verification_timeout=3.0,
        ))
        assert isinstance(feed, HttpVerificationFeed)
        assert feed.url == "https://verify.example.test"
        assert feed.timeout == 3.0

    def test_http_mode_without_url_disables_verification(self, caplog):
        with caplog.at_level("WARNING", logger="esg_engine"):
            assert build_feed(Settings(verification_mode="http")) is None
        assert "ESG_VERIFICATION_URL" in caplog.text

    def test_simulated_mode_is_seeded(self, sample_profile):
        settings = Settings(verification_mode="simulated", simulation_seed=99)
        a = build_feed(settings)
        b = build_feed(settings)
        assert isinstance(a, SimulatedVerificationFeed)
        assert a.fetch(sample_profile).verified_metrics == b.fetch(sample_profile).verified_metrics

    def test_reads_environment_by_default(self, monkeypatch):
        monkeypatch.setenv("ESG_VERIFICATION_MODE", "none")
        assert build_feed() is None


class TestConfigureLogging:

    def test_level_from_settings(self):
        with patch("config.logging.basicConfig") as basic_config:
            configure_logging(Settings(log_level="DEBUG"))
        basic_config.assert_called_once_with(level=logging.DEBUG)

    def test_unknown_level_falls_back_to_info(self):
        with patch("config.logging.basicConfig") as basic_config:
            configure_logging(Settings(log_level="CHATTY"))
        basic_config.assert_called_once_with(level=logging.INFO)
