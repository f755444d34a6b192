"""
Tests for settings, startup checks and logging configuration.

Tests: config/settings.py, config/startup_checks.py, config/logging.py
"""

import logging

import pytest
import structlog

from config import settings
from config.logging import configure_structlog, get_logging_config
from config.startup_checks import validate_config
from valuation.exceptions import ConfigurationError, ValuationError


@pytest.mark.config
class TestValidateConfig:
    def test_defaults_are_valid(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "CACHE_MAX_ENTRIES", 10)
        monkeypatch.setattr(settings, "DEFAULT_CURRENCY", "GBP")
        validate_config()

    def test_cache_size_must_be_positive(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "CACHE_MAX_ENTRIES", 0)
        monkeypatch.setattr(settings, "DEFAULT_CURRENCY", "GBP")
        with pytest.raises(ConfigurationError, match="VALUATION_CACHE_MAX_ENTRIES"):
            validate_config()

    def test_currency_must_be_iso_code(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "CACHE_MAX_ENTRIES", 10)
        monkeypatch.setattr(settings, "DEFAULT_CURRENCY", "POUNDS")
        with pytest.raises(ConfigurationError, match="VALUATION_DEFAULT_CURRENCY"):
            validate_config()

    def test_reports_every_problem(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "CACHE_MAX_ENTRIES", -1)
        monkeypatch.setattr(settings, "DEFAULT_CURRENCY", "x")
        with pytest.raises(ConfigurationError) as exc_info:
            validate_config()
        message = str(exc_info.value)
        assert "VALUATION_CACHE_MAX_ENTRIES" in message
        assert "VALUATION_DEFAULT_CURRENCY" in message

    def test_configuration_error_is_a_valuation_error(self) -> None:
        assert issubclass(ConfigurationError, ValuationError)


@pytest.mark.config
class TestLoggingConfig:
    def test_json_in_production(self) -> None:
        config = get_logging_config(debug=False, level="WARNING")
        assert config["handlers"]["console"]["formatter"] == "json"
        assert config["loggers"]["valuation"]["level"] == "WARNING"

    def test_console_and_debug_level_when_debugging(self) -> None:
        config = get_logging_config(debug=True)
        assert config["handlers"]["console"]["formatter"] == "console"
        assert config["loggers"]["valuation.services.cache"]["level"] == "DEBUG"

    def test_configure_logging_applies(self) -> None:
        settings.configure_logging(debug=False)
        try:
            assert logging.getLogger("valuation").propagate is False
            assert structlog.is_configured()
        finally:
            structlog.reset_defaults()

    def test_configure_structlog_debug(self) -> None:
        configure_structlog(debug=True)
        try:
            processors = structlog.get_config()["processors"]
            assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
        finally:
            structlog.reset_defaults()
