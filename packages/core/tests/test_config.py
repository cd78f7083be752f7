"""Tests for the configuration system."""

import pytest
import structlog

from box3_core.config import Box3Config, DedupConfig, configure_logging, load_config
from box3_core.exceptions import ConfigurationError


class TestDedupConfig:
    """Test suite for DedupConfig."""

    def test_default_values(self):
        """DedupConfig should have sensible defaults."""
        config = DedupConfig()

        assert config.enable_cross_category is True
        assert config.tax_years == []

    def test_int_years_accepted(self):
        config = DedupConfig(tax_years=[2022, "2023"])
        assert config.tax_years == ["2022", "2023"]

    @pytest.mark.parametrize("year", ["23", "20x2", ""])
    def test_invalid_year(self, year):
        with pytest.raises(ValueError):
            DedupConfig(tax_years=[year])

    def test_from_environment(self, monkeypatch):
        """DedupConfig should load from environment variables."""
        monkeypatch.setenv("BOX3_DEDUP_ENABLE_CROSS_CATEGORY", "false")
        monkeypatch.setenv("BOX3_DEDUP_TAX_YEARS", '["2022", "2023"]')

        config = DedupConfig()

        assert config.enable_cross_category is False
        assert config.tax_years == ["2022", "2023"]


class TestBox3Config:
    """Test suite for Box3Config."""

    def test_default_values(self):
        config = Box3Config()

        assert config.env == "development"
        assert config.log_level == "INFO"
        assert config.log_format == "console"
        assert isinstance(config.dedup, DedupConfig)
        assert config.is_production is False
        assert config.is_debug is False

    def test_env_validation(self):
        """Environment should be validated and lower-cased."""
        assert Box3Config(env="PRODUCTION").is_production is True

        with pytest.raises(ValueError):
            Box3Config(env="local")

    def test_log_level_validation(self):
        """Log level should be validated and upper-cased."""
        assert Box3Config(log_level="debug").is_debug is True

        with pytest.raises(ValueError):
            Box3Config(log_level="LOUD")

    def test_log_format_validation(self):
        assert Box3Config(log_format="JSON").log_format == "json"

        with pytest.raises(ValueError):
            Box3Config(log_format="xml")

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("BOX3_ENV", "test")
        monkeypatch.setenv("BOX3_LOG_LEVEL", "warning")
        monkeypatch.setenv("BOX3_DEDUP_TAX_YEARS", '["2021"]')

        config = Box3Config()

        assert config.env == "test"
        assert config.log_level == "WARNING"
        assert config.dedup.tax_years == ["2021"]


class TestLoadConfig:
    """Test suite for load_config."""

    def test_overrides(self):
        assert load_config(log_level="ERROR").log_level == "ERROR"

    def test_invalid_raises_configuration_error(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(env="somewhere")

        assert exc_info.value.config_key == "env"
        assert exc_info.value.details["config_key"] == "env"
        assert exc_info.value.actual == "somewhere"
        assert exc_info.value.details["actual"] == "somewhere"


class TestConfigureLogging:
    """Test suite for configure_logging."""

    def test_filters_below_level(self, capsys):
        configure_logging("WARNING")
        logger = structlog.get_logger()

        logger.info("hidden_event")
        logger.warning("shown_event", asset="bank_1")

        err = capsys.readouterr().err
        assert "hidden_event" not in err
        assert "shown_event" in err
        assert "asset=bank_1" in err

    def test_json_format(self, capsys):
        configure_logging("INFO", "json")
        structlog.get_logger().info("dedup_completed", items_merged=1)

        err = capsys.readouterr().err
        assert '"event": "dedup_completed"' in err
        assert '"items_merged": 1' in err
