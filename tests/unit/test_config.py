import importlib
import logging
from unittest.mock import patch

import pytest

from pb_pipeline import config
from pb_pipeline.exceptions import ConfigurationError


@pytest.fixture
def reloaded_config():
    """Reload config inside the test, then restore it from the real environment."""
    yield lambda: importlib.reload(config)
    importlib.reload(config)


def test_config_validation() -> None:
    """Test that the default configuration passes validation."""
    assert config.validate_configuration() is True


def test_env_overrides(mock_env: dict[str, str], reloaded_config) -> None:
    """Test that PB_* environment variables override the defaults."""
    reloaded_config()
    assert config.MIN_FIELD_SIZE == 6
    assert config.MIN_STRENGTH_OF_FIELD == 1000
    assert config.ANALYSIS_WORKERS == 4
    assert config.WEIGHT_FIELD_SIZE == 0.5
    assert config.validate_configuration() is True


def test_defaults_without_env(monkeypatch: pytest.MonkeyPatch, reloaded_config) -> None:
    for key in ("PB_MIN_FIELD_SIZE", "PB_MIN_RATING", "PB_MAX_RATING"):
        monkeypatch.delenv(key, raising=False)
    reloaded_config()
    assert config.MIN_FIELD_SIZE == 8
    assert config.MIN_RATING == 350
    assert config.MAX_RATING == 12000
    assert config.PERCENTILE_MULTIPLIERS["Elite"] == 1.25


def test_config_reload_no_env(caplog: pytest.LogCaptureFixture, reloaded_config) -> None:
    """Test module initialization when .env is not found."""
    caplog.set_level(logging.DEBUG)

    with patch("dotenv.load_dotenv", return_value=False):
        reloaded_config()

    assert any("No .env file found" in record.message for record in caplog.records)


def test_get_env_int_invalid() -> None:
    with patch("os.getenv", return_value="eight"):
        with pytest.raises(ConfigurationError, match="PB_MIN_FIELD_SIZE"):
            config.get_env_int("PB_MIN_FIELD_SIZE", 8)


def test_get_env_float_blank_uses_default() -> None:
    with patch("os.getenv", return_value="  "):
        assert config.get_env_float("PB_WEIGHT_DATA_QUALITY", 0.2) == 0.2


def test_validate_configuration_logs_success(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)
    assert config.validate_configuration() is True
    assert any("Configuration validation passed" in r.message for r in caplog.records)


def test_validate_configuration_bad_weights() -> None:
    """Test validation failure when confidence weights do not sum to 1."""
    with patch("pb_pipeline.config.WEIGHT_DATA_QUALITY", 0.5):
        with pytest.raises(ConfigurationError) as excinfo:
            config.validate_configuration()
        assert "must sum to 1" in str(excinfo.value)


def test_validate_configuration_collects_all_errors(caplog: pytest.LogCaptureFixture) -> None:
    with patch("pb_pipeline.config.MIN_RATING", 20000), patch(
        "pb_pipeline.config.ANALYSIS_WORKERS", 0
    ):
        with pytest.raises(ConfigurationError) as excinfo:
            config.validate_configuration()

    message = str(excinfo.value)
    assert "PB_MIN_RATING" in message
    assert "PB_ANALYSIS_WORKERS" in message
    assert any("Configuration validation failed" in r.message for r in caplog.records)


def test_validate_configuration_sof_ceiling() -> None:
    with patch("pb_pipeline.config.SOF_CONFIDENCE_CEILING", 1000):
        with pytest.raises(ConfigurationError, match="PB_SOF_CONFIDENCE_CEILING"):
            config.validate_configuration()
