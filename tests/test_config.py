"""Tests for shelfwise.config module.

Covers:
- AppConfig defaults and environment variable support
- Log level validation
- Configuration load/save to YAML
- Factories built from config
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from shelfwise.config import AppConfig, DetectorSettings, ParserSettings, normalize_log_level
from shelfwise.core.intent import create_detector
from shelfwise.core.recognition import create_parser


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer SHELFWISE_ variables out of the tests."""
    for name in (
        "SHELFWISE_PROJECT_PATH",
        "SHELFWISE_LOG_LEVEL",
        "SHELFWISE_LOG_FILE",
        "SHELFWISE_DETECTOR__MAX_INPUT_LENGTH",
        "SHELFWISE_PARSER__MIN_FIELD_LENGTH",
        "SHELFWISE_PARSER__DELIMITER",
    ):
        monkeypatch.delenv(name, raising=False)


# ============================================================================
# AppConfig Tests
# ============================================================================


class TestAppConfig:
    """Tests for AppConfig settings."""

    def test_defaults(self, tmp_path: Path) -> None:
        """AppConfig has sensible defaults."""
        config = AppConfig(project_path=tmp_path)
        assert config.log_level == "WARNING"
        assert config.log_file is None
        assert config.detector.max_input_length == 10_000
        assert config.parser.min_field_length == 3
        assert config.parser.delimiter == "##**##"
        assert config.config_file == tmp_path / ".shelfwise" / "config.yaml"

    def test_env_log_level(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """SHELFWISE_LOG_LEVEL is read and upper-cased."""
        monkeypatch.setenv("SHELFWISE_LOG_LEVEL", "debug")
        assert AppConfig(project_path=tmp_path).log_level == "DEBUG"

    def test_env_nested(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Nested settings use a double underscore."""
        monkeypatch.setenv("SHELFWISE_PARSER__MIN_FIELD_LENGTH", "5")
        monkeypatch.setenv("SHELFWISE_DETECTOR__MAX_INPUT_LENGTH", "200")
        config = AppConfig(project_path=tmp_path)
        assert config.parser.min_field_length == 5
        assert config.detector.max_input_length == 200

    def test_invalid_log_level(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError):
            AppConfig(project_path=tmp_path, log_level="LOUD")

    @pytest.mark.parametrize("value", ["info", "Warning", "ERROR"])
    def test_normalize_log_level(self, value: str) -> None:
        assert normalize_log_level(value) == value.upper()

    def test_settings_bounds(self) -> None:
        """Lengths must be positive and the delimiter non-empty."""
        with pytest.raises(ValidationError):
            DetectorSettings(max_input_length=0)
        with pytest.raises(ValidationError):
            ParserSettings(min_field_length=0)
        with pytest.raises(ValidationError):
            ParserSettings(delimiter="")


# ============================================================================
# Load/Save Tests
# ============================================================================


class TestConfigFile:
    """Tests for YAML load and save."""

    def test_load_without_file(self, tmp_path: Path) -> None:
        """Missing config file gives defaults."""
        config = AppConfig.load(tmp_path)
        assert config.project_path == tmp_path
        assert config.parser.delimiter == "##**##"

    def test_save_and_load(self, tmp_path: Path) -> None:
        """Saved values come back on load."""
        config = AppConfig(
            project_path=tmp_path,
            log_level="INFO",
            log_file=tmp_path / "logs" / "shelfwise.log",
            parser=ParserSettings(min_field_length=4, delimiter="---"),
        )
        config.save()

        assert (tmp_path / ".shelfwise" / "config.yaml").exists()

        loaded = AppConfig.load(tmp_path)
        assert loaded.log_level == "INFO"
        assert loaded.log_file == tmp_path / "logs" / "shelfwise.log"
        assert loaded.parser.min_field_length == 4
        assert loaded.parser.delimiter == "---"
        assert loaded.detector.max_input_length == 10_000

    def test_partial_file(self, tmp_path: Path) -> None:
        """Sections missing from the file keep their defaults."""
        config_dir = tmp_path / ".shelfwise"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("detector:\n  max_input_length: 500\n")

        config = AppConfig.load(tmp_path)
        assert config.detector.max_input_length == 500
        assert config.parser.min_field_length == 3
        assert config.log_level == "WARNING"

    def test_empty_file(self, tmp_path: Path) -> None:
        config_dir = tmp_path / ".shelfwise"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("")

        assert AppConfig.load(tmp_path).log_level == "WARNING"

    def test_invalid_file_value(self, tmp_path: Path) -> None:
        """Out-of-range values in the file are rejected."""
        config_dir = tmp_path / ".shelfwise"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("parser:\n  min_field_length: 0\n")

        with pytest.raises(ValidationError):
            AppConfig.load(tmp_path)

    def test_invalid_file_log_level(self, tmp_path: Path) -> None:
        config_dir = tmp_path / ".shelfwise"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("log_level: loud\n")

        with pytest.raises(ValueError, match="Unknown log level"):
            AppConfig.load(tmp_path)


# ============================================================================
# Factory Tests
# ============================================================================


class TestFactories:
    """Tests for components built from config."""

    def test_create_detector(self, tmp_path: Path) -> None:
        config = AppConfig(
            project_path=tmp_path, detector=DetectorSettings(max_input_length=42)
        )
        assert create_detector(config).max_input_length == 42
        assert create_detector().max_input_length == 10_000

    def test_create_parser(self, tmp_path: Path) -> None:
        config = AppConfig(
            project_path=tmp_path,
            parser=ParserSettings(min_field_length=5, delimiter="~~~"),
        )
        parser = create_parser(config)
        assert parser.min_field_length == 5
        assert parser.delimiter == "~~~"

        result = parser.parse_response("~~~\nI. 1. Sapiens\n2. Yuval Noah Harari\n~~~")
        assert result.success
        assert result.books[0].parsing_method.value == "standard"
