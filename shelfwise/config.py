"""shelfwise Configuration.

Includes:
- AppConfig: Main application settings with environment variable support
- DetectorSettings: Command detector tuning
- ParserSettings: Recognition response parser tuning

Environment Variables:
    SHELFWISE_PROJECT_PATH: Project directory path
    SHELFWISE_LOG_LEVEL: Root log level for the CLI (default WARNING)
    SHELFWISE_LOG_FILE: Optional rotating log file
    SHELFWISE_DETECTOR__MAX_INPUT_LENGTH: Characters considered for matching
    SHELFWISE_PARSER__MIN_FIELD_LENGTH: Shortest unflagged title/author
    SHELFWISE_PARSER__DELIMITER: Fence line of the standard response layout
"""

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_DIR = ".shelfwise"
CONFIG_FILE = "config.yaml"


def normalize_log_level(value: str) -> str:
    """Upper-case a log level name, rejecting names logging does not know."""
    level = value.upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Unknown log level: {value}")
    return level


class DetectorSettings(BaseModel):
    """Command detector settings.

    Attributes:
        max_input_length: Longer messages are truncated before matching
    """

    max_input_length: int = Field(default=10_000, ge=1)


class ParserSettings(BaseModel):
    """Recognition response parser settings.

    Attributes:
        min_field_length: English titles/authors shorter than this are flagged
        delimiter: Fence line around standard response blocks
    """

    min_field_length: int = Field(default=3, ge=1)
    delimiter: str = Field(default="##**##", min_length=1)


class AppConfig(BaseSettings):
    """Application configuration with environment variable support.

    Configuration is loaded from environment variables with SHELFWISE_ prefix.
    For example, SHELFWISE_LOG_LEVEL sets log_level, and nested settings use
    a double underscore (SHELFWISE_PARSER__DELIMITER).

    ``load`` reads environment variables and defaults first, then applies any
    sections present in ``.shelfwise/config.yaml`` on top.
    """

    model_config = SettingsConfigDict(
        env_prefix="SHELFWISE_",
        env_nested_delimiter="__",
        arbitrary_types_allowed=True,
        extra="ignore",
    )

    project_path: Path = Field(default_factory=Path.cwd)
    log_level: str = "WARNING"
    log_file: Optional[Path] = None

    detector: DetectorSettings = Field(default_factory=DetectorSettings)
    parser: ParserSettings = Field(default_factory=ParserSettings)

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        return normalize_log_level(value)

    @property
    def config_file(self) -> Path:
        return self.project_path / CONFIG_DIR / CONFIG_FILE

    @classmethod
    def load(cls, path: Path) -> "AppConfig":
        """Load configuration from .shelfwise/config.yaml if it exists.

        Args:
            path: Project path to load configuration for

        Returns:
            AppConfig with file values applied (or defaults if no config exists)

        Raises:
            pydantic.ValidationError: If a detector or parser value is invalid
            ValueError: If the log level is unknown
            ruamel.yaml.YAMLError: If the file is not valid YAML
        """
        from ruamel.yaml import YAML

        config = cls(project_path=path)
        config_file = config.config_file

        if config_file.exists():
            yaml = YAML(typ="safe")
            with config_file.open() as f:
                data = yaml.load(f)

            if data and "log_level" in data:
                config.log_level = normalize_log_level(str(data["log_level"]))
            if data and data.get("log_file"):
                config.log_file = Path(data["log_file"])
            if data and "detector" in data:
                config.detector = DetectorSettings(**(data["detector"] or {}))
            if data and "parser" in data:
                config.parser = ParserSettings(**(data["parser"] or {}))

        return config

    def save(self) -> None:
        """Save configuration to .shelfwise/config.yaml in the project path."""
        from ruamel.yaml import YAML

        config_file = self.config_file
        config_file.parent.mkdir(parents=True, exist_ok=True)

        yaml = YAML()
        yaml.default_flow_style = False

        data = {
            "log_level": self.log_level,
            "log_file": str(self.log_file) if self.log_file else None,
            "detector": self.detector.model_dump(),
            "parser": self.parser.model_dump(),
        }

        with config_file.open("w") as f:
            yaml.dump(data, f)


__all__ = ["AppConfig", "DetectorSettings", "ParserSettings"]
