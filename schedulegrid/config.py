"""
Configuration management using Pydantic Settings.
"""

from pathlib import Path
from typing import List

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator


class DisplayConfig(BaseModel):
    """Settings for drawing the hourly grid."""
    units_per_hour: int = 60  # one unit per minute
    scroll_to_hour: int = 8
    week_starts_on: int = 0  # 0=Monday, 6=Sunday

    @field_validator("units_per_hour")
    @classmethod
    def validate_units(cls, value: int) -> int:
        """Ensure an hour row has a height."""
        if value <= 0:
            raise ValueError("units_per_hour must be greater than zero")
        return value

    @field_validator("scroll_to_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {v}")
        return v

    @field_validator("week_starts_on")
    @classmethod
    def validate_weekday(cls, value: int) -> int:
        if value not in range(7):
            raise ValueError(f"week_starts_on must be between 0 and 6, got {value}")
        return value


class StoreConfig(BaseModel):
    """Connection settings for the REST schedule store."""
    base_url: str
    api_key: str
    coach_id: str
    user_id: str
    timeout_seconds: float = 30

    def get_rest_url(self) -> str:
        """Get the formatted REST endpoint root."""
        return f"{self.base_url.rstrip('/')}/rest/v1"


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Europe/Berlin"
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    hidden_session_statuses: List[str] = Field(default_factory=lambda: ["cancelled"])
    store: StoreConfig | None = None
    snapshot_path: Path | None = None

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("hidden_session_statuses")
    @classmethod
    def normalize_statuses(cls, value: List[str]) -> List[str]:
        """Lower-case statuses while preserving order and removing duplicates."""
        seen: set[str] = set()
        deduped: List[str] = []
        for status in value:
            key = status.strip().lower()
            if key and key not in seen:
                deduped.append(key)
                seen.add(key)
        return deduped

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path


def load_config(config_path: Path | None = None) -> AppConfig:
    """
    Load the configuration, falling back to defaults when no file exists
    and none was requested explicitly.
    """
    if config_path is not None:
        return AppConfig.load_from_yaml(config_path)

    default_path = get_default_config_path()
    if default_path.exists():
        return AppConfig.load_from_yaml(default_path)
    return AppConfig()
