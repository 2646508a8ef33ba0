"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator


def _default_database_url() -> str:
    return f"sqlite:///{Path.home() / '.munchkit' / 'recents.db'}"


class HoursConfig(BaseModel):
    """Lead times used when classifying opening hours."""
    opening_lead_minutes: int = 30
    closing_lead_minutes: int = 30

    @field_validator("opening_lead_minutes", "closing_lead_minutes")
    @classmethod
    def validate_lead(cls, value: int) -> int:
        """Lead minutes must fit in a day."""
        if not 0 <= value < 24 * 60:
            raise ValueError(f"Lead minutes must be between 0 and 1439, got {value}")
        return value


class RecentsConfig(BaseModel):
    """Capacities of the recently used items lists."""
    places_capacity: int = 20
    search_queries_capacity: int = 10

    @field_validator("places_capacity", "search_queries_capacity")
    @classmethod
    def validate_capacity(cls, value: int) -> int:
        """Ensure capacity is positive."""
        if value <= 0:
            raise ValueError("Capacity must be greater than zero")
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Asia/Singapore"
    database_url: str = Field(default_factory=_default_database_url)
    log_level: str = "INFO"
    hours: HoursConfig = Field(default_factory=HoursConfig)
    recents: RecentsConfig = Field(default_factory=RecentsConfig)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level

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

    @classmethod
    def load_or_default(cls, config_path: Path | None = None) -> "AppConfig":
        """Load the given or default config file, falling back to defaults if none exists."""
        path = config_path or get_default_config_path()
        if config_path is None and not path.exists():
            return cls()
        return cls.load_from_yaml(path)


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
