"""Configuration management."""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, field_validator

from .errors import ConfigurationError

PROJECT_DIR = Path(__file__).parent.parent


class Config(BaseModel):
    """Application configuration."""

    store_path: Path = PROJECT_DIR / "data" / "jobs.json"
    credentials_dir: Path = PROJECT_DIR / "config"
    log_level: str = "INFO"
    spreadsheet_title: str = "JobHunt AI Tracker"
    sheet_name: str = "Jobs"
    openrouter_model: str = "google/gemini-2.5-flash"
    openrouter_api_key_env: str = "OPENROUTER_API_KEY"
    request_timeout: Optional[float] = None
    description_prefix_chars: int = 2000

    @field_validator("store_path", "credentials_dir")
    @classmethod
    def anchor_to_project(cls, value: Path) -> Path:
        """Relative paths in the config file are relative to the project root."""
        return value if value.is_absolute() else PROJECT_DIR / value

    def openrouter_api_key(self) -> Optional[str]:
        """Read the extraction service key from the environment."""
        return os.environ.get(self.openrouter_api_key_env) or None


_config: Optional[Config] = None


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from YAML file."""
    global _config

    if _config is not None:
        return _config

    if config_path is None:
        config_path = PROJECT_DIR / "config" / "config.yaml"

    if not config_path.exists():
        raise ConfigurationError(
            f"Config file not found: {config_path}. "
            "Copy config/config.yaml.example to config/config.yaml and fill in your settings."
        )

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    _config = Config(**data)
    return _config


def get_config() -> Config:
    """Get the loaded configuration."""
    if _config is None:
        return load_config()
    return _config


def reset_config() -> None:
    """Forget the loaded configuration so the next call re-reads the file."""
    global _config
    _config = None
