"""Configuration settings for extconf."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

from extconf.constants import DEFAULT_CACHE_PATH
from extconf.errors import ExtensionError

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = "extconf.yaml"


class Settings(BaseSettings):
    """Settings loaded from environment variables (``EXTCONF_*``) and .env.

    Values passed explicitly, e.g. from a YAML settings file, win over the
    environment.
    """

    # Scanning
    extension_path: Path = Path("extensions")
    cache_path: Path = Path(DEFAULT_CACHE_PATH)
    force_rescan: bool = False

    # Consumers
    component_url_base: str = ""

    # Logging
    log_level: str = "INFO"
    log_dir: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_prefix="EXTCONF_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


def load_settings(path: Optional[Path] = None) -> Settings:
    """Build settings, reading a YAML settings file when one is given.

    Args:
        path: Settings file. When None, ``extconf.yaml`` in the working
            directory is used if it exists.

    Raises:
        ExtensionError: If the settings file is not a YAML mapping.
    """
    explicit = path is not None
    path = Path(path) if explicit else Path(DEFAULT_SETTINGS_FILE)
    if not path.exists():
        if explicit:
            raise ExtensionError(f"Settings file not found: {path}")
        return Settings()

    data = _load_yaml(path)
    logger.debug(f"Loaded settings from {path}: {sorted(data)}")
    return Settings(**data)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return load_settings()


def _load_yaml(path: Path) -> Dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ExtensionError(f"Invalid settings file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ExtensionError(f"Settings file {path} must contain a mapping")
    return data
