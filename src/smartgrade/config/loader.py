"""Configuration loader for application settings."""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from ..errors import ConfigError
from ..utils.logging import get_logger
from .models import AppConfig

logger = get_logger(__name__)

ENV_DATA_DIR = "SMARTGRADE_DATA_DIR"
ENV_OWNER = "SMARTGRADE_OWNER"


class ConfigLoader:
    """Loads and validates configuration files."""

    def __init__(self, config_dir: Path | None = None, use_env: bool = True):
        """Initialize the config loader.

        Args:
            config_dir: Directory containing config files. Defaults to the cwd
            use_env: Apply ``SMARTGRADE_*`` environment overrides (reads .env)
        """
        self.config_dir = config_dir or Path.cwd()
        self.use_env = use_env

    def load(self, config_file: str | Path | None = None) -> AppConfig:
        """Load the application configuration.

        Args:
            config_file: Path to a YAML config file. Defaults are used when None

        Returns:
            Parsed AppConfig object

        Raises:
            ConfigError: If the file is missing or is not a YAML mapping
        """
        data: dict[str, Any] = {}
        if config_file is not None:
            path = self._resolve_path(config_file)
            data = self._load_yaml(path)

        if self.use_env:
            load_dotenv()
            if os.environ.get(ENV_DATA_DIR):
                data["data_dir"] = os.environ[ENV_DATA_DIR]
            if os.environ.get(ENV_OWNER):
                data["owner"] = os.environ[ENV_OWNER]

        return AppConfig.from_dict(data)

    def _resolve_path(self, file_path: str | Path) -> Path:
        """Resolve a config file path."""
        path = Path(file_path)
        if not path.is_absolute():
            path = self.config_dir / path
        return path

    def _load_yaml(self, path: Path) -> dict[str, Any]:
        """Load and parse a YAML file."""
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        with open(path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file must contain a mapping: {path}")
        logger.debug(f"Loaded config from {path}")
        return data
