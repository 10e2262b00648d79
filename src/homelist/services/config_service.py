"""Configuration service for managing Homelist configuration.

This module provides the ConfigService class, the single source of truth
for configuration management. It handles:

- Loading and saving config.json
- Dot-key access for the ``config`` commands
- Credential storage for the task API
- Resolution of the shared edit secret (environment overrides config)
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from json import JSONDecodeError
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir, user_data_dir
from pydantic import BaseModel

from homelist.models.config_models import AppConfig

EDIT_SECRET_ENV = "HOMELIST_EDIT_SECRET"


class ConfigService:
    """Service for managing application configuration."""

    def __init__(self):
        """Initialize the config service."""

        self.config_dir = Path(user_config_dir("homelist"))
        self.config_path = self.config_dir / "config.json"
        self.credentials_path = self.config_dir / "credentials.json"
        self.data_dir = Path(user_data_dir("homelist"))

        # Ensure directories exist
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from storage."""
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            # First run
            self._config = AppConfig()
            self.save_config()
        except Exception as e:
            raise RuntimeError(f"Failed to load config: {e}") from e

        return self._config

    def save_config(self) -> None:
        """Save the current configuration to storage."""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(self.config.model_dump_json(indent=4))

            # Config may hold the edit secret
            self.config_path.chmod(0o600)
        except Exception as e:
            raise RuntimeError(f"Failed to save config: {e}") from e

    def get(self, key: str) -> Any:
        """Get a configuration value by dot-separated key."""
        value: Any = self.config
        for k in key.split("."):
            if isinstance(value, BaseModel):
                value = getattr(value, k, None)
            else:
                return None
        return value

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value by dot-separated key.

        Raises:
            KeyError: If the key does not name an existing setting
            pydantic.ValidationError: If the value is invalid for the setting
        """
        keys = key.split(".")
        config_dict = self.config.model_dump()

        current = config_dict
        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                raise KeyError(key)
            current = current[k]
        if keys[-1] not in current:
            raise KeyError(key)
        current[keys[-1]] = value

        self._config = AppConfig(**config_dict)
        self.save_config()

    def reset(self, key: str | None = None) -> None:
        """Reset configuration (or a single key) to defaults."""
        if key is None:
            self._config = AppConfig()
            self.save_config()
            return

        default_value: Any = AppConfig()
        for k in key.split("."):
            default_value = getattr(default_value, k)
        self.set(key, default_value)

    def save_credentials(self, token: str) -> None:
        """Save the API bearer token."""
        with open(self.credentials_path, "w", encoding="utf-8") as f:
            json.dump({"token": token}, f, indent=2)

        self.credentials_path.chmod(0o600)

    def load_credentials(self) -> dict[str, str] | None:
        """Load the API credentials, if any."""
        try:
            with open(self.credentials_path, encoding="utf-8") as f:
                return json.load(f)
        except (FileNotFoundError, JSONDecodeError):
            return None

    def clear_credentials(self) -> None:
        if self.credentials_path.exists():
            self.credentials_path.unlink()

    def get_edit_secret(self) -> str | None:
        """Shared secret of the external edit endpoint.

        The environment variable wins over the stored configuration.
        """
        return os.environ.get(EDIT_SECRET_ENV) or self.config.server.edit_secret

    def get_db_path(self) -> Path:
        """SQLite file backing the task service."""
        if self.config.server.db_path:
            return Path(self.config.server.db_path)
        return self.data_dir / "homelist.db"


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get the process-wide config service."""
    return ConfigService()
