"""Configuration service for TaskNest.

Single source of truth for the client and server configuration:

- Loading and saving config.json (pydantic models, mode 0600)
- Dotted-key reads and writes for ``tasknest config``
- The API token saved by ``tasknest login``
"""

from __future__ import annotations

import json
from functools import lru_cache
from json import JSONDecodeError
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir, user_data_dir
from pydantic import ValidationError as PydanticValidationError

from tasknest.exceptions import ValidationError
from tasknest.models.config_models import AppConfig

APP_NAME = "tasknest"


class ConfigService:
    """Service for managing application configuration and credentials."""

    def __init__(self):
        """Initialize the config service."""
        self.config_dir = Path(user_config_dir(APP_NAME))
        self.config_path = self.config_dir / "config.json"
        self.credentials_path = self.config_dir / "credentials.json"
        self.data_dir = Path(user_data_dir(APP_NAME))

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
        """Load configuration from storage, writing defaults on first run."""
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            self._config = AppConfig()
            self.save_config()
        except (OSError, PydanticValidationError) as e:
            raise RuntimeError(f"Failed to load config: {e}") from e

        return self._config

    def save_config(self) -> None:
        """Save the current configuration to storage."""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(self.config.model_dump_json(indent=4))
            self.config_path.chmod(0o600)
        except OSError as e:
            raise RuntimeError(f"Failed to save config: {e}") from e

    def reset_config(self) -> AppConfig:
        """Reset configuration to defaults. Credentials are kept."""
        self._config = AppConfig()
        self.save_config()
        return self._config

    def get_value(self, key: str) -> Any:
        """Read a dotted key such as ``api.endpoint``."""
        section, field = self._split_key(key)
        return self.config.model_dump()[section][field]

    def set_value(self, key: str, value: Any) -> AppConfig:
        """Set a dotted key and persist the validated result.

        Comma-separated strings are accepted for list settings.

        Raises:
            ValidationError: If the key is unknown or the value invalid
        """
        section, field = self._split_key(key)
        data = self.config.model_dump()
        if isinstance(data[section][field], list) and isinstance(value, str):
            value = [item.strip() for item in value.split(",") if item.strip()]
        data[section][field] = value

        try:
            self._config = AppConfig.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid value for {key}: {e.errors()[0]['msg']}") from e

        self.save_config()
        return self._config

    def _split_key(self, key: str) -> tuple[str, str]:
        section, _, field = key.partition(".")
        data = self.config.model_dump()
        if section not in data or field not in data[section]:
            raise ValidationError(f"Unknown config key: {key}")
        return section, field

    def default_db_path(self) -> Path:
        """Database file used by ``serve`` when none is configured."""
        if self.config.server.db_path:
            return Path(self.config.server.db_path).expanduser()
        return self.data_dir / f"{APP_NAME}.db"

    def load_credentials(self) -> dict | None:
        """Load saved credentials.

        Returns:
            dict with 'token', or None if not logged in
        """
        if not self.credentials_path.exists():
            return None

        try:
            with open(self.credentials_path, encoding="utf-8") as f:
                return json.load(f)
        except JSONDecodeError:
            return None

    def save_credentials(self, token: str) -> None:
        """Save the API token with owner-only permissions."""
        self.credentials_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.credentials_path, "w", encoding="utf-8") as f:
            json.dump({"token": token}, f, indent=2)

        self.credentials_path.chmod(0o600)

    def clear_credentials(self) -> None:
        """Remove saved credentials."""
        if self.credentials_path.exists():
            self.credentials_path.unlink()


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service
