"""User configuration and credential storage under ``~/.bitcompass``.

Two JSON files live in the config directory:

* ``config.json`` — :class:`GlobalConfig` (backend URL and anon key).
* ``token.json`` — :class:`StoredCredentials` written by ``bitcompass login``.

Both are read fresh on every call so a login in another terminal is picked up
without restarting the MCP server.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "BITCOMPASS_CONFIG_DIR"
CONFIG_FILENAME = "config.json"
TOKEN_FILENAME = "token.json"

CONFIG_KEYS = ("supabaseUrl", "supabaseAnonKey", "apiUrl")

_ENV_FALLBACKS = {
    "supabaseUrl": "BITCOMPASS_SUPABASE_URL",
    "supabaseAnonKey": "BITCOMPASS_SUPABASE_ANON_KEY",
    "apiUrl": "BITCOMPASS_API_URL",
}


class GlobalConfig(BaseModel):
    """Contents of ``config.json``."""

    model_config = ConfigDict(extra="ignore")

    apiUrl: str | None = None
    supabaseUrl: str | None = None
    supabaseAnonKey: str | None = None


class StoredUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: str | None = None


class StoredCredentials(BaseModel):
    """Contents of ``token.json``."""

    model_config = ConfigDict(extra="ignore")

    access_token: str
    refresh_token: str | None = None
    expires_at: int | None = None
    user: StoredUser | None = None


def default_config_dir() -> Path:
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override)
    return Path.home() / ".bitcompass"


class ConfigStore:
    """Reads and writes the user-level config and credential files."""

    def __init__(self, directory: Path | None = None) -> None:
        self._directory = directory

    @property
    def directory(self) -> Path:
        return self._directory or default_config_dir()

    @property
    def config_path(self) -> Path:
        return self.directory / CONFIG_FILENAME

    @property
    def token_path(self) -> Path:
        return self.directory / TOKEN_FILENAME

    def ensure_dir(self) -> Path:
        """Create the config directory (mode 0700) if needed and return it."""
        directory = self.directory
        directory.mkdir(mode=0o700, parents=True, exist_ok=True)
        return directory

    # -- config.json ------------------------------------------------------

    def load_config(self) -> GlobalConfig:
        data = self._read_json(self.config_path)
        if data is None:
            return GlobalConfig()
        try:
            return GlobalConfig.model_validate(data)
        except ValidationError:
            logger.warning("Ignoring invalid config file %s", self.config_path)
            return GlobalConfig()

    def save_config(self, config: GlobalConfig) -> None:
        self._write_json(self.config_path, config.model_dump(exclude_none=True), indent=2)

    def get_value(self, key: str) -> str | None:
        """Return a config value, falling back to its ``BITCOMPASS_*`` env var."""
        if key not in CONFIG_KEYS:
            raise KeyError(key)
        value = getattr(self.load_config(), key)
        if value:
            return value
        return os.environ.get(_ENV_FALLBACKS[key]) or None

    def set_value(self, key: str, value: str) -> None:
        if key not in CONFIG_KEYS:
            raise KeyError(key)
        config = self.load_config()
        setattr(config, key, value)
        self.save_config(config)

    # -- token.json -------------------------------------------------------

    def load_credentials(self) -> StoredCredentials | None:
        data = self._read_json(self.token_path)
        if not data:
            return None
        try:
            return StoredCredentials.model_validate(data)
        except ValidationError:
            return None

    def save_credentials(self, credentials: StoredCredentials) -> None:
        self._write_json(
            self.token_path, credentials.model_dump(exclude_none=True), indent=None
        )

    def clear_credentials(self) -> None:
        """Blank the token file; a missing file is left alone."""
        if self.token_path.exists():
            self._write_json(self.token_path, {}, indent=None)

    def access_token(self) -> str | None:
        credentials = self.load_credentials()
        if credentials is None or not credentials.access_token:
            return None
        return credentials.access_token

    def has_access_token(self) -> bool:
        return self.access_token() is not None

    def current_user_email(self) -> str | None:
        credentials = self.load_credentials()
        if credentials is None or credentials.user is None:
            return None
        return credentials.user.email

    # -- helpers ------------------------------------------------------------

    @staticmethod
    def _read_json(path: Path) -> Any:
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Cannot read %s: %s", path, exc)
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return None

    def _write_json(self, path: Path, data: dict[str, Any], *, indent: int | None) -> None:
        self.ensure_dir()
        # New files are created private; chmod tightens files that already existed.
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(json.dumps(data, indent=indent))
        path.chmod(0o600)
