"""Configuration — user config store, project config, and server settings."""

from bitcompass.config.project import (
    KIND_SUBFOLDERS,
    ProjectConfig,
    get_project_config,
    load_project_config,
    save_project_config,
)
from bitcompass.config.settings import ServerSettings
from bitcompass.config.store import (
    CONFIG_KEYS,
    ConfigStore,
    GlobalConfig,
    StoredCredentials,
)

__all__ = [
    "CONFIG_KEYS",
    "KIND_SUBFOLDERS",
    "ConfigStore",
    "GlobalConfig",
    "ProjectConfig",
    "ServerSettings",
    "StoredCredentials",
    "get_project_config",
    "load_project_config",
    "save_project_config",
]
