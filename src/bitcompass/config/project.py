"""Per-project configuration in ``<cwd>/.bitcompass/config.json``."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

EditorProvider = Literal["vscode", "cursor", "antigrativity", "claudecode"]

PROJECT_CONFIG_DIR = ".bitcompass"
PROJECT_CONFIG_FILE = "config.json"

EDITOR_DEFAULT_PATHS: dict[str, str] = {
    "vscode": ".vscode/rules",
    "cursor": ".cursor/rules",
    "antigrativity": ".antigrativity/rules",
    "claudecode": ".claude/rules",
}

# Subfolder per record kind under the editor base (e.g. .cursor/skills).
KIND_SUBFOLDERS: dict[str, str] = {
    "rule": "rules",
    "skill": "skills",
    "command": "commands",
    "solution": "documentation",
}

DEFAULT_EDITOR: EditorProvider = "cursor"
DEFAULT_OUTPUT_PATH = EDITOR_DEFAULT_PATHS[DEFAULT_EDITOR]

_warned_missing = False


class ProjectConfig(BaseModel):
    """Editor provider and output folder for pulled rules."""

    editor: EditorProvider = DEFAULT_EDITOR
    outputPath: str = DEFAULT_OUTPUT_PATH


def project_config_path(cwd: Path | None = None) -> Path:
    return (cwd or Path.cwd()) / PROJECT_CONFIG_DIR / PROJECT_CONFIG_FILE


def load_project_config(cwd: Path | None = None) -> ProjectConfig | None:
    """Return the project config, or ``None`` when absent or invalid."""
    path = project_config_path(cwd)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return None
    if not isinstance(data, dict) or not data.get("outputPath"):
        return None
    try:
        return ProjectConfig.model_validate(data)
    except ValidationError:
        return None


def save_project_config(config: ProjectConfig, cwd: Path | None = None) -> Path:
    path = project_config_path(cwd)
    path.parent.mkdir(mode=0o755, parents=True, exist_ok=True)
    path.write_text(json.dumps(config.model_dump(), indent=2), encoding="utf-8")
    return path


def get_project_config(cwd: Path | None = None, *, warn_if_missing: bool = False) -> ProjectConfig:
    """Return the project config or defaults.

    With ``warn_if_missing`` a missing config is logged once per process.
    """
    global _warned_missing
    config = load_project_config(cwd)
    if config is not None:
        return config
    if warn_if_missing and not _warned_missing:
        _warned_missing = True
        logger.warning(
            "No project config found (%s/%s). Using defaults. "
            'Run "bitcompass init" to configure.',
            PROJECT_CONFIG_DIR,
            PROJECT_CONFIG_FILE,
        )
    return ProjectConfig()


def output_dir_for_kind(config: ProjectConfig, kind: str, cwd: Path | None = None) -> Path:
    """Project output directory for *kind*.

    The base is the parent of ``outputPath`` (``.cursor/rules`` → ``.cursor``),
    with the kind subfolder appended.
    """
    base = Path(config.outputPath).parent
    if not base.is_absolute():
        base = (cwd or Path.cwd()) / base
    return base / KIND_SUBFOLDERS[kind]


def global_output_dir_for_kind(kind: str) -> Path:
    """User-wide output directory for *kind* (``~/.cursor/<subfolder>``)."""
    return Path.home() / ".cursor" / KIND_SUBFOLDERS[kind]
