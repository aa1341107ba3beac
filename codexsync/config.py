"""Project configuration — ``.codexsync.yaml`` at the project root.

Example::

    upstream: https://github.com/acme/codex-template.git
    branch: main
    codex_dir: codex
    metadata_file: CODEX.md
    minor_line_threshold: 10

``CODEXSYNC_UPSTREAM``, ``CODEXSYNC_BRANCH`` and ``CODEXSYNC_LOG_LEVEL``
override the file.
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path, PurePosixPath

import yaml

from codexsync.errors import ConfigError
from codexsync.versioning.classifier import MINOR_LINE_THRESHOLD

CONFIG_FILE = ".codexsync.yaml"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_ENV_OVERRIDES = {
    "upstream": "CODEXSYNC_UPSTREAM",
    "branch": "CODEXSYNC_BRANCH",
    "log_level": "CODEXSYNC_LOG_LEVEL",
}


@dataclass
class SyncConfig:
    """Settings shared by every codexsync command."""

    upstream: str = ""
    branch: str = "main"
    codex_dir: str = "codex"
    metadata_file: str = "CODEX.md"
    minor_line_threshold: int = MINOR_LINE_THRESHOLD
    backup_dir: str = ".codex_backups"
    branch_prefix: str = "codex/suggest"
    log_level: str = "WARNING"

    @property
    def metadata_path(self) -> str:
        """Metadata document path relative to a repo root, POSIX style."""
        return str(PurePosixPath(self.codex_dir) / self.metadata_file)

    def require_upstream(self) -> str:
        if not self.upstream:
            raise ConfigError(
                f"No upstream configured. Set 'upstream' in {CONFIG_FILE} "
                "or the CODEXSYNC_UPSTREAM environment variable."
            )
        return self.upstream


def load_config(project_root: str | Path = ".") -> SyncConfig:
    """Load the project's config file (if any) and apply environment overrides."""
    path = Path(project_root) / CONFIG_FILE
    data: dict = {}

    if path.exists():
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a mapping of settings")

    for key, env_var in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            data[key] = value

    return _from_dict(data, source=str(path))


def save_config(config: SyncConfig, project_root: str | Path = ".") -> Path:
    """Write *config* to the project's config file."""
    path = Path(project_root) / CONFIG_FILE
    with open(path, "w") as f:
        yaml.safe_dump(asdict(config), f, sort_keys=False)
    return path


def _from_dict(data: dict, source: str) -> SyncConfig:
    known = {f.name: f for f in fields(SyncConfig)}
    unknown = sorted(set(data) - set(known))
    if unknown:
        raise ConfigError(f"Unknown setting(s) in {source}: {', '.join(unknown)}")

    values = {}
    for key, value in data.items():
        if key == "minor_line_threshold":
            if isinstance(value, bool):
                raise ConfigError(f"minor_line_threshold must be an integer, got {value!r}")
            try:
                value = int(value)
            except (TypeError, ValueError):
                raise ConfigError(f"minor_line_threshold must be an integer, got {value!r}")
            if value < 0:
                raise ConfigError("minor_line_threshold must not be negative")
        elif not isinstance(value, str):
            raise ConfigError(f"{key} must be a string, got {value!r}")
        values[key] = value

    level = values.get("log_level", "WARNING")
    if level.upper() not in _LOG_LEVELS:
        raise ConfigError(f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {level!r}")

    config = SyncConfig(**values)
    for key in ("codex_dir", "metadata_file"):
        rel = PurePosixPath(getattr(config, key))
        if rel.is_absolute() or ".." in rel.parts or not rel.parts:
            raise ConfigError(f"{key} must be a relative path inside the repository")
    return config
