"""Install and refresh a project's codex from the upstream template."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from git import GitCommandError

from codexsync.config import SyncConfig
from codexsync.errors import CodexExists, LocalMetadataMissing, RemoteUnavailable, UpdateFailed
from codexsync.utils.git_ops import RepoHandle, clone_upstream
from codexsync.utils.text_io import read_text
from codexsync.versioning import codec
from codexsync.versioning.comparator import compare
from codexsync.versioning.models import Ordering, SemanticVersion

logger = logging.getLogger(__name__)


class UpdateAction(Enum):
    INSTALLED = "installed"
    UPDATED = "updated"
    UP_TO_DATE = "up_to_date"
    LOCAL_AHEAD = "local_ahead"


@dataclass
class UpdateResult:
    """Outcome of ``init_codex`` / ``update_codex``."""

    action: UpdateAction
    remote_version: SemanticVersion
    local_version: SemanticVersion | None = None
    backup_path: Path | None = None

    def summary(self) -> str:
        if self.action is UpdateAction.INSTALLED:
            return f"Installed codex {self.remote_version}"
        if self.action is UpdateAction.UPDATED:
            return f"Updated codex {self.local_version} -> {self.remote_version}"
        if self.action is UpdateAction.UP_TO_DATE:
            return f"Codex {self.local_version} is up to date"
        return (
            f"Local codex {self.local_version} is ahead of upstream {self.remote_version}; "
            "use 'codexsync suggest-changes' to propose it"
        )


def init_codex(config: SyncConfig, project_root: str | Path = ".") -> UpdateResult:
    """Copy the upstream codex into a project that has none.

    Raises:
        CodexExists: The project already has a codex directory.
        RemoteUnavailable: Upstream could not be cloned or has no codex.
        UpdateFailed: Copying the codex failed; the project is left as it was.
    """
    local_codex = Path(project_root) / config.codex_dir
    if local_codex.exists():
        raise CodexExists(f"{local_codex} already exists")

    with _clone(config) as handle:
        remote_version = _remote_version(config, handle)
        try:
            shutil.copytree(handle.local_path / config.codex_dir, local_codex)
        except OSError as e:
            shutil.rmtree(local_codex, ignore_errors=True)
            raise UpdateFailed(f"Could not install codex into {local_codex}: {e}") from e

    logger.info("Installed codex %s into %s", remote_version, local_codex)
    return UpdateResult(action=UpdateAction.INSTALLED, remote_version=remote_version)


def update_codex(
    config: SyncConfig,
    project_root: str | Path = ".",
    now: datetime | None = None,
) -> UpdateResult:
    """Replace the project's codex with upstream's when upstream is newer.

    The previous codex is moved to ``<backup_dir>/<version>-<timestamp>``.
    Equal or newer local versions are left untouched.

    Raises:
        LocalMetadataMissing: The project has no codex metadata document.
        RemoteUnavailable: Upstream could not be cloned or has no codex.
        UpdateFailed: Copying the codex failed; the project is left as it was.
    """
    root = Path(project_root)
    local_codex = root / config.codex_dir
    local_metadata = root / config.metadata_path
    if not local_metadata.is_file():
        raise LocalMetadataMissing(f"{local_metadata} not found")
    try:
        local_document = read_text(local_metadata)
    except (OSError, UnicodeDecodeError) as e:
        raise LocalMetadataMissing(f"Could not read {local_metadata}: {e}") from e
    local_version = codec.parse(local_document)

    with _clone(config) as handle:
        remote_version = _remote_version(config, handle)
        ordering = compare(local_version, remote_version)

        if ordering is Ordering.EQUAL:
            return UpdateResult(UpdateAction.UP_TO_DATE, remote_version, local_version)
        if ordering is Ordering.GREATER:
            logger.warning("Local codex %s is ahead of upstream %s", local_version, remote_version)
            return UpdateResult(UpdateAction.LOCAL_AHEAD, remote_version, local_version)

        stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%dT%H%M%SZ")
        backup_path = root / config.backup_dir / f"{local_version}-{stamp}"
        _swap_in(handle.local_path / config.codex_dir, local_codex, backup_path)

    logger.info("Updated codex %s -> %s (backup: %s)", local_version, remote_version, backup_path)
    return UpdateResult(UpdateAction.UPDATED, remote_version, local_version, backup_path)


def _clone(config: SyncConfig) -> RepoHandle:
    url = config.require_upstream()
    try:
        return clone_upstream(url, config.branch)
    except GitCommandError as e:
        raise RemoteUnavailable(f"Could not clone {url} ({config.branch}): {(e.stderr or '').strip() or e}") from e


def _remote_version(config: SyncConfig, handle: RepoHandle) -> SemanticVersion:
    metadata = handle.local_path / config.metadata_path
    if not metadata.is_file():
        raise RemoteUnavailable(f"Upstream has no {config.metadata_path}")
    try:
        document = read_text(metadata)
    except (OSError, UnicodeDecodeError) as e:
        raise RemoteUnavailable(f"Could not read upstream {config.metadata_path}: {e}") from e
    return codec.parse(document)


def _swap_in(source: Path, local_codex: Path, backup_path: Path) -> None:
    """Replace *local_codex* with a copy of *source*, keeping the old one at *backup_path*.

    Upstream is copied next to the codex first, so a failed copy leaves the
    project untouched. A failed swap moves the backup back into place.

    Raises:
        UpdateFailed: Any step failed; the previous codex is still in place.
    """
    incoming = local_codex.with_name(f".{local_codex.name}.incoming")
    shutil.rmtree(incoming, ignore_errors=True)
    try:
        shutil.copytree(source, incoming)
    except OSError as e:
        shutil.rmtree(incoming, ignore_errors=True)
        raise UpdateFailed(f"Could not copy upstream codex: {e}") from e

    try:
        backup_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(local_codex), str(backup_path))
    except OSError as e:
        shutil.rmtree(incoming, ignore_errors=True)
        raise UpdateFailed(f"Could not back up {local_codex}: {e}") from e

    try:
        shutil.move(str(incoming), str(local_codex))
    except OSError as e:
        shutil.rmtree(local_codex, ignore_errors=True)
        shutil.move(str(backup_path), str(local_codex))
        shutil.rmtree(incoming, ignore_errors=True)
        raise UpdateFailed(f"Could not replace {local_codex}: {e}") from e
