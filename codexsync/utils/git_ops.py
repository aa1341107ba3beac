"""Git operations — clone the upstream template, inspect commits."""

from __future__ import annotations

import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

from git import GitCommandError, Repo


@dataclass
class RepoHandle:
    """A temporary clone of the upstream template.

    Use as a context manager to ensure the clone is cleaned up::

        with clone_upstream(url, "main") as handle:
            read(handle.local_path)
        # clone is deleted here
    """

    local_path: Path
    """Filesystem path to the clone root."""

    source_url: str = ""
    """URL or path the clone was made from."""

    branch: str = ""

    def __enter__(self) -> "RepoHandle":
        return self

    def __exit__(self, *exc) -> None:
        self.cleanup()

    @property
    def repo(self) -> Repo:
        return Repo(self.local_path)

    def head_commit(self) -> str:
        return self.repo.head.commit.hexsha

    def cleanup(self) -> None:
        """Remove the clone directory."""
        if self.local_path.exists():
            shutil.rmtree(self.local_path, ignore_errors=True)


def clone_upstream(url: str, branch: str) -> RepoHandle:
    """Clone *branch* of *url* into a fresh temporary directory.

    Raises:
        GitCommandError: If the clone fails. The temporary directory is
            removed before the error propagates.
    """
    clone_dir = Path(tempfile.mkdtemp(prefix="codexsync_"))
    try:
        Repo.clone_from(url, clone_dir, branch=branch)
    except GitCommandError:
        shutil.rmtree(clone_dir, ignore_errors=True)
        raise
    return RepoHandle(local_path=clone_dir, source_url=url, branch=branch)


def replace_tree(source: Path, destination: Path) -> None:
    """Make *destination* an exact copy of *source* (which must exist)."""
    if destination.exists():
        shutil.rmtree(destination)
    shutil.copytree(source, destination)
