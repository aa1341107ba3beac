"""Git-backed sync collaborator.

Clones the upstream template into a temporary workspace, stages the
project's codex on a proposal branch, diffs and commits with GitPython, and
publishes through the GitHub CLI (``gh``).

The collaborator owns every temporary clone it creates. Use it as a context
manager so they are removed however the workflow ends::

    with GitCollaborator(config, project_root) as collaborator:
        SyncWorkflow(collaborator, prompt).run()
"""

from __future__ import annotations

import logging
import re
import subprocess
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from git import GitCommandError, Repo

from codexsync.config import SyncConfig
from codexsync.errors import (
    CommitFailed,
    LocalMetadataMissing,
    PublishFailed,
    RemoteUnavailable,
    StagingFailed,
)
from codexsync.sync.collaborators import Proposal, RemoteMetadata, Workspace
from codexsync.sync.diffstat import build_summary
from codexsync.utils.git_ops import RepoHandle, clone_upstream, replace_tree
from codexsync.utils.text_io import read_text, write_text
from codexsync.versioning import codec
from codexsync.versioning.models import ChangeSummary

logger = logging.getLogger(__name__)

CommandRunner = Callable[[list[str], Path], subprocess.CompletedProcess]

_GITHUB_SLUG_RE = re.compile(r"github\.com[:/](?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?/?$")

FORK_REMOTE = "fork"


def run_command(args: list[str], cwd: Path) -> subprocess.CompletedProcess:
    return subprocess.run(args, cwd=cwd, capture_output=True, text=True, check=False)


def github_slug(url: str) -> str:
    """Return ``owner/repo`` for a GitHub URL, or empty string."""
    match = _GITHUB_SLUG_RE.search(url)
    if match is None:
        return ""
    return f"{match.group('owner')}/{match.group('repo')}"


def _git_error(e: GitCommandError) -> str:
    return (e.stderr or "").strip() or str(e)


class GitCollaborator:
    """Implements the SyncCollaborator contract with git and ``gh``."""

    def __init__(
        self,
        config: SyncConfig,
        project_root: str | Path = ".",
        runner: CommandRunner = run_command,
    ):
        self.config = config
        self.project_root = Path(project_root)
        self._run = runner
        self._clone: RepoHandle | None = None
        self._remote_document = ""

    def __enter__(self) -> "GitCollaborator":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        """Remove the temporary upstream clone, if one was made."""
        if self._clone is not None:
            logger.debug("Removing workspace %s", self._clone.local_path)
            self._clone.cleanup()
            self._clone = None

    # ------------------------------------------------------------------
    # SyncCollaborator
    # ------------------------------------------------------------------

    def fetch_remote_metadata(self) -> RemoteMetadata:
        url = self.config.require_upstream()
        self.close()
        try:
            self._clone = clone_upstream(url, self.config.branch)
        except GitCommandError as e:
            raise RemoteUnavailable(f"Could not clone {url} ({self.config.branch}): {_git_error(e)}") from e
        logger.debug("Cloned %s into %s", url, self._clone.local_path)

        path = self._clone.local_path / self.config.metadata_path
        if not path.is_file():
            raise RemoteUnavailable(f"Upstream has no {self.config.metadata_path}")
        try:
            self._remote_document = read_text(path)
        except (OSError, UnicodeDecodeError) as e:
            raise RemoteUnavailable(f"Could not read upstream {self.config.metadata_path}: {e}") from e
        return RemoteMetadata(document=self._remote_document, baseline=self._clone.head_commit())

    def read_local_metadata(self) -> str:
        path = self.project_root / self.config.metadata_path
        if not path.is_file():
            raise LocalMetadataMissing(f"{path} not found")
        try:
            return read_text(path)
        except (OSError, UnicodeDecodeError) as e:
            raise LocalMetadataMissing(f"Could not read {path}: {e}") from e

    def stage_local_changes(self, baseline: str) -> Workspace:
        if self._clone is None:
            raise StagingFailed("No upstream workspace; fetch the remote metadata first")
        local_codex = self.project_root / self.config.codex_dir
        if not local_codex.is_dir():
            raise StagingFailed(f"{local_codex} is not a directory")

        stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
        branch = f"{self.config.branch_prefix}-{stamp}"
        repo = self._clone.repo
        try:
            repo.git.checkout("-b", branch, baseline)
            replace_tree(local_codex, self._clone.local_path / self.config.codex_dir)
            self._normalize_metadata()
            repo.git.add("--all", "--", self.config.codex_dir)
        except GitCommandError as e:
            raise StagingFailed(f"Could not stage codex changes: {_git_error(e)}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise StagingFailed(f"Could not copy codex into workspace: {e}") from e

        return Workspace(path=self._clone.local_path, branch=branch)

    def diff_summary(self, workspace: Workspace, baseline: str) -> ChangeSummary:
        repo = Repo(workspace.path)
        scope = self.config.codex_dir
        try:
            names = repo.git.diff("--cached", "--name-status", "-z", baseline, "--", scope)
            stat = repo.git.diff("--cached", "--shortstat", baseline, "--", scope)
        except GitCommandError as e:
            raise StagingFailed(f"Could not diff staged changes: {_git_error(e)}") from e
        return build_summary(names, stat)

    def commit(self, workspace: Workspace, metadata_document: str, message: str) -> str:
        repo = Repo(workspace.path)
        try:
            write_text(workspace.path / self.config.metadata_path, metadata_document)
            repo.git.add("--", self.config.metadata_path)
            repo.git.commit("-m", message)
        except GitCommandError as e:
            raise CommitFailed(_git_error(e)) from e
        except OSError as e:
            raise CommitFailed(f"Could not write metadata document: {e}") from e
        return repo.head.commit.hexsha

    def publish(self, workspace: Workspace, proposal: Proposal) -> str:
        repo = Repo(workspace.path)
        slug = github_slug(self.config.upstream)
        if not slug:
            raise PublishFailed(f"Upstream {self.config.upstream} is not a GitHub repository")

        self._gh(["repo", "fork", "--remote", "--remote-name", FORK_REMOTE], workspace.path)
        login = self._gh(["api", "user", "--jq", ".login"], workspace.path)

        try:
            repo.git.push("--set-upstream", FORK_REMOTE, workspace.branch)
        except GitCommandError as e:
            raise PublishFailed(_git_error(e)) from e

        output = self._gh(
            [
                "pr", "create",
                "--repo", slug,
                "--base", self.config.branch,
                "--head", f"{login}:{workspace.branch}",
                "--title", proposal.title,
                "--body", proposal.body,
            ],
            workspace.path,
        )
        lines = output.splitlines()
        return lines[-1] if lines else ""

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _normalize_metadata(self) -> None:
        """Pin the staged metadata document to the upstream version so the diff covers content only."""
        path = self._clone.local_path / self.config.metadata_path
        if not path.is_file():
            return
        staged = read_text(path)
        write_text(path, codec.serialize(staged, codec.parse(self._remote_document)))

    def _gh(self, args: list[str], cwd: Path) -> str:
        try:
            completed = self._run(["gh", *args], cwd)
        except FileNotFoundError as e:
            raise PublishFailed("The GitHub CLI ('gh') is not installed") from e
        if completed.returncode != 0:
            raise PublishFailed((completed.stderr or completed.stdout or "").strip())
        return (completed.stdout or "").strip()
