"""Shared fixtures: throwaway upstream template repos and project directories."""

import shutil
from pathlib import Path

import pytest
from git import Repo

GUIDE = "".join(f"Guideline {i}\n" for i in range(1, 6))


def write_metadata(codex_dir: Path, version: str) -> None:
    (codex_dir / "CODEX.md").write_text(
        f"# Codex\n\nCodex Version: {version}\nMaintainers: platform\n"
    )


@pytest.fixture
def git_identity(monkeypatch):
    for prefix in ("GIT_AUTHOR", "GIT_COMMITTER"):
        monkeypatch.setenv(f"{prefix}_NAME", "Codex Tester")
        monkeypatch.setenv(f"{prefix}_EMAIL", "tester@example.com")
    for var in ("CODEXSYNC_UPSTREAM", "CODEXSYNC_BRANCH", "CODEXSYNC_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def upstream_repo(tmp_path, git_identity) -> Path:
    """A template repository on branch ``main`` with codex version 1.2.0."""
    path = tmp_path / "upstream"
    codex = path / "codex"
    codex.mkdir(parents=True)
    write_metadata(codex, "1.2.0")
    (codex / "guide.md").write_text(GUIDE)
    (path / "README.md").write_text("Template repository\n")

    repo = Repo.init(path)
    repo.git.add("--all")
    repo.git.commit("-m", "Initial codex")
    repo.git.branch("-M", "main")
    return path


@pytest.fixture
def project(tmp_path, upstream_repo) -> Path:
    """A project directory holding a copy of the upstream codex."""
    path = tmp_path / "project"
    path.mkdir()
    shutil.copytree(upstream_repo / "codex", path / "codex")
    return path
