"""Value types shared by the versioning components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from codexsync.errors import MalformedDiff, MalformedVersion


class BumpCategory(Enum):
    """Semantic-versioning increment class selected for a set of changes.

    There is no MAJOR member; nothing in codexsync produces a major bump.
    """

    MINOR = "minor"
    PATCH = "patch"

    @property
    def severity(self) -> int:
        return 2 if self is BumpCategory.MINOR else 1


class Ordering(Enum):
    """Result of comparing two versions."""

    LESS = -1
    EQUAL = 0
    GREATER = 1


@dataclass(frozen=True)
class SemanticVersion:
    """An immutable ``major.minor.patch`` triple."""

    major: int
    minor: int
    patch: int

    def __post_init__(self):
        for name in ("major", "minor", "patch"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise MalformedVersion(f"{name} must be a non-negative integer, got {value!r}")

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True)
class ChangeSummary:
    """File- and line-level shape of the changes being proposed.

    Built once per workflow run from the diff between the upstream baseline
    and the staged workspace, scoped to the codex directory.
    """

    files_added: frozenset[str] = field(default_factory=frozenset)
    files_removed: frozenset[str] = field(default_factory=frozenset)
    files_modified: frozenset[str] = field(default_factory=frozenset)
    insertions: int = 0
    deletions: int = 0

    def __post_init__(self):
        # Accept any iterable of paths but store frozensets.
        for name in ("files_added", "files_removed", "files_modified"):
            object.__setattr__(self, name, frozenset(getattr(self, name)))
        for name in ("insertions", "deletions"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise MalformedDiff(f"{name} must be a non-negative integer, got {value!r}")

    @property
    def is_empty(self) -> bool:
        return not (
            self.files_added
            or self.files_removed
            or self.files_modified
            or self.insertions
            or self.deletions
        )

    @property
    def total_churn(self) -> int:
        return self.insertions + self.deletions

    @property
    def files_changed(self) -> int:
        return len(self.files_added) + len(self.files_removed) + len(self.files_modified)

    def describe(self) -> str:
        """One-line human summary, git ``--shortstat`` style."""
        parts = [f"{self.files_changed} file(s) changed"]
        if self.files_added:
            parts.append(f"{len(self.files_added)} added")
        if self.files_removed:
            parts.append(f"{len(self.files_removed)} removed")
        parts.append(f"{self.insertions} insertions(+)")
        parts.append(f"{self.deletions} deletions(-)")
        return ", ".join(parts)
