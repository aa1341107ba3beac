"""Contracts between the sync workflow and the outside world.

The workflow never touches git, the filesystem or the terminal directly. It
calls a ``SyncCollaborator`` for repository work and a ``VersionPrompt`` for
operator interaction, so both can be swapped for scripted fakes in tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Union

from codexsync.versioning.models import BumpCategory, ChangeSummary, SemanticVersion


@dataclass(frozen=True)
class RemoteMetadata:
    """The upstream metadata document plus the commit it was read from."""

    document: str
    baseline: str
    """Identifier of the upstream state local changes are diffed against."""


@dataclass
class Workspace:
    """An isolated working copy holding the staged proposal."""

    path: Path
    branch: str = ""


@dataclass(frozen=True)
class ProposalText:
    """Title and body of the pull request."""

    title: str
    body: str = ""


@dataclass(frozen=True)
class Proposal:
    """Everything the publisher needs to open a pull request."""

    version: SemanticVersion
    category: BumpCategory
    title: str
    body: str
    commit: str = ""


# --- Prompt answers ---


@dataclass(frozen=True)
class Accept:
    """Take the proposed version as-is."""


@dataclass(frozen=True)
class Override:
    """Use the operator's own version text instead of the proposal."""

    text: str


@dataclass(frozen=True)
class Retry:
    """Ask again (e.g. the operator gave an answer the prompt did not understand)."""


PromptAnswer = Union[Accept, Override, Retry]


class SyncCollaborator(Protocol):
    def fetch_remote_metadata(self) -> RemoteMetadata:
        """Raises RemoteUnavailable."""
        ...

    def read_local_metadata(self) -> str:
        """Raises LocalMetadataMissing."""
        ...

    def stage_local_changes(self, baseline: str) -> Workspace:
        """Raises StagingFailed."""
        ...

    def diff_summary(self, workspace: Workspace, baseline: str) -> ChangeSummary:
        ...

    def commit(self, workspace: Workspace, metadata_document: str, message: str) -> str:
        """Commit staged content plus the rewritten metadata; returns the commit id.

        Raises CommitFailed.
        """
        ...

    def publish(self, workspace: Workspace, proposal: Proposal) -> str:
        """Push and open a pull request; returns its URL. Raises PublishFailed."""
        ...


class VersionPrompt(Protocol):
    def confirm_version(
        self,
        proposed: SemanticVersion,
        category: BumpCategory,
        reason: str,
    ) -> PromptAnswer:
        ...

    def rejected(self, text: str, error: Exception) -> None:
        """Tell the operator an override was not accepted before asking again."""
        ...

    def describe(self, version: SemanticVersion, summary: ChangeSummary) -> ProposalText:
        ...
