"""Error taxonomy for codexsync.

Every fatal condition the sync workflow can hit has its own exception type so
callers (and tests) can match on the kind of failure rather than on message
text. The CLI prints ``str(error)`` followed by ``error.hint`` when one is set.
"""

from __future__ import annotations


class CodexSyncError(Exception):
    """Base class for all codexsync errors."""

    hint: str = ""

    def __init__(self, message: str = "", hint: str = ""):
        super().__init__(message)
        if hint:
            self.hint = hint


# --- Version / metadata errors ---


class MetadataMissing(CodexSyncError):
    """The metadata document has no ``Codex Version:`` line."""


class MalformedVersion(CodexSyncError, ValueError):
    """A version value in a metadata document is not ``X.Y.Z``."""


class InvalidVersionFormat(CodexSyncError, ValueError):
    """A version typed by the operator is not ``X.Y.Z``."""

    hint = "Versions are three dot-separated non-negative integers, e.g. 1.4.0."


class MalformedDiff(CodexSyncError):
    """Diff output (or a change summary built from it) could not be trusted."""


# --- Workflow errors ---


class RemoteUnavailable(CodexSyncError):
    """The upstream template or its metadata document could not be fetched."""

    hint = "Check the 'upstream' setting in .codexsync.yaml and your network access."


class LocalMetadataMissing(CodexSyncError):
    """The project has no codex metadata document."""

    hint = "Run 'codexsync init' to install the codex first."


class LocalBehindUpstream(CodexSyncError):
    """The local codex is older than upstream; proposing from it would regress."""

    hint = "Run 'codexsync update' first, re-apply your edits, then suggest changes again."

    def __init__(self, local, remote):
        super().__init__(f"Local codex version {local} is behind upstream version {remote}.")
        self.local = local
        self.remote = remote


class StagingFailed(CodexSyncError):
    """Local codex content could not be staged into the proposal workspace."""


class CommitFailed(CodexSyncError):
    """The proposal commit could not be created."""


class PublishFailed(CodexSyncError):
    """Pushing the proposal branch or opening the pull request failed."""

    hint = "Make sure the GitHub CLI ('gh') is installed and authenticated."


# --- Setup errors ---


class ConfigError(CodexSyncError):
    """The configuration file is missing required values or is malformed."""


class UpdateFailed(CodexSyncError):
    """The codex could not be installed or replaced; the previous codex is kept."""


class CodexExists(CodexSyncError):
    """``init`` was asked to install a codex where one already exists."""

    hint = "Use 'codexsync update' to refresh an existing codex."


class InvalidTransition(CodexSyncError):
    """The workflow state machine was driven out of order."""
