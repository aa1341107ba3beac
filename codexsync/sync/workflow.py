"""Suggest-changes workflow — propose local codex edits upstream.

The workflow is a forward-only state machine::

    INITIALIZED -> FETCHED -> PREFLIGHT_CHECKED -> CHANGES_STAGED
        CHANGES_STAGED -> NO_CHANGES_DETECTED                      (done, nothing to propose)
        CHANGES_STAGED -> BUMP_DETERMINED -> VERSION_CONFIRMED
            -> COMMITTED -> PULL_REQUEST_CREATED                   (done)
    any non-terminal state -> FAILED

All repository and terminal work goes through the collaborator and prompt
objects; this module only sequences the calls and makes the decisions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from codexsync.errors import CodexSyncError, InvalidTransition, InvalidVersionFormat, LocalBehindUpstream
from codexsync.sync.collaborators import (
    Accept,
    Override,
    Proposal,
    Retry,
    SyncCollaborator,
    VersionPrompt,
    Workspace,
)
from codexsync.versioning import classifier, codec, planner
from codexsync.versioning.comparator import compare, is_behind
from codexsync.versioning.models import BumpCategory, ChangeSummary, Ordering, SemanticVersion

logger = logging.getLogger(__name__)


class WorkflowState(Enum):
    INITIALIZED = "initialized"
    FETCHED = "fetched"
    PREFLIGHT_CHECKED = "preflight_checked"
    CHANGES_STAGED = "changes_staged"
    NO_CHANGES_DETECTED = "no_changes_detected"
    BUMP_DETERMINED = "bump_determined"
    VERSION_CONFIRMED = "version_confirmed"
    COMMITTED = "committed"
    PULL_REQUEST_CREATED = "pull_request_created"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL = {
    WorkflowState.NO_CHANGES_DETECTED,
    WorkflowState.PULL_REQUEST_CREATED,
    WorkflowState.FAILED,
}

_TRANSITIONS: dict[WorkflowState, set[WorkflowState]] = {
    WorkflowState.INITIALIZED: {WorkflowState.FETCHED},
    WorkflowState.FETCHED: {WorkflowState.PREFLIGHT_CHECKED},
    WorkflowState.PREFLIGHT_CHECKED: {WorkflowState.CHANGES_STAGED},
    WorkflowState.CHANGES_STAGED: {
        WorkflowState.NO_CHANGES_DETECTED,
        WorkflowState.BUMP_DETERMINED,
    },
    WorkflowState.BUMP_DETERMINED: {WorkflowState.VERSION_CONFIRMED},
    WorkflowState.VERSION_CONFIRMED: {WorkflowState.COMMITTED},
    WorkflowState.COMMITTED: {WorkflowState.PULL_REQUEST_CREATED},
}


@dataclass
class WorkflowResult:
    """What a workflow run did and where it stopped."""

    state: WorkflowState = WorkflowState.INITIALIZED
    history: list[WorkflowState] = field(default_factory=lambda: [WorkflowState.INITIALIZED])

    local_version: SemanticVersion | None = None
    remote_version: SemanticVersion | None = None
    baseline: str = ""

    summary: ChangeSummary | None = None
    category: BumpCategory | None = None
    reason: str = ""
    proposed_version: SemanticVersion | None = None
    confirmed_version: SemanticVersion | None = None

    commit: str = ""
    pull_request_url: str = ""

    error: CodexSyncError | None = None
    halted_at: WorkflowState | None = None
    """The state whose transition failed, when ``state`` is FAILED."""

    @property
    def succeeded(self) -> bool:
        return self.state in (
            WorkflowState.NO_CHANGES_DETECTED,
            WorkflowState.PULL_REQUEST_CREATED,
        )


class SyncWorkflow:
    """Runs one suggest-changes session from fetch to pull request.

    Use once: ``run()`` drives the machine to a terminal state and returns the
    result. Taxonomy errors raised by collaborators end the run in FAILED;
    nothing is retried.
    """

    def __init__(
        self,
        collaborator: SyncCollaborator,
        prompt: VersionPrompt,
        threshold: int = classifier.MINOR_LINE_THRESHOLD,
    ):
        self.collaborator = collaborator
        self.prompt = prompt
        self.threshold = threshold
        self.result = WorkflowResult()
        self._pending: WorkflowState | None = None
        self._local_document = ""

    @property
    def state(self) -> WorkflowState:
        return self.result.state

    def run(self) -> WorkflowResult:
        if self.state is not WorkflowState.INITIALIZED:
            raise InvalidTransition(f"Workflow already ran (state: {self.state.value})")

        try:
            self._fetch()
            self._preflight()
            workspace = self._stage()
            if self.result.summary.is_empty:
                self._advance(WorkflowState.NO_CHANGES_DETECTED)
                logger.info("No codex changes to propose")
                return self.result
            self._determine_bump()
            self._confirm_version()
            self._commit(workspace)
            self._publish(workspace)
        except InvalidTransition:
            raise
        except CodexSyncError as e:
            self._fail(e)

        return self.result

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _fetch(self) -> None:
        self._pending = WorkflowState.FETCHED
        remote = self.collaborator.fetch_remote_metadata()
        self._local_document = self.collaborator.read_local_metadata()

        self.result.remote_version = codec.parse(remote.document)
        self.result.local_version = codec.parse(self._local_document)
        self.result.baseline = remote.baseline
        self._advance(WorkflowState.FETCHED)
        logger.info(
            "Local codex %s, upstream %s (baseline %s)",
            self.result.local_version,
            self.result.remote_version,
            remote.baseline[:12],
        )

    def _preflight(self) -> None:
        self._pending = WorkflowState.PREFLIGHT_CHECKED
        local, remote = self.result.local_version, self.result.remote_version
        if is_behind(local, remote):
            raise LocalBehindUpstream(local, remote)
        self._advance(WorkflowState.PREFLIGHT_CHECKED)

    def _stage(self) -> Workspace:
        self._pending = WorkflowState.CHANGES_STAGED
        workspace = self.collaborator.stage_local_changes(self.result.baseline)
        self.result.summary = self.collaborator.diff_summary(workspace, self.result.baseline)
        self._advance(WorkflowState.CHANGES_STAGED)
        logger.info("Staged changes: %s", self.result.summary.describe())
        return workspace

    def _determine_bump(self) -> None:
        self._pending = WorkflowState.BUMP_DETERMINED
        category, reason = classifier.explain(self.result.summary, self.threshold)
        self.result.category = category
        self.result.reason = reason
        self._advance(WorkflowState.BUMP_DETERMINED)
        logger.info("Bump category %s: %s", category.value, reason)

    def _confirm_version(self) -> None:
        self._pending = WorkflowState.VERSION_CONFIRMED
        proposed = planner.propose(self.result.local_version, self.result.category)
        self.result.proposed_version = proposed

        confirmed = self._ask_for_version(proposed)
        if compare(confirmed, self.result.remote_version) is not Ordering.GREATER:
            logger.warning(
                "Confirmed version %s is not newer than upstream %s",
                confirmed,
                self.result.remote_version,
            )
        self.result.confirmed_version = confirmed
        self._advance(WorkflowState.VERSION_CONFIRMED)
        logger.info("Version confirmed: %s", confirmed)

    def _ask_for_version(self, proposed: SemanticVersion) -> SemanticVersion:
        while True:
            answer = self.prompt.confirm_version(proposed, self.result.category, self.result.reason)
            if isinstance(answer, Accept):
                return proposed
            if isinstance(answer, Override):
                try:
                    return planner.override(proposed, answer.text)
                except InvalidVersionFormat as e:
                    self.prompt.rejected(answer.text, e)
                    continue
            if isinstance(answer, Retry):
                continue
            raise TypeError(f"Unexpected prompt answer: {answer!r}")

    def _commit(self, workspace: Workspace) -> None:
        self._pending = WorkflowState.COMMITTED
        version = self.result.confirmed_version
        document = codec.serialize(self._local_document, version)
        message = (
            f"Bump codex version to {version}\n\n"
            f"{self.result.category.value.capitalize()} change: {self.result.reason}\n"
            f"{self.result.summary.describe()}\n"
        )
        self.result.commit = self.collaborator.commit(workspace, document, message)
        self._advance(WorkflowState.COMMITTED)
        logger.info("Committed %s", self.result.commit[:12])

    def _publish(self, workspace: Workspace) -> None:
        self._pending = WorkflowState.PULL_REQUEST_CREATED
        version = self.result.confirmed_version
        text = self.prompt.describe(version, self.result.summary)
        proposal = Proposal(
            version=version,
            category=self.result.category,
            title=text.title,
            body=text.body,
            commit=self.result.commit,
        )
        self.result.pull_request_url = self.collaborator.publish(workspace, proposal)
        self._advance(WorkflowState.PULL_REQUEST_CREATED)
        logger.info("Pull request created: %s", self.result.pull_request_url)

    # ------------------------------------------------------------------
    # State bookkeeping
    # ------------------------------------------------------------------

    def _advance(self, target: WorkflowState) -> None:
        if target not in _TRANSITIONS.get(self.state, set()):
            raise InvalidTransition(f"Cannot move from {self.state.value} to {target.value}")
        self.result.state = target
        self.result.history.append(target)
        self._pending = None

    def _fail(self, error: CodexSyncError) -> None:
        if self.state.is_terminal:
            raise InvalidTransition(f"Cannot fail from terminal state {self.state.value}")
        self.result.error = error
        self.result.halted_at = self._pending
        self.result.state = WorkflowState.FAILED
        self.result.history.append(WorkflowState.FAILED)
        logger.error(
            "Workflow failed at %s: %s",
            self._pending.value if self._pending else self.state.value,
            error,
        )
