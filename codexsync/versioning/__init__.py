"""Version reconciliation — the pure decision logic behind codex syncing.

This package provides:
- SemanticVersion / ChangeSummary / BumpCategory value types
- VersionCodec: read and rewrite the ``Codex Version:`` line of a metadata document
- SemverComparator: total ordering of versions
- ChangeClassifier: map a diff summary to a bump category
- VersionPlanner: compute the next version and validate operator overrides

Nothing in here performs I/O or logs.
"""

from codexsync.versioning.classifier import MINOR_LINE_THRESHOLD, classify, explain
from codexsync.versioning.codec import parse, parse_version, serialize
from codexsync.versioning.comparator import compare, is_behind
from codexsync.versioning.models import BumpCategory, ChangeSummary, Ordering, SemanticVersion
from codexsync.versioning.planner import override, propose

__all__ = [
    "BumpCategory",
    "ChangeSummary",
    "MINOR_LINE_THRESHOLD",
    "Ordering",
    "SemanticVersion",
    "classify",
    "compare",
    "explain",
    "is_behind",
    "override",
    "parse",
    "parse_version",
    "propose",
    "serialize",
]
