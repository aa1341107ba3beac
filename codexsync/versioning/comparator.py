"""Total ordering of semantic versions."""

from __future__ import annotations

from codexsync.versioning.models import Ordering, SemanticVersion


def compare(a: SemanticVersion, b: SemanticVersion) -> Ordering:
    """Compare *a* to *b* over (major, minor, patch), in that priority."""
    left, right = a.as_tuple(), b.as_tuple()
    if left == right:
        return Ordering.EQUAL
    return Ordering.GREATER if left > right else Ordering.LESS


def is_behind(local: SemanticVersion, remote: SemanticVersion) -> bool:
    return compare(local, remote) is Ordering.LESS
