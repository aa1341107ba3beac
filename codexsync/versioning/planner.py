"""Version planner — compute the proposed next version."""

from __future__ import annotations

from codexsync.errors import InvalidVersionFormat, MalformedVersion
from codexsync.versioning.codec import parse_version
from codexsync.versioning.models import BumpCategory, SemanticVersion


def propose(current: SemanticVersion, category: BumpCategory) -> SemanticVersion:
    """Bump *current* by *category*. The major component is never touched."""
    if category is BumpCategory.MINOR:
        return SemanticVersion(current.major, current.minor + 1, 0)
    return SemanticVersion(current.major, current.minor, current.patch + 1)


def override(proposed: SemanticVersion, user_supplied: str) -> SemanticVersion:
    """Validate a version typed by the operator in place of *proposed*.

    Malformed input is rejected, never corrected. Well-formed input is
    normalized the same way metadata versions are: surrounding whitespace is
    dropped and leading zeros are read as plain integers (``"007.1.2"`` is
    ``7.1.2``).

    Raises:
        InvalidVersionFormat: If *user_supplied* is not ``X.Y.Z``.
    """
    text = user_supplied.strip()
    try:
        return parse_version(text)
    except MalformedVersion as e:
        raise InvalidVersionFormat(
            f"{user_supplied!r} is not a valid version (proposed was {proposed})"
        ) from e
