"""Read and rewrite the ``Codex Version:`` line of a metadata document.

The metadata document is otherwise opaque: ``serialize`` swaps the version
value in place and leaves every other byte (line endings included) alone.
"""

from __future__ import annotations

import re

from codexsync.errors import MalformedVersion, MetadataMissing
from codexsync.versioning.models import SemanticVersion

MARKER = "Codex Version:"

# The value stops before trailing blanks and an optional ``\r`` so CRLF files
# survive a rewrite untouched.
_MARKER_RE = re.compile(
    r"^(?P<prefix>Codex Version:[ \t]*)(?P<value>[^\r\n]*?)(?P<trail>[ \t]*)(?=\r?$)",
    re.MULTILINE,
)

_VERSION_RE = re.compile(r"([0-9]+)\.([0-9]+)\.([0-9]+)")


def parse_version(text: str) -> SemanticVersion:
    """Parse a bare ``X.Y.Z`` string.

    Raises:
        MalformedVersion: If *text* is empty or not three dot-separated
            non-negative integers.
    """
    match = _VERSION_RE.fullmatch(text)
    if match is None:
        if not text:
            raise MalformedVersion("Version value is empty")
        raise MalformedVersion(f"Not a valid X.Y.Z version: {text!r}")
    major, minor, patch = (int(g) for g in match.groups())
    return SemanticVersion(major, minor, patch)


def _find_marker(document: str) -> re.Match:
    match = _MARKER_RE.search(document)
    if match is None:
        raise MetadataMissing(f"No '{MARKER} X.Y.Z' line found in metadata document")
    return match


def parse(document: str) -> SemanticVersion:
    """Extract the codex version from a metadata document.

    The first marker line wins if the document carries several.

    Raises:
        MetadataMissing: The document has no marker line.
        MalformedVersion: The marker's value is empty or not ``X.Y.Z``.
    """
    return parse_version(_find_marker(document).group("value"))


def serialize(document: str, version: SemanticVersion) -> str:
    """Return *document* with the marker line's value replaced by *version*.

    Raises:
        MetadataMissing: The document has no marker line to rewrite.
    """
    match = _find_marker(document)
    start, end = match.span("value")
    return document[:start] + str(version) + document[end:]
