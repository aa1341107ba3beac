"""Parse git diff output into a ChangeSummary.

Both parsers are strict: anything that does not look like git output raises
``MalformedDiff`` instead of being skipped.
"""

from __future__ import annotations

import re

from codexsync.errors import MalformedDiff
from codexsync.versioning.models import ChangeSummary

# Matches the summary line like: "3 files changed, 12 insertions(+), 4 deletions(-)"
_SHORTSTAT_RE = re.compile(
    r"^\s*(\d+) files? changed"
    r"(?:, (\d+) insertions?\(\+\))?"
    r"(?:, (\d+) deletions?\(-\))?\s*$"
)


def parse_shortstat(output: str) -> tuple[int, int]:
    """Parse ``git diff --shortstat`` output into (insertions, deletions).

    Empty output means no changes.
    """
    text = output.strip()
    if not text:
        return 0, 0
    match = _SHORTSTAT_RE.match(text)
    if match is None:
        raise MalformedDiff(f"Unrecognised shortstat output: {text!r}")
    return int(match.group(2) or 0), int(match.group(3) or 0)


def parse_name_status(output: str) -> tuple[set[str], set[str], set[str]]:
    """Parse ``git diff --name-status -z`` output into (added, removed, modified).

    A rename counts as removing the old path and adding the new one; a copy
    adds the new path.
    """
    added: set[str] = set()
    removed: set[str] = set()
    modified: set[str] = set()

    fields = output.split("\0")
    if fields and fields[-1] == "":
        fields.pop()

    i = 0
    while i < len(fields):
        status = fields[i]
        code = status[:1]
        if code in ("R", "C") and status[1:].isdigit():
            if i + 2 >= len(fields):
                raise MalformedDiff(f"Truncated {code} entry in name-status output")
            old, new = fields[i + 1], fields[i + 2]
            if code == "R":
                removed.add(old)
            added.add(new)
            i += 3
            continue
        if code not in ("A", "D", "M", "T") or len(status) != 1:
            raise MalformedDiff(f"Unrecognised name-status entry: {status!r}")
        if i + 1 >= len(fields):
            raise MalformedDiff(f"Missing path for {code} entry in name-status output")
        path = fields[i + 1]
        if code == "A":
            added.add(path)
        elif code == "D":
            removed.add(path)
        else:
            modified.add(path)
        i += 2

    return added, removed, modified


def build_summary(name_status: str, shortstat: str) -> ChangeSummary:
    """Combine both diff views into a ChangeSummary."""
    added, removed, modified = parse_name_status(name_status)
    insertions, deletions = parse_shortstat(shortstat)
    return ChangeSummary(
        files_added=added,
        files_removed=removed,
        files_modified=modified,
        insertions=insertions,
        deletions=deletions,
    )
