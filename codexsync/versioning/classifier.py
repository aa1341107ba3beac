"""Change classifier — pick a bump category for a set of codex changes.

File-shape changes (adds, removes) always count as MINOR. Pure content edits
are ranked by line churn against a fixed threshold.
"""

from __future__ import annotations

from codexsync.versioning.models import BumpCategory, ChangeSummary

# More than this many inserted + deleted lines makes a content-only edit MINOR.
MINOR_LINE_THRESHOLD = 10


def explain(
    summary: ChangeSummary,
    threshold: int = MINOR_LINE_THRESHOLD,
) -> tuple[BumpCategory, str]:
    """Classify *summary* and say why.

    Returns:
        (category, reason) tuple.
    """
    if summary.files_added or summary.files_removed:
        return BumpCategory.MINOR, (
            f"Files added or removed ({len(summary.files_added)} added, "
            f"{len(summary.files_removed)} removed)"
        )

    if summary.total_churn == 0:
        return BumpCategory.PATCH, "Content changed with no net line delta"

    if summary.total_churn > threshold:
        return BumpCategory.MINOR, (
            f"{summary.total_churn} lines changed "
            f"({summary.insertions}+ / {summary.deletions}-), more than {threshold}"
        )

    return BumpCategory.PATCH, (
        f"{summary.total_churn} lines changed "
        f"({summary.insertions}+ / {summary.deletions}-), at most {threshold}"
    )


def classify(summary: ChangeSummary, threshold: int = MINOR_LINE_THRESHOLD) -> BumpCategory:
    """Return the bump category for *summary*."""
    category, _ = explain(summary, threshold)
    return category
