"""Tests for the pure versioning components (codec, comparator, classifier, planner)."""

import itertools

import pytest

from codexsync.errors import InvalidVersionFormat, MalformedDiff, MalformedVersion, MetadataMissing
from codexsync.versioning import (
    MINOR_LINE_THRESHOLD,
    BumpCategory,
    ChangeSummary,
    Ordering,
    SemanticVersion,
    classify,
    compare,
    explain,
    is_behind,
    override,
    parse,
    parse_version,
    propose,
    serialize,
)

DOCUMENT = """\
# Project Codex

Codex Version: 1.2.3
Maintainer: platform team
"""


# --- SemanticVersion ---


def test_version_str():
    assert str(SemanticVersion(1, 2, 3)) == "1.2.3"
    assert str(SemanticVersion(0, 0, 0)) == "0.0.0"


def test_version_is_immutable():
    v = SemanticVersion(1, 2, 3)
    with pytest.raises(AttributeError):
        v.major = 2


def test_version_rejects_negative_components():
    with pytest.raises(MalformedVersion):
        SemanticVersion(1, -1, 0)


def test_version_rejects_non_integers():
    with pytest.raises(MalformedVersion):
        SemanticVersion(1, "2", 0)
    with pytest.raises(MalformedVersion):
        SemanticVersion(True, 0, 0)


# --- Codec ---


def test_parse_document():
    assert parse(DOCUMENT) == SemanticVersion(1, 2, 3)


def test_parse_tolerates_trailing_space_and_crlf():
    doc = "Title\r\nCodex Version: 4.5.6  \r\nMore\r\n"
    assert parse(doc) == SemanticVersion(4, 5, 6)


def test_parse_accepts_leading_zeros():
    assert parse("Codex Version: 01.002.3\n") == SemanticVersion(1, 2, 3)


def test_parse_first_marker_wins():
    doc = "Codex Version: 1.0.0\nCodex Version: 2.0.0\n"
    assert parse(doc) == SemanticVersion(1, 0, 0)


def test_parse_missing_marker():
    with pytest.raises(MetadataMissing):
        parse("# Codex\nVersion: 1.2.3\n")


def test_parse_marker_must_start_the_line():
    with pytest.raises(MetadataMissing):
        parse("The Codex Version: 1.2.3\n")


@pytest.mark.parametrize("value", ["", "1.2", "1.2.x", "v1.2.3", "1.2.3.4", "-1.2.3", "1. 2.3"])
def test_parse_malformed_value(value):
    with pytest.raises(MalformedVersion):
        parse(f"Codex Version: {value}\n")


def test_parse_version_rejects_unicode_digits():
    with pytest.raises(MalformedVersion):
        parse_version("١.٢.٣")


def test_serialize_replaces_only_the_value():
    out = serialize(DOCUMENT, SemanticVersion(1, 3, 0))
    assert out == DOCUMENT.replace("1.2.3", "1.3.0")


def test_serialize_preserves_crlf_and_trailing_whitespace():
    doc = "Title\r\nCodex Version: 4.5.6  \r\nMore\r\n"
    out = serialize(doc, SemanticVersion(4, 6, 0))
    assert out == "Title\r\nCodex Version: 4.6.0  \r\nMore\r\n"


def test_serialize_fills_empty_value():
    out = serialize("Codex Version:\nrest\n", SemanticVersion(0, 1, 0))
    assert out == "Codex Version:0.1.0\nrest\n"
    assert parse(out) == SemanticVersion(0, 1, 0)


def test_serialize_missing_marker():
    with pytest.raises(MetadataMissing):
        serialize("no marker here\n", SemanticVersion(1, 0, 0))


@pytest.mark.parametrize("text", ["0.0.0", "1.2.3", "10.0.1", "3.14.159", "007.1.2"])
def test_serialize_then_parse_round_trips(text):
    version = parse_version(text)
    assert parse(serialize(DOCUMENT, version)) == version


# --- Comparator ---

_GRID = [SemanticVersion(*t) for t in itertools.product(range(3), repeat=3)]


def test_compare_priority_order():
    assert compare(SemanticVersion(2, 0, 0), SemanticVersion(1, 9, 9)) is Ordering.GREATER
    assert compare(SemanticVersion(1, 2, 0), SemanticVersion(1, 10, 0)) is Ordering.LESS
    assert compare(SemanticVersion(1, 2, 3), SemanticVersion(1, 2, 4)) is Ordering.LESS
    assert compare(SemanticVersion(1, 2, 3), SemanticVersion(1, 2, 3)) is Ordering.EQUAL


def test_compare_is_antisymmetric_and_reflexive():
    flipped = {Ordering.LESS: Ordering.GREATER, Ordering.GREATER: Ordering.LESS, Ordering.EQUAL: Ordering.EQUAL}
    for a, b in itertools.product(_GRID, repeat=2):
        result = compare(a, b)
        assert compare(b, a) is flipped[result]
        assert (result is Ordering.EQUAL) == (a == b)


def test_compare_is_transitive():
    for a, b, c in itertools.product(_GRID, repeat=3):
        if compare(a, b) is Ordering.GREATER and compare(b, c) is Ordering.GREATER:
            assert compare(a, c) is Ordering.GREATER


def test_is_behind():
    assert is_behind(SemanticVersion(1, 0, 0), SemanticVersion(1, 1, 0))
    assert not is_behind(SemanticVersion(1, 1, 0), SemanticVersion(1, 1, 0))
    assert not is_behind(SemanticVersion(1, 2, 0), SemanticVersion(1, 1, 0))


# --- ChangeSummary ---


def test_summary_is_empty():
    assert ChangeSummary().is_empty
    assert not ChangeSummary(files_modified={"codex/a.md"}).is_empty
    assert not ChangeSummary(insertions=1).is_empty


def test_summary_rejects_negative_counts():
    with pytest.raises(MalformedDiff):
        ChangeSummary(insertions=-1)


def test_summary_stores_frozensets():
    summary = ChangeSummary(files_added=["codex/a.md", "codex/a.md"])
    assert summary.files_added == frozenset({"codex/a.md"})


def test_summary_describe():
    summary = ChangeSummary(files_added={"a"}, files_modified={"b"}, insertions=3, deletions=1)
    assert summary.describe() == "2 file(s) changed, 1 added, 3 insertions(+), 1 deletions(-)"


# --- Classifier ---


def test_classify_added_file_is_minor():
    assert classify(ChangeSummary(files_added={"codex/new.md"}, insertions=1)) is BumpCategory.MINOR


def test_classify_removed_file_is_minor_regardless_of_lines():
    summary = ChangeSummary(files_removed={"codex/old.md"})
    assert classify(summary) is BumpCategory.MINOR


def test_classify_small_edit_is_patch():
    summary = ChangeSummary(files_modified={"codex/a.md"}, insertions=8, deletions=1)
    assert classify(summary) is BumpCategory.PATCH


def test_classify_large_edit_is_minor():
    summary = ChangeSummary(files_modified={"codex/a.md"}, insertions=7, deletions=5)
    assert classify(summary) is BumpCategory.MINOR


def test_classify_threshold_is_exclusive():
    at = ChangeSummary(files_modified={"a"}, insertions=MINOR_LINE_THRESHOLD)
    over = ChangeSummary(files_modified={"a"}, insertions=MINOR_LINE_THRESHOLD + 1)
    assert classify(at) is BumpCategory.PATCH
    assert classify(over) is BumpCategory.MINOR


def test_classify_zero_delta_defaults_to_patch():
    assert classify(ChangeSummary(files_modified={"codex/a.md"})) is BumpCategory.PATCH
    assert classify(ChangeSummary()) is BumpCategory.PATCH


def test_classify_custom_threshold():
    summary = ChangeSummary(files_modified={"a"}, insertions=4)
    assert classify(summary, threshold=3) is BumpCategory.MINOR


def test_explain_gives_reason():
    category, reason = explain(ChangeSummary(files_modified={"a"}, insertions=7, deletions=5))
    assert category is BumpCategory.MINOR
    assert "12 lines" in reason


def test_bump_category_severity():
    assert BumpCategory.MINOR.severity > BumpCategory.PATCH.severity


# --- Planner ---


def test_propose_minor():
    assert propose(SemanticVersion(1, 2, 3), BumpCategory.MINOR) == SemanticVersion(1, 3, 0)


def test_propose_patch():
    assert propose(SemanticVersion(1, 2, 3), BumpCategory.PATCH) == SemanticVersion(1, 2, 4)


def test_propose_never_touches_major():
    for category in BumpCategory:
        assert propose(SemanticVersion(4, 9, 9), category).major == 4


@pytest.mark.parametrize("text", ["1.2", "1.2.x", "", "  ", "latest"])
def test_override_rejects_malformed(text):
    with pytest.raises(InvalidVersionFormat):
        override(SemanticVersion(1, 3, 0), text)


def test_override_accepts_valid():
    assert override(SemanticVersion(1, 3, 0), "2.0.0") == SemanticVersion(2, 0, 0)
    assert override(SemanticVersion(1, 3, 0), " 1.4.0\n") == SemanticVersion(1, 4, 0)


def test_invalid_version_format_is_value_error():
    with pytest.raises(ValueError):
        override(SemanticVersion(1, 0, 0), "nope")


def test_override_normalizes_leading_zeros_like_metadata():
    assert override(SemanticVersion(1, 3, 0), "007.1.2") == SemanticVersion(7, 1, 2)
    assert override(SemanticVersion(1, 3, 0), "007.1.2") == parse("Codex Version: 007.1.2\n")
