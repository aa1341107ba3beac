"""Tests for the console prompt adapter."""

import io

from rich.console import Console

from codexsync import prompts
from codexsync.errors import InvalidVersionFormat
from codexsync.prompts import ConsoleVersionPrompt
from codexsync.sync.collaborators import Accept, Override, Retry
from codexsync.versioning import BumpCategory, ChangeSummary, SemanticVersion

PROPOSED = SemanticVersion(1, 3, 0)


def _prompt(monkeypatch, *answers):
    replies = list(answers)
    monkeypatch.setattr(prompts.Prompt, "ask", classmethod(lambda cls, *a, **kw: replies.pop(0)))
    console = Console(file=io.StringIO(), width=100)
    return ConsoleVersionPrompt(console), console


def test_empty_answer_accepts(monkeypatch):
    prompt, _ = _prompt(monkeypatch, "")
    assert prompt.confirm_version(PROPOSED, BumpCategory.MINOR, "new file") == Accept()


def test_typing_the_proposal_accepts(monkeypatch):
    prompt, _ = _prompt(monkeypatch, "1.3.0")
    assert prompt.confirm_version(PROPOSED, BumpCategory.MINOR, "new file") == Accept()


def test_question_mark_retries(monkeypatch):
    prompt, _ = _prompt(monkeypatch, "?")
    assert prompt.confirm_version(PROPOSED, BumpCategory.MINOR, "new file") == Retry()


def test_other_text_overrides(monkeypatch):
    prompt, _ = _prompt(monkeypatch, " 2.0.0 ")
    assert prompt.confirm_version(PROPOSED, BumpCategory.MINOR, "new file") == Override("2.0.0")


def test_rejected_shows_hint(monkeypatch):
    prompt, console = _prompt(monkeypatch)
    prompt.rejected("1.2", InvalidVersionFormat("'1.2' is not a valid version"))
    output = console.file.getvalue()
    assert "not a valid version" in output
    assert "e.g. 1.4.0" in output


def test_describe_collects_body(monkeypatch):
    prompt, console = _prompt(monkeypatch, "Codex 1.3.0")
    lines = iter(["Adds onboarding notes", "and fixes typos", ""])
    monkeypatch.setattr(console, "input", lambda *a, **kw: next(lines))

    text = prompt.describe(PROPOSED, ChangeSummary(files_added={"codex/a.md"}, insertions=2))

    assert text.title == "Codex 1.3.0"
    assert text.body.startswith("Adds onboarding notes\nand fixes typos\n\nCodex version: 1.3.0")
