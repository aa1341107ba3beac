"""Interactive prompts for the suggest-changes workflow, rendered with rich."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt

from codexsync.sync.collaborators import Accept, Override, PromptAnswer, ProposalText, Retry
from codexsync.versioning.models import BumpCategory, ChangeSummary, SemanticVersion


class ConsoleVersionPrompt:
    """Asks the operator to confirm the proposed version and describe the change.

    An empty answer (or the proposed version itself) accepts the proposal;
    ``?`` shows the proposal again; anything else is treated as an override.
    """

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def confirm_version(
        self,
        proposed: SemanticVersion,
        category: BumpCategory,
        reason: str,
    ) -> PromptAnswer:
        self.console.print(
            Panel(
                f"Change type: [bold]{category.value}[/]\n{reason}\n\n"
                f"Proposed version: [bold green]{proposed}[/]",
                title="Version bump",
            )
        )
        answer = Prompt.ask(
            "Press Enter to accept, or type a version",
            default="",
            show_default=False,
            console=self.console,
        ).strip()

        if answer in ("", str(proposed)):
            return Accept()
        if answer == "?":
            return Retry()
        return Override(answer)

    def rejected(self, text: str, error: Exception) -> None:
        self.console.print(f"  [red]x[/] {escape(str(error))}")
        hint = getattr(error, "hint", "")
        if hint:
            self.console.print(f"    {escape(hint)}")

    def describe(self, version: SemanticVersion, summary: ChangeSummary) -> ProposalText:
        title = Prompt.ask(
            "Pull request title",
            default=f"Codex {version}",
            console=self.console,
        )
        self.console.print("Describe your changes (finish with an empty line):")
        lines = []
        while True:
            line = self.console.input("> ")
            if not line.strip():
                break
            lines.append(line)

        body = "\n".join(lines)
        footer = f"Codex version: {version}\n{summary.describe()}"
        body = f"{body}\n\n{footer}" if body else footer
        return ProposalText(title=title, body=body)
