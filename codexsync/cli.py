"""codexsync CLI — the main entry point."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from codexsync.errors import CodexSyncError

console = Console()

HELP_TOPICS = {
    "init": (
        "Install the codex from the upstream template into this project.\n\n"
        "Clones the upstream repository, copies its codex directory here and\n"
        "writes .codexsync.yaml if the project has none yet. Set the upstream\n"
        "with the CODEXSYNC_UPSTREAM environment variable for the first run.\n"
        "Fails if the codex directory already exists."
    ),
    "update": (
        "Refresh this project's codex from upstream.\n\n"
        "Compares the 'Codex Version:' line of both metadata documents. When\n"
        "upstream is newer the current codex is moved to the backup directory\n"
        "and replaced. Equal versions are left alone; a newer local version is\n"
        "reported so it can be proposed with suggest-changes."
    ),
    "suggest-changes": (
        "Propose this project's codex edits to the upstream template.\n\n"
        "Steps: fetch upstream, refuse if the local codex is behind, stage the\n"
        "local codex on a fresh branch, classify the diff, confirm the new\n"
        "version, commit, push to your fork and open a pull request. Nothing\n"
        "is committed when there are no changes."
    ),
    "versioning": (
        "How the version bump is chosen.\n\n"
        "  - Files added or removed in the codex: MINOR (x.Y+1.0)\n"
        "  - More than minor_line_threshold (default 10) lines changed: MINOR\n"
        "  - Otherwise: PATCH (x.y.Z+1)\n\n"
        "The proposal starts from the local version. You may type another\n"
        "X.Y.Z version instead; malformed input is rejected and asked again."
    ),
}


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _fail(error: CodexSyncError) -> None:
    console.print(f"[red]Error:[/] {escape(str(error))}")
    if error.hint:
        console.print(f"  {escape(error.hint)}")
    sys.exit(1)


@click.group()
def main():
    """codexsync — keep a project's codex in step with its upstream template.

    Install the codex with 'init', pull upstream releases with 'update', and
    propose your own codex edits upstream with 'suggest-changes'.
    """


# ── Init ─────────────────────────────────────────────────────────────


@main.command()
def init():
    """Install the codex from the upstream template."""
    from codexsync.config import CONFIG_FILE, load_config, save_config
    from codexsync.sync.updater import init_codex

    root = Path.cwd()
    try:
        config = load_config(root)
        _configure_logging(config.log_level)
        console.print(f"\n[bold blue]codexsync[/] — Installing codex from {config.require_upstream()}\n")
        result = init_codex(config, root)
    except CodexSyncError as e:
        _fail(e)

    if not (root / CONFIG_FILE).exists():
        save_config(config, root)
        console.print(f"  Wrote {CONFIG_FILE}")
    console.print(f"  [green]v[/] {result.summary()}")


# ── Update ───────────────────────────────────────────────────────────


@main.command()
def update():
    """Update the codex from the upstream template."""
    from codexsync.config import load_config
    from codexsync.sync.updater import UpdateAction, update_codex

    root = Path.cwd()
    try:
        config = load_config(root)
        _configure_logging(config.log_level)
        console.print(f"\n[bold blue]codexsync[/] — Checking {config.require_upstream()}\n")
        result = update_codex(config, root)
    except CodexSyncError as e:
        _fail(e)

    if result.action is UpdateAction.LOCAL_AHEAD:
        console.print(f"  [yellow]![/] {result.summary()}")
    else:
        console.print(f"  [green]v[/] {result.summary()}")
    if result.backup_path:
        console.print(f"  Previous codex saved to {result.backup_path}")


# ── Suggest changes ──────────────────────────────────────────────────


@main.command(name="suggest-changes")
def suggest_changes():
    """Propose local codex changes upstream as a pull request."""
    from codexsync.config import load_config
    from codexsync.prompts import ConsoleVersionPrompt
    from codexsync.sync.git_collaborator import GitCollaborator
    from codexsync.sync.workflow import SyncWorkflow, WorkflowState

    root = Path.cwd()
    try:
        config = load_config(root)
        _configure_logging(config.log_level)
        upstream = config.require_upstream()
    except CodexSyncError as e:
        _fail(e)

    console.print(f"\n[bold blue]codexsync[/] — Suggesting changes to {upstream}\n")

    with GitCollaborator(config, root) as collaborator:
        workflow = SyncWorkflow(
            collaborator,
            ConsoleVersionPrompt(console),
            threshold=config.minor_line_threshold,
        )
        result = workflow.run()

    if result.local_version is not None:
        table = Table(show_header=False, box=None)
        table.add_row("Local version", str(result.local_version))
        table.add_row("Upstream version", str(result.remote_version))
        if result.summary is not None:
            table.add_row("Changes", result.summary.describe())
        if result.confirmed_version is not None:
            table.add_row("Proposed version", str(result.confirmed_version))
        console.print(table)

    if result.state is WorkflowState.FAILED:
        _fail(result.error)
    if result.state is WorkflowState.NO_CHANGES_DETECTED:
        console.print("\n[yellow]No codex changes to propose.[/]")
        return

    console.print(Panel(result.pull_request_url, title="Pull request created"))


# ── Help ─────────────────────────────────────────────────────────────


@main.command(name="help")
@click.argument("topic", required=False)
@click.pass_context
def help_command(ctx, topic: str | None):
    """Show help for a command or topic (init, update, suggest-changes, versioning)."""
    if topic is None:
        click.echo(ctx.parent.get_help())
        console.print(f"\nTopics: {', '.join(HELP_TOPICS)}")
        return

    text = HELP_TOPICS.get(topic)
    if text is None:
        console.print(f"[red]Unknown help topic:[/] {topic}")
        console.print(f"Topics: {', '.join(HELP_TOPICS)}")
        sys.exit(1)

    console.print(Panel(text, title=topic))


if __name__ == "__main__":
    main()
