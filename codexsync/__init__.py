"""codexsync — keep a project's codex in step with its upstream template."""

__version__ = "0.3.0"
