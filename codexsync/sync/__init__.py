"""Codex sync — moving codex content between a project and its upstream template.

This package provides:
- The collaborator contracts the workflow drives (fetch, stage, diff, commit, publish, prompt)
- SyncWorkflow: the suggest-changes state machine
- GitCollaborator: the git / GitHub CLI backed implementation of those contracts
- init / update: installing and refreshing a project's codex from upstream
"""
