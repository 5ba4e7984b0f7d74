"""Custom exception hierarchy for contextpilot.

All contextpilot-specific exceptions derive from ContextPilotError. Each
exception carries an optional ``context`` dict with structured metadata
(root path, branch, decision ID, etc.) that the CLI error handler can render.

Exception hierarchy::

    ContextPilotError
    ├── FilesystemError
    ├── NotInitializedError
    ├── SessionError
    ├── DecisionNotFoundError
    ├── ClipboardError
    └── ConfigError
"""
from __future__ import annotations

from typing import Optional


class ContextPilotError(Exception):
    """Base class for all contextpilot exceptions.

    Args:
        message: Human-readable error description.
        context: Optional dict of structured metadata.
    """

    exit_code: int = 1

    def __init__(self, message: str, context: Optional[dict] = None):
        self.context = context or {}
        super().__init__(message)


# ── Analysis ───────────────────────────────────────────────────────

class FilesystemError(ContextPilotError):
    """Raised when the analysis root is missing or cannot be read."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            f"could not analyze root path: {reason}",
            context={"path": path},
        )


class NotInitializedError(ContextPilotError):
    """Raised when a command needs .contextpilot/config.yaml and it is absent."""

    def __init__(self, root: str):
        super().__init__(
            f"ContextPilot not initialized in {root}",
            context={"root": root},
        )


# ── Persisted records ──────────────────────────────────────────────

class SessionError(ContextPilotError):
    """Raised when a saved session cannot be read or parsed."""

    def __init__(self, message: str, branch: str = "", file_path: str = ""):
        super().__init__(
            message,
            context={"branch": branch, "file": file_path},
        )


class DecisionNotFoundError(ContextPilotError):
    """Raised when a decision ID does not exist in the decision log."""

    def __init__(self, decision_id: int):
        super().__init__(
            f"decision #{decision_id} not found",
            context={"decision": decision_id},
        )


# ── Environment ────────────────────────────────────────────────────

class ClipboardError(ContextPilotError):
    """Raised when the prompt cannot be copied to the system clipboard."""
    pass


class ConfigError(ContextPilotError):
    """Raised when configuration is invalid or missing."""
    pass
