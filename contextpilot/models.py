"""Persisted record models and on-disk layout for contextpilot."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

# ── Schema Versions ──
SCHEMA_VERSION_CONFIG = 1

# ── Project Layout (relative to the project root) ──
STATE_DIR_NAME = ".contextpilot"
SESSIONS_DIR_NAME = "sessions"
HISTORY_FILE_NAME = "history.json"
DECISIONS_FILE_NAME = "decisions.md"
CONFIG_FILE_NAME = "config.yaml"

# Generated context documents, keyed by output target
CONTEXT_FILES: dict[str, str] = {
    "cursor": ".cursorrules",
    "claude": "CLAUDE.md",
    "copilot": ".github/copilot-instructions.md",
}


def state_dir(root: Path) -> Path:
    return root / STATE_DIR_NAME


def sessions_dir(root: Path) -> Path:
    return state_dir(root) / SESSIONS_DIR_NAME


def decisions_path(root: Path) -> Path:
    return state_dir(root) / DECISIONS_FILE_NAME


def project_config_path(root: Path) -> Path:
    return state_dir(root) / CONFIG_FILE_NAME


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _format_time(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_time(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value)


# ── Session ──
@dataclass
class Session:
    """A work session scoped to one source-control branch."""
    task: str = ""
    id: str = ""
    branch: str = ""
    goal: str = ""
    approaches: list[str] = field(default_factory=list)
    decisions: list[str] = field(default_factory=list)
    state: str = ""
    next_steps: list[str] = field(default_factory=list)
    notes: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict:
        data: dict = {"id": self.id, "branch": self.branch, "task": self.task}
        if self.goal:
            data["goal"] = self.goal
        if self.approaches:
            data["approaches"] = list(self.approaches)
        if self.decisions:
            data["decisions"] = list(self.decisions)
        if self.state:
            data["state"] = self.state
        if self.next_steps:
            data["nextSteps"] = list(self.next_steps)
        if self.notes:
            data["notes"] = self.notes
        data["createdAt"] = _format_time(self.created_at)
        data["updatedAt"] = _format_time(self.updated_at)
        return data

    @classmethod
    def from_dict(cls, d: dict) -> Session:
        return cls(
            id=str(d.get("id", "")),
            branch=d.get("branch", ""),
            task=d.get("task", ""),
            goal=d.get("goal", ""),
            approaches=list(d.get("approaches") or []),
            decisions=list(d.get("decisions") or []),
            state=d.get("state", ""),
            next_steps=list(d.get("nextSteps") or []),
            notes=d.get("notes", ""),
            created_at=_parse_time(d.get("createdAt")),
            updated_at=_parse_time(d.get("updatedAt")),
        )


# ── Decision ──
@dataclass
class DecisionRecord:
    """One entry of the architectural decision log."""
    id: int
    date: str
    text: str
    context: str = ""

    def to_dict(self) -> dict:
        d = {"id": self.id, "date": self.date, "text": self.text}
        if self.context:
            d["context"] = self.context
        return d
