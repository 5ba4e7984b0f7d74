"""Service layer for contextpilot.

All services return typed dataclasses. Services never import from
contextpilot.ui, contextpilot.cli, or typer. Consumer layers (CLI, MCP)
handle presentation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from contextpilot.analyzers.models import Analysis


@dataclass
class GenerateResult:
    """Result of writing the context documents."""

    generated_files: list[tuple[str, Path]]
    config_path: Path


@dataclass
class ScoreResult:
    """Context quality score and its breakdown."""

    completeness: int = 0
    freshness: int = 0
    decisions: int = 0
    issues: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.completeness + self.freshness + self.decisions

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "completeness": self.completeness,
            "freshness": self.freshness,
            "decisions": self.decisions,
            "issues": list(self.issues),
            "suggestions": list(self.suggestions),
        }


@dataclass
class SyncResult:
    """Result of re-analyzing and regenerating the context documents."""

    changed_files: list[str]
    generated: GenerateResult
    analysis: Analysis
