"""Sync service - re-analyze the codebase and refresh the context documents."""

from __future__ import annotations

import logging
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Optional

from contextpilot.analyzers.codebase_analyzer import CodebaseAnalyzer
from contextpilot.core import SyncResult
from contextpilot.core.config_service import ConfigService
from contextpilot.core.context_generator import ContextGenerator
from contextpilot.errors import NotInitializedError

logger = logging.getLogger("contextpilot.core.sync")

# Files whose churn says nothing about the code
IRRELEVANT_SUFFIXES: tuple[str, ...] = (
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "go.sum",
    ".DS_Store",
    "Thumbs.db",
)

# Hidden directories that still count as project content
VISIBLE_HIDDEN_DIRS = frozenset({".github"})

RECENT_COMMITS = 10


def is_relevant_file(path: str) -> bool:
    """Whether a changed path should be reported (no lockfiles, no hidden paths)."""
    if path.endswith(IRRELEVANT_SUFFIXES):
        return False
    return not any(
        part.startswith(".") and part not in VISIBLE_HIDDEN_DIRS
        for part in path.split("/")
    )


class SyncService:
    """Detects changes since the last sync and regenerates context files."""

    def __init__(self, root: Path, config: Optional[ConfigService] = None):
        self.root = Path(root)
        self._config = config or ConfigService(self.root)

    def last_sync(self) -> Optional[datetime]:
        return self._config.read_project_state(self.root).last_sync

    def changed_files(self, since: Optional[datetime] = None) -> list[str]:
        """Files touched in git since ``since`` (or in the last commits).

        Returns an empty list when the root is not a git repository or git
        fails.
        """
        if not (self.root / ".git").exists():
            return []

        if since is None:
            cmd = ["git", "diff", "--name-only", f"HEAD~{RECENT_COMMITS}", "--", "."]
        else:
            cmd = [
                "git", "log", f"--since={since.strftime('%Y-%m-%dT%H:%M:%S%z')}",
                "--name-only", "--pretty=format:", "--", ".",
            ]

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, cwd=self.root)
        except OSError as e:
            logger.debug("git unavailable: %s", e)
            return []
        if result.returncode != 0:
            logger.debug("%s failed: %s", " ".join(cmd[:2]), result.stderr.strip())
            return []

        changes: list[str] = []
        seen: set[str] = set()
        for line in result.stdout.splitlines():
            line = line.strip()
            if line and line not in seen and is_relevant_file(line):
                changes.append(line)
                seen.add(line)
        return changes

    def sync(self) -> SyncResult:
        """Re-run the analysis and rewrite every context document.

        Raises:
            NotInitializedError: If 'contextpilot init' has not been run.
            FilesystemError: If the root cannot be analyzed.
        """
        if not self._config.is_initialized(self.root):
            raise NotInitializedError(str(self.root))

        changes = self.changed_files(self.last_sync())
        logger.info("%d relevant file(s) changed since last sync", len(changes))

        analysis = CodebaseAnalyzer(self.root).analyze()
        generated = ContextGenerator(analysis, self.root, config=self._config).generate_all()
        return SyncResult(changed_files=changes, generated=generated, analysis=analysis)
