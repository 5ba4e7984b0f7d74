"""Context quality scoring service."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from contextpilot.analyzers.codebase_analyzer import CodebaseAnalyzer
from contextpilot.core import ScoreResult
from contextpilot.core.config_service import ConfigService
from contextpilot.core.decision_service import DecisionService
from contextpilot.errors import FilesystemError, NotInitializedError
from contextpilot.models import CONFIG_FILE_NAME, CONTEXT_FILES, STATE_DIR_NAME

logger = logging.getLogger("contextpilot.core.score")

COMPLETENESS_MAX = 40
FRESHNESS_MAX = 30
DECISIONS_MAX = 30

# (relative path, points)
COMPLETENESS_FILES: tuple[tuple[str, int], ...] = (
    (CONTEXT_FILES["cursor"], 10),
    (CONTEXT_FILES["claude"], 10),
    (CONTEXT_FILES["copilot"], 10),
    (f"{STATE_DIR_NAME}/{CONFIG_FILE_NAME}", 10),
)

# (max days since sync, points); anything older scores FRESHNESS_STALE
FRESHNESS_BANDS: tuple[tuple[int, int], ...] = (
    (0, 30),
    (7, 25),
    (30, 15),
)
FRESHNESS_STALE = 5

# (decision count below, points); five or more scores DECISIONS_MAX
DECISION_BANDS: tuple[tuple[int, int], ...] = (
    (1, 5),
    (3, 15),
    (5, 22),
)

# (minimum percentage, label)
STATUS_LABELS: tuple[tuple[int, str], ...] = (
    (80, "Excellent"),
    (60, "Good"),
    (40, "Needs improvement"),
)


def score_status(score: int, max_score: int) -> str:
    """Label a category score by its percentage of the maximum."""
    pct = score / max_score * 100 if max_score else 0
    for threshold, label in STATUS_LABELS:
        if pct >= threshold:
            return label
    return "Poor"


class ScoreService:
    """Scores how complete, fresh and decision-rich the context files are."""

    def __init__(self, root: Path, config: Optional[ConfigService] = None):
        self.root = Path(root)
        self._config = config or ConfigService(self.root)

    def calculate(self, now: Optional[datetime] = None) -> ScoreResult:
        """Compute the score.

        Raises:
            NotInitializedError: If the project has no .contextpilot/config.yaml.
        """
        if not self._config.is_initialized(self.root):
            raise NotInitializedError(str(self.root))

        result = ScoreResult()
        self._score_completeness(result)
        self._score_freshness(result, now or datetime.now(timezone.utc))
        self._score_decisions(result)
        logger.info("Context score for %s: %d/100", self.root, result.total)
        return result

    def _score_completeness(self, result: ScoreResult) -> None:
        for rel_path, points in COMPLETENESS_FILES:
            if (self.root / rel_path).exists():
                result.completeness += points
            else:
                result.issues.append(f"Missing: {Path(rel_path).name}")

        try:
            analysis = CodebaseAnalyzer(self.root).analyze()
        except FilesystemError as e:
            logger.warning("Skipping framework check: %s", e)
            return
        if analysis.framework is None:
            result.suggestions.append(
                "Add framework detection (create package.json or go.mod)"
            )

    def _score_freshness(self, result: ScoreResult, now: datetime) -> None:
        last_sync = self._config.read_project_state(self.root).last_sync
        if last_sync is None:
            result.suggestions.append("Run 'contextpilot sync' to record a sync time")
            return

        days = (now - last_sync).days
        for max_days, points in FRESHNESS_BANDS:
            if days <= max_days:
                result.freshness = points
                break
        else:
            result.freshness = FRESHNESS_STALE
            result.issues.append(f"Context files stale ({days} days since sync)")
            return

        if days > FRESHNESS_BANDS[1][0]:
            result.suggestions.append(
                "Run 'contextpilot sync' - last sync was over a week ago"
            )

    def _score_decisions(self, result: ScoreResult) -> None:
        count = len(DecisionService(self.root).list())
        for below, points in DECISION_BANDS:
            if count < below:
                result.decisions = points
                break
        else:
            result.decisions = DECISIONS_MAX

        if count == 0:
            result.suggestions.append(
                "Add architectural decisions with 'contextpilot decision \"...\"'"
            )
        elif count < 3:
            result.suggestions.append(
                f"Add more decisions (currently {count}, aim for 5+)"
            )
