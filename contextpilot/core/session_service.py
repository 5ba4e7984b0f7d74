"""Session management service - branch-scoped work session records."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Optional

from contextpilot.core.config_service import ConfigService
from contextpilot.errors import SessionError
from contextpilot.models import (
    HISTORY_FILE_NAME,
    Session,
    sessions_dir,
    utcnow,
)

logger = logging.getLogger("contextpilot.core.session")

DEFAULT_BRANCH = "main"
HEAD_REF_PREFIX = "ref: refs/heads/"


def current_branch(root: Path) -> str:
    """Return the checked-out branch from .git/HEAD, or "main"."""
    head = root / ".git" / "HEAD"
    try:
        content = head.read_text().strip()
    except OSError:
        return DEFAULT_BRANCH
    if content.startswith(HEAD_REF_PREFIX) and len(content) > len(HEAD_REF_PREFIX):
        return content[len(HEAD_REF_PREFIX):]
    return DEFAULT_BRANCH


def sanitize_branch(branch: str) -> str:
    """Make a branch name safe to use as a file name."""
    return branch.replace("/", "_").replace("\\", "_")


class SessionService:
    """Saves and restores work sessions under .contextpilot/sessions/."""

    def __init__(self, root: Path, config: Optional[ConfigService] = None):
        self.root = Path(root)
        self.sessions_dir = sessions_dir(self.root)
        self._config = config or ConfigService(self.root)

    @property
    def history_path(self) -> Path:
        return self.sessions_dir / HISTORY_FILE_NAME

    def branch(self) -> str:
        return current_branch(self.root)

    def session_path(self, branch: Optional[str] = None) -> Path:
        return self.sessions_dir / f"{sanitize_branch(branch or self.branch())}.json"

    def save(self, session: Session) -> Session:
        """Create or update the session for its branch and append to history.

        New sessions get an ID and creation time; the branch defaults to the
        current one.
        """
        self.sessions_dir.mkdir(parents=True, exist_ok=True)

        now = utcnow()
        if not session.id:
            session.id = str(time.time_ns())
            session.created_at = now
        session.updated_at = now

        if not session.branch:
            session.branch = self.branch()

        path = self.session_path(session.branch)
        path.write_text(json.dumps(session.to_dict(), indent=2))
        logger.info("Session saved for branch '%s': %s", session.branch, path)

        self._append_history(session)
        return session

    def load(self) -> Optional[Session]:
        """Return the current branch's session, or None if there is none.

        Raises:
            SessionError: If the session file exists but cannot be parsed.
        """
        branch = self.branch()
        path = self.session_path(branch)
        try:
            raw = path.read_text()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise SessionError(f"failed to read session: {e}", branch=branch, file_path=str(path))

        try:
            return Session.from_dict(json.loads(raw))
        except (ValueError, TypeError, AttributeError) as e:
            raise SessionError(f"failed to parse session: {e}", branch=branch, file_path=str(path))

    def history(self, limit: int = 0) -> list[Session]:
        """Return saved snapshots for the current branch, oldest first.

        Args:
            limit: Keep only the most recent ``limit`` entries (0 = all).
        """
        branch = self.branch()
        filtered = [s for s in self._read_history() if s.branch == branch]
        if limit > 0 and len(filtered) > limit:
            filtered = filtered[-limit:]
        return filtered

    def clear(self) -> bool:
        """Remove the current branch's session. Returns True if one existed."""
        path = self.session_path()
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.info("Cleared session %s", path)
        return True

    def generate_prompt(self, session: Optional[Session]) -> str:
        """Render a session as a Markdown prompt to paste into AI tools."""
        if session is None:
            return ""

        lines = ["## Session Context", "", f"**Task:** {session.task}"]
        if session.goal:
            lines.append(f"**Goal:** {session.goal}")

        if session.approaches:
            lines += ["", "**Approaches Tried:**"]
            lines += [f"- {a}" for a in session.approaches]

        if session.decisions:
            lines += ["", "**Decisions Made:**"]
            lines += [f"- {d}" for d in session.decisions]

        if session.state:
            lines += ["", f"**Current State:** {session.state}"]

        if session.next_steps:
            lines += ["", "**Next Steps:**"]
            lines += [f"- {n}" for n in session.next_steps]

        if session.notes:
            lines += ["", f"**Notes:** {session.notes}"]

        saved = session.updated_at.strftime("%Y-%m-%d %H:%M") if session.updated_at else "unknown"
        lines += ["", "---", f"*Session saved: {saved}*"]
        return "\n".join(lines) + "\n"

    def _read_history(self) -> list[Session]:
        try:
            raw = json.loads(self.history_path.read_text())
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable session history %s: %s", self.history_path, e)
            return []
        if not isinstance(raw, list):
            return []

        sessions = []
        for entry in raw:
            try:
                sessions.append(Session.from_dict(entry))
            except (ValueError, TypeError, AttributeError) as e:
                logger.debug("Skipping malformed history entry: %s", e)
        return sessions

    def _append_history(self, session: Session) -> None:
        history = self._read_history()
        history.append(session)

        limit = self._config.get_history_limit()
        if len(history) > limit:
            history = history[-limit:]

        self.history_path.write_text(
            json.dumps([s.to_dict() for s in history], indent=2)
        )
