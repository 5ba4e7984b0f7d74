"""Decision log service - architectural decisions in .contextpilot/decisions.md."""

from __future__ import annotations

import logging
import re
from datetime import date
from pathlib import Path

from contextpilot.errors import DecisionNotFoundError
from contextpilot.models import DecisionRecord, decisions_path

logger = logging.getLogger("contextpilot.core.decision")

HEADER = (
    "# Architectural Decisions\n"
    "# Managed by ContextPilot\n"
    '# Add decisions with: contextpilot decision "Your decision here"\n'
    "\n"
)

SUMMARY_LENGTH = 60

_ID_PATTERN = re.compile(r"^## \[(\d+)\]")
_DATE_PATTERN = re.compile(r"^\*\*Date:\*\* (.+)$")
_CONTEXT_PREFIX = "**Context:**"
_SEPARATOR = "---"
_ESCAPE = "\\"


def _is_structural(line: str) -> bool:
    """True if ``line`` would be read as log structure rather than text."""
    return bool(
        _ID_PATTERN.match(line)
        or _DATE_PATTERN.match(line)
        or line.startswith(_CONTEXT_PREFIX)
        or line == _SEPARATOR
    )


def _escape(text: str) -> str:
    # One backslash per level, so already-escaped lines round-trip too.
    return "\n".join(
        _ESCAPE + line if _is_structural(line.lstrip(_ESCAPE)) else line
        for line in text.split("\n")
    )


def _unescape(line: str) -> str:
    if line.startswith(_ESCAPE) and _is_structural(line.lstrip(_ESCAPE)):
        return line[1:]
    return line


def summarize(text: str, max_len: int = SUMMARY_LENGTH) -> str:
    """First line of ``text``, truncated to ``max_len`` with an ellipsis."""
    first_line = text.split("\n", 1)[0]
    if len(first_line) <= max_len:
        return first_line
    return first_line[: max_len - 3] + "..."


def format_entry(decision: DecisionRecord) -> str:
    """Render one decision as a Markdown block.

    Text lines that look like log structure (an entry heading, a date or
    context line, a separator) are written with a leading backslash.
    """
    entry = (
        f"## [{decision.id}] {summarize(decision.text)}\n"
        f"**Date:** {decision.date}\n\n"
        f"{_escape(decision.text)}\n"
    )
    if decision.context:
        context = " ".join(decision.context.split("\n"))
        entry += f"\n{_CONTEXT_PREFIX} {context}\n"
    entry += f"\n{_SEPARATOR}\n\n"
    return entry


def parse_decisions(content: str) -> list[DecisionRecord]:
    """Parse the decision log back into records."""
    decisions: list[DecisionRecord] = []
    current: DecisionRecord | None = None
    text_lines: list[str] = []

    def finish() -> None:
        if current is not None:
            current.text = "\n".join(text_lines).strip()
            decisions.append(current)

    for line in content.splitlines():
        match = _ID_PATTERN.match(line)
        if match:
            finish()
            current = DecisionRecord(id=int(match.group(1)), date="", text="")
            text_lines = []
            continue

        if current is None:
            continue

        match = _DATE_PATTERN.match(line)
        if match:
            current.date = match.group(1)
            continue

        if line == _SEPARATOR or (not text_lines and line == ""):
            continue

        if line.startswith(_CONTEXT_PREFIX):
            current.context = line[len(_CONTEXT_PREFIX):].strip()
        else:
            text_lines.append(_unescape(line))

    finish()
    return decisions


class DecisionService:
    """Adds, lists and deletes entries of the decision log."""

    def __init__(self, root: Path):
        self.root = Path(root)
        self.path = decisions_path(self.root)

    def add(self, text: str, context: str = "") -> DecisionRecord:
        """Append a decision with the next free ID and today's date."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        existing = self.list()
        next_id = existing[-1].id + 1 if existing else 1
        decision = DecisionRecord(
            id=next_id,
            date=date.today().isoformat(),
            text=text,
            context=context,
        )

        needs_header = not self.path.exists() or self.path.stat().st_size == 0
        with open(self.path, "a", encoding="utf-8") as f:
            if needs_header:
                f.write(HEADER)
            f.write(format_entry(decision))

        logger.info("Logged decision #%d", decision.id)
        return decision

    def list(self) -> list[DecisionRecord]:
        """Return all decisions in file order (empty if no log exists)."""
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        return parse_decisions(content)

    def delete(self, decision_id: int) -> None:
        """Remove a decision by ID and rewrite the log.

        Raises:
            DecisionNotFoundError: If no decision has that ID.
        """
        decisions = self.list()
        remaining = [d for d in decisions if d.id != decision_id]
        if len(remaining) == len(decisions):
            raise DecisionNotFoundError(decision_id)

        self._rewrite(remaining)
        logger.info("Deleted decision #%d", decision_id)

    def for_context(self) -> str:
        """Decisions as a Markdown bullet list for the context documents."""
        return "".join(f"- **{d.date}:** {d.text}\n" for d in self.list())

    def _rewrite(self, decisions: list[DecisionRecord]) -> None:
        body = HEADER + "".join(format_entry(d) for d in decisions)
        self.path.write_text(body, encoding="utf-8")
