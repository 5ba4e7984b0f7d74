"""MCP server exposing contextpilot services as tools and resources.

Runs via STDIO transport (line-delimited JSON-RPC). Entry points:
`contextpilot mcp` or the `contextpilot-mcp` console script.

Usage:
    Claude Desktop: {"mcpServers": {"contextpilot": {"command": "contextpilot",
                     "args": ["mcp"], "cwd": "/path/to/your/project"}}}
    Claude Code:    claude mcp add contextpilot -- contextpilot mcp
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from mcp.server.fastmcp import FastMCP

from contextpilot.core.config_service import ConfigService
from contextpilot.errors import ContextPilotError
from contextpilot.models import CONTEXT_FILES

logger = logging.getLogger("contextpilot.mcp")

mcp = FastMCP("contextpilot")

NO_SESSION = "No saved session for this branch."
NO_CONTEXT = "No context files found. Run 'contextpilot init' to generate."

# Resource preference order for contextpilot://context
CONTEXT_RESOURCE_FILES = (CONTEXT_FILES["claude"], CONTEXT_FILES["cursor"])


def _root() -> Path:
    """Project root: CONTEXTPILOT_ROOT, else the server's working directory."""
    return ConfigService().get_root()


def _error(e: Exception) -> dict:
    logger.warning("Tool call failed: %s", e)
    return {"status": "error", "error": str(e)}


# ---------------------------------------------------------------------------
# Session tools
# ---------------------------------------------------------------------------


@mcp.tool()
async def contextpilot_save(
    task: str,
    goal: Optional[str] = None,
    state: Optional[str] = None,
    notes: Optional[str] = None,
) -> dict:
    """Save current work session context for the current branch.

    Args:
        task: What you are working on.
        goal: Why you are doing it.
        state: Current progress/state.
        notes: Additional notes.
    """
    from contextpilot.core.session_service import SessionService
    from contextpilot.models import Session

    svc = SessionService(_root())
    try:
        session = svc.load() or Session()
        session.task = task
        if goal:
            session.goal = goal
        if state:
            session.state = state
        if notes:
            session.notes = notes
        svc.save(session)
        return {
            "status": "ok",
            "message": f"Session saved: {task}",
            "session": session.to_dict(),
        }
    except (ContextPilotError, OSError) as e:
        return _error(e)


@mcp.tool()
async def contextpilot_resume() -> dict:
    """Get the saved session context for the current branch as a prompt."""
    from contextpilot.core.session_service import SessionService

    svc = SessionService(_root())
    try:
        session = svc.load()
    except ContextPilotError as e:
        return _error(e)
    if session is None:
        return {"status": "ok", "found": False, "prompt": NO_SESSION}
    return {"status": "ok", "found": True, "prompt": svc.generate_prompt(session)}


# ---------------------------------------------------------------------------
# Analysis & context tools
# ---------------------------------------------------------------------------


@mcp.tool()
async def contextpilot_analyze() -> dict:
    """Analyze the codebase: languages, framework, structure, packages, patterns."""
    from contextpilot.analyzers.codebase_analyzer import CodebaseAnalyzer

    try:
        analysis = CodebaseAnalyzer(_root()).analyze()
    except ContextPilotError as e:
        return _error(e)
    return {"status": "ok", "analysis": analysis.to_dict()}


@mcp.tool()
async def contextpilot_sync() -> dict:
    """Re-analyze the codebase and update the context files."""
    from contextpilot.core.sync_service import SyncService

    try:
        result = SyncService(_root()).sync()
    except (ContextPilotError, OSError) as e:
        return _error(e)
    return {
        "status": "ok",
        "message": "Context files updated",
        "changed_files": result.changed_files,
        "files": [
            {"target": target, "path": str(path)}
            for target, path in result.generated.generated_files
        ],
    }


@mcp.tool()
async def contextpilot_decision(text: str, context: Optional[str] = None) -> dict:
    """Log an architectural decision.

    Args:
        text: The decision made.
        context: Why this decision was made.
    """
    from contextpilot.core.decision_service import DecisionService

    try:
        decision = DecisionService(_root()).add(text, context or "")
    except OSError as e:
        return _error(e)
    return {
        "status": "ok",
        "message": f"Decision #{decision.id} logged: {text}",
        "id": decision.id,
        "date": decision.date,
    }


@mcp.tool()
async def contextpilot_score() -> dict:
    """Get the context quality score with issues and suggestions."""
    from contextpilot.core.score_service import ScoreService

    try:
        result = ScoreService(_root()).calculate()
    except ContextPilotError as e:
        return _error(e)
    return {
        "status": "ok",
        "message": f"Context Quality Score: {result.total}/100",
        "score": result.to_dict(),
    }


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------


@mcp.resource(
    "contextpilot://context",
    name="Project Context",
    description="Full project context including tech stack, conventions, and decisions",
    mime_type="text/markdown",
)
def project_context() -> str:
    """Return CLAUDE.md, else .cursorrules, else a hint to run init."""
    root = _root()
    for rel_path in CONTEXT_RESOURCE_FILES:
        try:
            return (root / rel_path).read_text(encoding="utf-8")
        except OSError:
            continue
    return NO_CONTEXT


@mcp.resource(
    "contextpilot://session",
    name="Current Session",
    description="Current work session context",
    mime_type="text/markdown",
)
def current_session() -> str:
    """Return the current branch's session prompt."""
    from contextpilot.core.session_service import SessionService

    svc = SessionService(_root())
    try:
        session = svc.load()
    except ContextPilotError as e:
        logger.warning("Could not load session: %s", e)
        return NO_SESSION
    if session is None:
        return NO_SESSION
    return svc.generate_prompt(session)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main():
    """Run the contextpilot MCP server via STDIO transport."""
    # stdout carries the protocol
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    logger.info("Starting contextpilot MCP server for %s", _root())
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
