"""End-to-end integration tests for the context workflow.

These tests exercise the complete flow: analyze -> generate context files ->
log decisions -> sync -> score -> save and resume a session.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

pytestmark = pytest.mark.integration


class TestContextLifecycle:
    """Test the complete context lifecycle end-to-end."""

    def test_complete_lifecycle(self, project, write_files):
        """Init -> decisions -> sync -> score."""
        from contextpilot.analyzers.codebase_analyzer import CodebaseAnalyzer
        from contextpilot.core.context_generator import ContextGenerator
        from contextpilot.core.decision_service import DecisionService
        from contextpilot.core.score_service import ScoreService
        from contextpilot.core.sync_service import SyncService

        write_files(project, {
            "package.json": {
                "dependencies": {"express": "^4.19.0", "mongoose": "^8.0.0"},
                "devDependencies": {"mocha": "^10.0.0", "prettier": "^3.0.0"},
            },
            "src/index.js": "",
            "src/routes/users.js": "",
            "node_modules/express/index.js": "",
        })

        # 1. Initial generation
        analysis = CodebaseAnalyzer(project).analyze()
        result = ContextGenerator(analysis, project).generate_all()
        assert len(result.generated_files) == 3
        claude_md = (project / "CLAUDE.md").read_text()
        assert "- JavaScript (2 files, 100.0%)" in claude_md
        assert "- ORM: Mongoose" in claude_md
        assert "- Tests: Mocha" in claude_md
        assert "## Architectural Decisions" not in claude_md

        # 2. Decisions show up after sync
        decisions = DecisionService(project)
        for text in ("Express over Fastify", "Mongo for documents", "Mocha for tests"):
            decisions.add(text)
        SyncService(project).sync()
        claude_md = (project / "CLAUDE.md").read_text()
        assert "Express over Fastify" in claude_md
        assert "Mongo for documents" in claude_md

        # 3. Score reflects files, fresh sync and decision count
        score = ScoreService(project).calculate()
        assert score.completeness == 40
        assert score.freshness == 30
        assert score.decisions == 22
        assert score.total == 92

        # 4. A month later the context is stale
        later = datetime.now(timezone.utc) + timedelta(days=40)
        stale = ScoreService(project).calculate(now=later)
        assert stale.freshness == 5
        assert any(issue.startswith("Context files stale") for issue in stale.issues)

    def test_session_round_trip(self, project):
        """Save -> resume on the same branch, isolated from other branches."""
        from contextpilot.core.session_service import SessionService
        from contextpilot.models import Session

        git = project / ".git"
        git.mkdir()
        (git / "HEAD").write_text("ref: refs/heads/feature/search\n")

        svc = SessionService(project)
        svc.save(Session(task="Add search", next_steps=["index titles"]))
        prompt = svc.generate_prompt(svc.load())
        assert "**Task:** Add search" in prompt
        assert "- index titles" in prompt

        (git / "HEAD").write_text("ref: refs/heads/main\n")
        assert svc.load() is None
