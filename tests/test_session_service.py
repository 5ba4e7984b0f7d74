"""Tests for SessionService."""
import json
from datetime import datetime, timezone

import pytest

from contextpilot.core.session_service import SessionService, current_branch, sanitize_branch
from contextpilot.errors import SessionError
from contextpilot.models import Session


def checkout(root, branch):
    git = root / ".git"
    git.mkdir(exist_ok=True)
    (git / "HEAD").write_text(f"ref: refs/heads/{branch}\n")


class TestBranch:
    def test_no_git_defaults_to_main(self, project):
        assert current_branch(project) == "main"

    def test_reads_head(self, project):
        checkout(project, "feature/login")
        assert current_branch(project) == "feature/login"

    def test_detached_head_defaults_to_main(self, project):
        (project / ".git").mkdir()
        (project / ".git" / "HEAD").write_text("3f2a9c1d0b\n")
        assert current_branch(project) == "main"

    def test_sanitize(self):
        assert sanitize_branch("feature/login") == "feature_login"
        assert sanitize_branch("a\\b") == "a_b"


class TestSessionServiceSave:
    def test_save_new_session(self, project):
        svc = SessionService(project)
        session = svc.save(Session(task="Refactor payments"))

        assert session.id
        assert session.branch == "main"
        assert session.created_at is not None
        assert session.updated_at == session.created_at
        path = project / ".contextpilot" / "sessions" / "main.json"
        data = json.loads(path.read_text())
        assert data["task"] == "Refactor payments"
        assert data["branch"] == "main"

    def test_save_uses_sanitized_branch_file(self, project):
        checkout(project, "feature/auth")
        svc = SessionService(project)
        svc.save(Session(task="Auth"))
        assert (project / ".contextpilot" / "sessions" / "feature_auth.json").exists()
        assert svc.load().branch == "feature/auth"

    def test_update_keeps_id_and_created_at(self, project):
        svc = SessionService(project)
        first = svc.save(Session(task="One"))
        created, sid = first.created_at, first.id

        loaded = svc.load()
        loaded.state = "halfway"
        second = svc.save(loaded)
        assert second.id == sid
        assert second.created_at == created
        assert second.updated_at >= created

    def test_history_appended(self, project):
        svc = SessionService(project)
        svc.save(Session(task="One"))
        svc.save(Session(task="Two"))
        assert [s.task for s in svc.history()] == ["One", "Two"]

    def test_history_capped_by_limit(self, project, monkeypatch):
        monkeypatch.setenv("CONTEXTPILOT_HISTORY_LIMIT", "3")
        svc = SessionService(project)
        for i in range(5):
            svc.save(Session(task=f"Task {i}"))
        raw = json.loads((project / ".contextpilot" / "sessions" / "history.json").read_text())
        assert [entry["task"] for entry in raw] == ["Task 2", "Task 3", "Task 4"]

    def test_history_filtered_by_branch(self, project):
        svc = SessionService(project)
        svc.save(Session(task="On main"))
        checkout(project, "dev")
        svc.save(Session(task="On dev"))
        assert [s.task for s in svc.history()] == ["On dev"]
        assert [s.task for s in svc.history(limit=1)] == ["On dev"]

    def test_corrupt_history_is_reset(self, project):
        svc = SessionService(project)
        svc.sessions_dir.mkdir(parents=True)
        svc.history_path.write_text("not json")
        svc.save(Session(task="Fresh"))
        assert [s.task for s in svc.history()] == ["Fresh"]


class TestSessionServiceLoad:
    def test_load_missing(self, project):
        assert SessionService(project).load() is None

    def test_load_roundtrip_fields(self, project):
        svc = SessionService(project)
        svc.save(Session(
            task="Auth migration",
            goal="Drop legacy sessions",
            approaches=["cookie store"],
            decisions=["use JWT"],
            state="JWT done",
            next_steps=["test SSO"],
            notes="ask ops",
        ))
        s = svc.load()
        assert s.task == "Auth migration"
        assert s.approaches == ["cookie store"]
        assert s.decisions == ["use JWT"]
        assert s.next_steps == ["test SSO"]
        assert s.updated_at.tzinfo is not None

    def test_load_corrupt_raises(self, project):
        svc = SessionService(project)
        svc.sessions_dir.mkdir(parents=True)
        svc.session_path().write_text("{broken")
        with pytest.raises(SessionError) as exc_info:
            svc.load()
        assert exc_info.value.context["branch"] == "main"

    def test_clear(self, project):
        svc = SessionService(project)
        svc.save(Session(task="x"))
        assert svc.clear() is True
        assert svc.load() is None
        assert svc.clear() is False


class TestGeneratePrompt:
    def test_none(self, project):
        assert SessionService(project).generate_prompt(None) == ""

    def test_minimal(self, project):
        s = Session(task="Fix bug", updated_at=datetime(2026, 5, 4, 9, 30, tzinfo=timezone.utc))
        prompt = SessionService(project).generate_prompt(s)
        assert prompt == (
            "## Session Context\n\n"
            "**Task:** Fix bug\n\n"
            "---\n"
            "*Session saved: 2026-05-04 09:30*\n"
        )

    def test_full(self, project):
        s = Session(
            task="Auth",
            goal="SSO",
            approaches=["a1", "a2"],
            decisions=["d1"],
            state="halfway",
            next_steps=["n1"],
            notes="careful",
            updated_at=datetime(2026, 5, 4, 9, 30, tzinfo=timezone.utc),
        )
        prompt = SessionService(project).generate_prompt(s)
        assert "**Goal:** SSO" in prompt
        assert "**Approaches Tried:**\n- a1\n- a2" in prompt
        assert "**Decisions Made:**\n- d1" in prompt
        assert "**Current State:** halfway" in prompt
        assert "**Next Steps:**\n- n1" in prompt
        assert "**Notes:** careful" in prompt
        assert prompt.index("**Goal:**") < prompt.index("**Approaches Tried:**") \
            < prompt.index("**Current State:**") < prompt.index("**Next Steps:**")
