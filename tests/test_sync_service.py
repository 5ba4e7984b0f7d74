"""Tests for the sync service."""
import subprocess
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from contextpilot.core import sync_service
from contextpilot.core.sync_service import SyncService, is_relevant_file
from contextpilot.errors import NotInitializedError


def fake_git(monkeypatch, stdout="", returncode=0):
    run = MagicMock(return_value=subprocess.CompletedProcess(
        args=["git"], returncode=returncode, stdout=stdout, stderr="fatal",
    ))
    monkeypatch.setattr(sync_service.subprocess, "run", run)
    return run


class TestRelevantFiles:
    @pytest.mark.parametrize("path", [
        "src/index.ts", "main.go", ".github/workflows/ci.yml", "docs/README.md",
    ])
    def test_relevant(self, path):
        assert is_relevant_file(path)

    @pytest.mark.parametrize("path", [
        "package-lock.json", "web/yarn.lock", "pnpm-lock.yaml", "go.sum",
        ".contextpilot/config.yaml", "src/.DS_Store", ".env",
    ])
    def test_irrelevant(self, path):
        assert not is_relevant_file(path)


class TestChangedFiles:
    def test_not_a_git_repo(self, initialized_project, monkeypatch):
        run = fake_git(monkeypatch)
        assert SyncService(initialized_project).changed_files() == []
        run.assert_not_called()

    def test_since_last_sync(self, initialized_project, monkeypatch):
        (initialized_project / ".git").mkdir()
        run = fake_git(monkeypatch, stdout="src/a.ts\n\nsrc/a.ts\npackage-lock.json\nsrc/b.ts\n")
        since = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

        changes = SyncService(initialized_project).changed_files(since)
        assert changes == ["src/a.ts", "src/b.ts"]
        cmd = run.call_args.args[0]
        assert cmd[:2] == ["git", "log"]
        assert "--since=2026-01-02T03:04:05+0000" in cmd
        assert run.call_args.kwargs["cwd"] == initialized_project

    def test_recent_commits_without_sync(self, initialized_project, monkeypatch):
        (initialized_project / ".git").mkdir()
        run = fake_git(monkeypatch, stdout="main.go\n")
        assert SyncService(initialized_project).changed_files() == ["main.go"]
        assert run.call_args.args[0][:3] == ["git", "diff", "--name-only"]

    def test_git_failure(self, initialized_project, monkeypatch):
        (initialized_project / ".git").mkdir()
        fake_git(monkeypatch, returncode=128)
        assert SyncService(initialized_project).changed_files() == []

    def test_git_missing(self, initialized_project, monkeypatch):
        (initialized_project / ".git").mkdir()
        monkeypatch.setattr(sync_service.subprocess, "run", MagicMock(side_effect=FileNotFoundError))
        assert SyncService(initialized_project).changed_files() == []


class TestSync:
    def test_not_initialized(self, project):
        with pytest.raises(NotInitializedError):
            SyncService(project).sync()

    def test_regenerates_files(self, initialized_project, write_files):
        write_files(initialized_project, {
            "package.json": {"dependencies": {"react": "18.2.0"}},
            "src/App.tsx": "",
        })
        svc = SyncService(initialized_project)
        assert svc.last_sync() is None

        result = svc.sync()
        assert result.changed_files == []
        assert result.analysis.framework.name == "React"
        assert "- Framework: React 18.2.0" in (initialized_project / "CLAUDE.md").read_text()
        assert len(result.generated.generated_files) == 3
        assert svc.last_sync() is not None
