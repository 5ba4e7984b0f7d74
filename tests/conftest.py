"""Shared fixtures for contextpilot tests."""
import json
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def contextpilot_home(tmp_path, monkeypatch):
    """Point the global config at a temporary directory for every test.

    Also clears CONTEXTPILOT_* env vars and resets UI output modes so tests
    never touch real data or leak state into each other.
    """
    home = tmp_path / "cp-home"
    home.mkdir()

    for var in (
        "CONTEXTPILOT_ROOT",
        "CONTEXTPILOT_HISTORY_LIMIT",
        "CONTEXTPILOT_PLAIN",
        "CONTEXTPILOT_DEBUG",
    ):
        monkeypatch.delenv(var, raising=False)

    import contextpilot.core.config_service as config_svc
    monkeypatch.setattr(config_svc, "_global_config_dir", lambda: home)
    config_svc.reset_config_service()

    from contextpilot import ui
    monkeypatch.setattr(ui, "_plain_mode", False)
    monkeypatch.setattr(ui, "_json_mode", False)
    monkeypatch.setattr(ui, "console", ui.console)

    yield home

    config_svc.reset_config_service()


@pytest.fixture
def project(tmp_path):
    """An empty project directory."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def write_files():
    """Create files under a root from a {relative path: content} mapping."""
    def _write(root: Path, files: dict) -> Path:
        for rel_path, content in files.items():
            path = root / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, (dict, list)):
                content = json.dumps(content)
            path.write_text(content)
        return root
    return _write


@pytest.fixture
def initialized_project(project):
    """A project with a .contextpilot/config.yaml, as left by 'contextpilot init'."""
    state = project / ".contextpilot"
    state.mkdir()
    (state / "config.yaml").write_text("version: 1\n")
    return project
