"""Layered configuration service for contextpilot.

Priority (highest to lowest):
1. Environment variables (CONTEXTPILOT_*)
2. Project config (.contextpilot/config.yaml under the project root)
3. Global config (~/.config/contextpilot/config.yaml)
4. Built-in defaults

The project config doubles as the project state file: ``version`` and
``lastSync`` are written there by the context generator.
"""
from __future__ import annotations

import copy
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import yaml

from contextpilot.errors import ConfigError
from contextpilot.models import SCHEMA_VERSION_CONFIG, project_config_path

logger = logging.getLogger("contextpilot.config")

# Default configuration values
DEFAULTS: dict[str, Any] = {
    "output": {
        "targets": ["cursor", "claude", "copilot"],
    },
    "session": {
        "history_limit": 100,
    },
    "ui": {
        "plain_output": False,
    },
}

# Mapping of env vars to config paths
ENV_VAR_MAP = {
    "CONTEXTPILOT_HISTORY_LIMIT": "session.history_limit",
    "CONTEXTPILOT_PLAIN": "ui.plain_output",
}

ROOT_ENV_VAR = "CONTEXTPILOT_ROOT"

# Keys the project state owns; never merged into settings
STATE_KEYS = ("version", "lastSync")


def _global_config_dir() -> Path:
    """Return the global config directory: ~/.config/contextpilot/."""
    return Path.home() / ".config" / "contextpilot"


def _global_config_path() -> Path:
    """Return the global config file path."""
    return _global_config_dir() / "config.yaml"


def _read_yaml(path: Path) -> dict:
    """Read a YAML mapping, returning empty dict if missing or unreadable."""
    if not path.is_file():
        return {}
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to read %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a mapping", path)
        return {}
    return data


def _write_yaml(data: dict, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge override into base (override wins)."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _get_nested(data: dict, dotted_key: str, default: Any = None) -> Any:
    """Get a value from a nested dict using dotted key notation."""
    current = data
    for key in dotted_key.split("."):
        if not isinstance(current, dict):
            return default
        current = current.get(key)
        if current is None:
            return default
    return current


def _set_nested(data: dict, dotted_key: str, value: Any) -> None:
    """Set a value in a nested dict using dotted key notation."""
    keys = dotted_key.split(".")
    current = data
    for key in keys[:-1]:
        if key not in current or not isinstance(current[key], dict):
            current[key] = {}
        current = current[key]
    current[keys[-1]] = value


def _coerce(value: str) -> Any:
    """Convert string booleans and integers from env vars / CLI input."""
    lowered = value.lower()
    if lowered in ("true", "1", "yes"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    if value.isdigit():
        return int(value)
    return value


def parse_value(value: str) -> Any:
    """Parse a `config set` value; comma-separated input becomes a list."""
    if "," in value:
        return [_coerce(v.strip()) for v in value.split(",") if v.strip()]
    return _coerce(value)


def _parse_version(value: Any) -> int:
    if value is None or value == "":
        return SCHEMA_VERSION_CONFIG
    if isinstance(value, bool):
        logger.warning("Ignoring invalid version value: %r", value)
        return SCHEMA_VERSION_CONFIG
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid version value: %r", value)
        return SCHEMA_VERSION_CONFIG


def _parse_last_sync(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            logger.warning("Ignoring invalid lastSync value: %r", value)
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class ResolvedConfig:
    """Fully resolved configuration after merging all layers."""
    data: dict = field(default_factory=dict)
    global_config_path: Optional[Path] = None
    project_config_path: Optional[Path] = None

    def get(self, dotted_key: str, default: Any = None) -> Any:
        """Get a config value using dotted key notation."""
        return _get_nested(self.data, dotted_key, default)


@dataclass
class ProjectState:
    """Contents of the project state file."""
    version: int = SCHEMA_VERSION_CONFIG
    last_sync: Optional[datetime] = None


class ConfigService:
    """Layered configuration service bound to a project root."""

    def __init__(self, root: Optional[Path] = None):
        self._root = root
        self._resolved: Optional[ResolvedConfig] = None

    def get_root(self) -> Path:
        """Project root: explicit root, else CONTEXTPILOT_ROOT, else the cwd."""
        if self._root is not None:
            return Path(self._root).resolve()
        env_root = os.environ.get(ROOT_ENV_VAR)
        if env_root:
            return Path(env_root).expanduser().resolve()
        return Path.cwd()

    def resolve(self, force: bool = False) -> ResolvedConfig:
        """Resolve the full config from all layers."""
        if self._resolved is not None and not force:
            return self._resolved

        merged = copy.deepcopy(DEFAULTS)

        global_path = _global_config_path()
        global_data = _read_yaml(global_path)
        if global_data:
            merged = _deep_merge(merged, global_data)
            logger.debug("Loaded global config from %s", global_path)

        project_path = project_config_path(self.get_root())
        project_data = {
            k: v for k, v in _read_yaml(project_path).items() if k not in STATE_KEYS
        }
        if project_data:
            merged = _deep_merge(merged, project_data)
            logger.debug("Loaded project config from %s", project_path)

        for env_var, config_path in ENV_VAR_MAP.items():
            env_value = os.environ.get(env_var)
            if env_value is not None:
                _set_nested(merged, config_path, _coerce(env_value))

        self._resolved = ResolvedConfig(
            data=merged,
            global_config_path=global_path if global_path.is_file() else None,
            project_config_path=project_path if project_path.is_file() else None,
        )
        return self._resolved

    def get(self, dotted_key: str, default: Any = None) -> Any:
        """Get a resolved config value."""
        return self.resolve().get(dotted_key, default)

    def get_history_limit(self) -> int:
        value = self.get("session.history_limit", 100)
        try:
            limit = int(value)
        except (TypeError, ValueError):
            raise ConfigError(
                f"session.history_limit must be an integer, got {value!r}",
                context={"key": "session.history_limit"},
            )
        if limit < 1:
            raise ConfigError(
                "session.history_limit must be at least 1",
                context={"key": "session.history_limit"},
            )
        return limit

    def get_output_targets(self) -> list[str]:
        targets = self.get("output.targets", DEFAULTS["output"]["targets"])
        if isinstance(targets, str):
            targets = [t.strip() for t in targets.split(",") if t.strip()]
        return list(targets)

    def is_initialized(self, root: Optional[Path] = None) -> bool:
        return project_config_path(root or self.get_root()).is_file()

    def read_project_state(self, root: Optional[Path] = None) -> ProjectState:
        """Read version and lastSync from the project state file."""
        data = _read_yaml(project_config_path(root or self.get_root()))
        return ProjectState(
            version=_parse_version(data.get("version")),
            last_sync=_parse_last_sync(data.get("lastSync")),
        )

    def write_project_state(
        self, root: Optional[Path] = None, last_sync: Optional[datetime] = None,
    ) -> Path:
        """Record a sync in the project state file, keeping user settings."""
        path = project_config_path(root or self.get_root())
        data = _read_yaml(path)
        data["version"] = SCHEMA_VERSION_CONFIG
        data["lastSync"] = (last_sync or datetime.now(timezone.utc)).isoformat()
        _write_yaml(data, path)
        self._resolved = None
        logger.info("Updated project state: %s", path)
        return path

    def set_global(self, dotted_key: str, value: Any) -> None:
        """Set a value in the global config file."""
        path = _global_config_path()
        data = _read_yaml(path)
        _set_nested(data, dotted_key, value)
        _write_yaml(data, path)
        # Invalidate cache
        self._resolved = None
        logger.info("Set %s = %s in %s", dotted_key, value, path)

    def show(self) -> dict:
        """Return the resolved config and where it came from."""
        resolved = self.resolve(force=True)
        state = self.read_project_state()
        return {
            "resolved": resolved.data,
            "sources": {
                "global_config": str(resolved.global_config_path) if resolved.global_config_path else None,
                "project_config": str(resolved.project_config_path) if resolved.project_config_path else None,
            },
            "state": {
                "version": state.version,
                "lastSync": state.last_sync.isoformat() if state.last_sync else None,
            },
        }


# Module-level singleton
_config_service: Optional[ConfigService] = None


def get_config_service() -> ConfigService:
    """Get or create the global ConfigService instance."""
    global _config_service
    if _config_service is None:
        _config_service = ConfigService()
    return _config_service


def reset_config_service() -> None:
    """Reset the global config service (useful for testing)."""
    global _config_service
    _config_service = None
