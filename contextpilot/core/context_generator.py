"""Context document generator - renders an Analysis into AI context files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from contextpilot.analyzers.models import STRUCTURE_MONOREPO, Analysis
from contextpilot.core import GenerateResult
from contextpilot.core.config_service import ConfigService
from contextpilot.core.decision_service import DecisionService
from contextpilot.errors import ConfigError
from contextpilot.models import CONTEXT_FILES

logger = logging.getLogger("contextpilot.core.generator")

MAX_LISTED_DEPENDENCIES = 15

# Output target -> (document title, intro line)
TARGET_HEADERS: dict[str, tuple[str, str]] = {
    "cursor": (
        "Cursor Rules",
        "Project rules for Cursor. Follow these conventions when editing this codebase.",
    ),
    "claude": (
        "CLAUDE.md",
        "This file gives Claude Code context about this repository.",
    ),
    "copilot": (
        "Copilot Instructions",
        "Repository-wide instructions for GitHub Copilot.",
    ),
}

GENERATED_NOTICE = (
    "<!-- Generated by contextpilot. Run 'contextpilot sync' to refresh. -->"
)


def _bullets(items: Iterable[str]) -> list[str]:
    return [f"- {item}" for item in items]


class ContextGenerator:
    """Writes the per-tool context documents for one analysis."""

    def __init__(
        self,
        analysis: Analysis,
        root: Optional[Path] = None,
        config: Optional[ConfigService] = None,
    ):
        self.analysis = analysis
        self.root = Path(root) if root else Path(analysis.root_path)
        self._config = config or ConfigService(self.root)
        self._decisions = DecisionService(self.root)

    def generate_all(self, targets: Optional[list[str]] = None) -> GenerateResult:
        """Write every target document, then record the sync time.

        Args:
            targets: Output targets to write; defaults to ``output.targets``.
        """
        targets = targets or self._config.get_output_targets()
        unknown = [t for t in targets if t not in CONTEXT_FILES]
        if unknown:
            raise ConfigError(
                f"Unknown output target(s): {', '.join(unknown)}. "
                f"Valid targets: {', '.join(CONTEXT_FILES)}",
                context={"key": "output.targets"},
            )

        body = self.render_body()
        generated: list[tuple[str, Path]] = []
        for target in targets:
            path = self.root / CONTEXT_FILES[target]
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self._wrap(target, body), encoding="utf-8")
            generated.append((target, path))
            logger.info("Wrote %s", path)

        config_path = self._config.write_project_state(self.root)
        return GenerateResult(generated_files=generated, config_path=config_path)

    def render(self, target: str) -> str:
        """Render one target document without writing it."""
        return self._wrap(target, self.render_body())

    def render_body(self) -> str:
        sections = [
            self._tech_stack(),
            self._structure(),
            self._conventions(),
            self._patterns(),
            self._dependencies(),
            self._decisions_section(),
        ]
        return "\n\n".join("\n".join(s) for s in sections if s) + "\n"

    def _wrap(self, target: str, body: str) -> str:
        title, intro = TARGET_HEADERS[target]
        return f"# {title}\n\n{GENERATED_NOTICE}\n\n{intro}\n\n{body}"

    def _tech_stack(self) -> list[str]:
        a = self.analysis
        lines = ["## Tech Stack", ""]
        languages = sorted(a.languages, key=lambda lang: -lang.file_count)
        if languages:
            lines += _bullets(
                f"{lang.name} ({lang.file_count} files, {lang.percentage:.1f}%)"
                for lang in languages
            )
        else:
            lines.append("- No source files detected")
        if a.framework:
            version = f" {a.framework.version}" if a.framework.version else ""
            lines.append(f"- Framework: {a.framework.name}{version}")
        if a.packages.manager:
            lines.append(f"- Package manager: {a.packages.manager}")
        return lines

    def _structure(self) -> list[str]:
        s = self.analysis.structure
        lines = ["## Project Structure", ""]
        kind = "Monorepo" if s.type == STRUCTURE_MONOREPO else "Standard single-package layout"
        lines.append(f"- Layout: {kind}")
        if s.src_dir:
            lines.append(f"- Source directory: `{s.src_dir}/`")
        if s.entry_point:
            lines.append(f"- Entry point: `{s.entry_point}`")
        if s.folders:
            lines.append("- Key folders: " + ", ".join(f"`{f}/`" for f in s.folders))
        return lines

    def _conventions(self) -> list[str]:
        p = self.analysis.patterns
        rows = [
            ("Naming", p.naming_convention),
            ("Exports", p.export_style),
            ("Tests", p.test_framework),
            ("Linter", p.linter),
            ("Formatter", p.formatter),
        ]
        found = [f"{label}: {value}" for label, value in rows if value]
        if not found:
            return []
        return ["## Conventions", ""] + _bullets(found)

    def _patterns(self) -> list[str]:
        p = self.analysis.patterns
        rows = [
            ("ORM", p.orm),
            ("Styling", p.styling),
            ("State management", p.state_management),
        ]
        found = [f"{label}: {value}" for label, value in rows if value]
        if not found:
            return []
        return ["## Patterns", ""] + _bullets(found)

    def _dependencies(self) -> list[str]:
        deps = self.analysis.packages.dependencies
        if not deps:
            return []
        names = sorted(deps)
        lines = ["## Key Dependencies", ""]
        lines += _bullets(f"`{name}` {deps[name]}" for name in names[:MAX_LISTED_DEPENDENCIES])
        if len(names) > MAX_LISTED_DEPENDENCIES:
            lines.append(f"- ... and {len(names) - MAX_LISTED_DEPENDENCIES} more")
        return lines

    def _decisions_section(self) -> list[str]:
        log = self._decisions.for_context().rstrip("\n")
        if not log:
            return []
        return ["## Architectural Decisions", "", log]
