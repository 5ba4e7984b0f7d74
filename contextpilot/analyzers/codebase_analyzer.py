"""Codebase analyzer.

Walks the project tree once, builds a language histogram from file
extensions, detects the framework and tooling from root manifests, and
infers the project structure. Detection is heuristic: extension tables,
dependency names and directory presence, each evaluated as an ordered
probe list where the first match wins.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from contextpilot.errors import FilesystemError

from .models import (
    STRUCTURE_MONOREPO,
    STRUCTURE_STANDARD,
    Analysis,
    Framework,
    Language,
    PackageInfo,
    Patterns,
    Structure,
)

logger = logging.getLogger("contextpilot.analyzer")

# Directories pruned at any depth (exact base-name match)
IGNORED_DIRS: frozenset[str] = frozenset({
    "node_modules",
    "vendor",
    ".git",
    "dist",
    "build",
    ".next",
    "__pycache__",
    ".venv",
    "venv",
    ".idea",
    ".vscode",
    "coverage",
    ".nyc_output",
})

# Recognized extension -> language display name
LANGUAGE_EXTENSIONS: dict[str, str] = {
    ".js": "JavaScript",
    ".ts": "TypeScript",
    ".jsx": "JavaScript (JSX)",
    ".tsx": "TypeScript (TSX)",
    ".go": "Go",
    ".py": "Python",
    ".rb": "Ruby",
    ".rs": "Rust",
    ".java": "Java",
    ".kt": "Kotlin",
    ".swift": "Swift",
    ".c": "C",
    ".cpp": "C++",
    ".h": "C/C++ Header",
    ".cs": "C#",
    ".php": "PHP",
    ".vue": "Vue",
    ".svelte": "Svelte",
}

PACKAGE_MANIFEST = "package.json"

DEPENDENCIES = "dependencies"
DEV_DEPENDENCIES = "devDependencies"


@dataclass(frozen=True)
class DependencyProbe:
    """Matches when ``package`` is declared in the manifest ``section``."""
    section: str
    package: str
    label: str

    def matches(self, manifest: dict[str, dict[str, str]]) -> bool:
        return self.package in manifest.get(self.section, {})


def _deps(*pairs: tuple[str, str]) -> tuple[DependencyProbe, ...]:
    return tuple(DependencyProbe(DEPENDENCIES, pkg, label) for pkg, label in pairs)


def _dev_deps(*pairs: tuple[str, str]) -> tuple[DependencyProbe, ...]:
    return tuple(DependencyProbe(DEV_DEPENDENCIES, pkg, label) for pkg, label in pairs)


FRAMEWORK_PROBES: tuple[DependencyProbe, ...] = _deps(
    ("next", "Next.js"),
    ("express", "Express"),
    ("react", "React"),
    ("vue", "Vue.js"),
    ("svelte", "Svelte"),
)

# Patterns attribute -> ordered probes (first match wins per category)
PATTERN_PROBES: dict[str, tuple[DependencyProbe, ...]] = {
    "orm": _deps(
        ("prisma", "Prisma"),
        ("@prisma/client", "Prisma"),
        ("drizzle-orm", "Drizzle"),
        ("typeorm", "TypeORM"),
        ("mongoose", "Mongoose"),
    ),
    "test_framework": _dev_deps(
        ("vitest", "Vitest"),
        ("jest", "Jest"),
        ("mocha", "Mocha"),
    ),
    "styling": (
        DependencyProbe(DEPENDENCIES, "tailwindcss", "Tailwind CSS"),
        DependencyProbe(DEV_DEPENDENCIES, "tailwindcss", "Tailwind CSS"),
        DependencyProbe(DEPENDENCIES, "styled-components", "Styled Components"),
    ),
    "state_management": _deps(
        ("zustand", "Zustand"),
        ("@reduxjs/toolkit", "Redux Toolkit"),
        ("jotai", "Jotai"),
        ("recoil", "Recoil"),
    ),
    "linter": _dev_deps(
        ("eslint", "ESLint"),
    ),
    "formatter": _dev_deps(
        ("prettier", "Prettier"),
        ("biome", "Biome"),
    ),
}

# Non-npm manifests: each group is first-match-wins, and across groups the
# last group that matches owns packages.manager (npm is checked before all).
PACKAGE_MANAGER_PROBES: tuple[tuple[tuple[str, str], ...], ...] = (
    (("go.mod", "go"),),
    (("pyproject.toml", "poetry/pip"), ("requirements.txt", "pip")),
)

COMMON_DIRS: tuple[str, ...] = (
    "src", "app", "lib", "components", "pages", "api",
    "utils", "hooks", "services", "models", "types",
)

SRC_DIR_CANDIDATES: tuple[str, ...] = ("src", "app")

MONOREPO_INDICATORS: tuple[str, ...] = (
    "packages", "apps", "pnpm-workspace.yaml", "lerna.json", "turbo.json",
)

ENTRY_POINT_CANDIDATES: tuple[str, ...] = (
    "index.ts", "index.js", "main.ts", "main.js", "main.go", "main.py", "app.py",
)


@dataclass(frozen=True)
class NamingRule:
    """Naming convention implied by the presence of one of ``languages``."""
    languages: tuple[str, ...]
    naming_convention: str
    export_style: Optional[str] = None


NAMING_RULES: tuple[NamingRule, ...] = (
    NamingRule(("Go",), "camelCase/PascalCase", "named (capitalized)"),
    NamingRule(("Python",), "snake_case"),
    NamingRule(("TypeScript", "JavaScript"), "camelCase", "mixed"),
)


def first_match(
    probes: Iterable[DependencyProbe],
    manifest: dict[str, dict[str, str]],
) -> Optional[DependencyProbe]:
    """Return the first probe that matches the manifest, or None."""
    for probe in probes:
        if probe.matches(manifest):
            return probe
    return None


def walk_files(root: Path, ignored: frozenset[str] = IGNORED_DIRS) -> Iterator[Path]:
    """Yield regular files under ``root``, pruning ignored directories.

    Directory symlinks are not followed. Entries that fail to stat or list
    are skipped. The walk keeps its own stack, so depth is not bounded by
    the interpreter's recursion limit.
    """
    stack: list[Iterator[os.DirEntry]] = []
    children = _list_dir(root)
    if children is not None:
        stack.append(iter(children))

    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue
        try:
            if entry.is_dir(follow_symlinks=False):
                if entry.name in ignored:
                    continue
                children = _list_dir(Path(entry.path))
                if children is not None:
                    stack.append(iter(children))
            elif entry.is_file():
                yield Path(entry.path)
        except OSError as e:
            logger.debug("Skipping %s: %s", entry.path, e)


def _list_dir(path: Path) -> Optional[list[os.DirEntry]]:
    try:
        with os.scandir(path) as entries:
            return list(entries)
    except OSError as e:
        logger.debug("Skipping unreadable directory %s: %s", path, e)
        return None


def file_extension(name: str) -> str:
    """Lowercased extension from the last dot of ``name``.

    Unlike ``Path.suffix``, a bare dotfile such as ``.ts`` has the
    extension ``.ts``.
    """
    dot = name.rfind(".")
    return name[dot:].lower() if dot >= 0 else ""


def load_package_manifest(path: Path) -> Optional[dict[str, dict[str, str]]]:
    """Read package.json dependency maps, or None if absent or malformed.

    A missing or null section is an empty map; a section that is not a
    string -> string map makes the whole manifest malformed.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as e:
        logger.debug("Ignoring unreadable manifest %s: %s", path, e)
        return None

    if not isinstance(data, dict):
        logger.debug("Ignoring manifest %s: top level is not an object", path)
        return None

    manifest: dict[str, dict[str, str]] = {}
    for section in (DEPENDENCIES, DEV_DEPENDENCIES):
        value = data.get(section)
        if value is None:
            manifest[section] = {}
            continue
        if not isinstance(value, dict) or not all(
            isinstance(version, str) for version in value.values()
        ):
            logger.debug("Ignoring manifest %s: malformed %s", path, section)
            return None
        manifest[section] = dict(value)
    return manifest


class CodebaseAnalyzer:
    """Produces an Analysis for one project root."""

    def __init__(self, root_path: Path | str):
        self.root_path = Path(root_path).resolve()
        self.ignored_dirs = IGNORED_DIRS

    def analyze(self) -> Analysis:
        """Analyze the bound root and return a fresh Analysis.

        Raises:
            FilesystemError: If the root is missing, not a directory, or
                cannot be listed.
        """
        root = self.root_path
        self._check_root(root)
        logger.info("Analyzing codebase: %s", root)

        analysis = Analysis(root_path=root)

        # Phase 1: language histogram
        analysis.languages = self._count_languages(root)
        logger.info(
            "Recognized %d files across %d languages",
            analysis.total_files, len(analysis.languages),
        )

        # Phase 2: manifests
        self._detect_packages(root, analysis)

        # Phase 3: structure
        analysis.structure = self._analyze_structure(root)

        # Phase 4: naming fallback
        self._detect_naming(analysis)

        return analysis

    def _check_root(self, root: Path) -> None:
        try:
            with os.scandir(root):
                pass
        except FileNotFoundError:
            raise FilesystemError(str(root), f"{root} does not exist")
        except NotADirectoryError:
            raise FilesystemError(str(root), f"{root} is not a directory")
        except OSError as e:
            raise FilesystemError(str(root), e.strerror or str(e))

    def _count_languages(self, root: Path) -> list[Language]:
        counts: dict[str, int] = {}
        total = 0
        for path in walk_files(root, self.ignored_dirs):
            ext = file_extension(path.name)
            if ext not in LANGUAGE_EXTENSIONS:
                continue
            counts[ext] = counts.get(ext, 0) + 1
            total += 1

        languages: list[Language] = []
        for ext, count in counts.items():
            languages.append(Language(
                name=LANGUAGE_EXTENSIONS[ext],
                extension=ext,
                file_count=count,
                percentage=count / total * 100,
            ))
        return languages

    def _detect_packages(self, root: Path, analysis: Analysis) -> None:
        manifest = load_package_manifest(root / PACKAGE_MANIFEST)
        if manifest is not None:
            analysis.packages = PackageInfo(
                manager="npm",
                dependencies=manifest[DEPENDENCIES],
                dev_dependencies=manifest[DEV_DEPENDENCIES],
            )
            self._detect_framework(manifest, analysis)
            self._detect_tooling(manifest, analysis.patterns)

        for group in PACKAGE_MANAGER_PROBES:
            for filename, manager in group:
                if (root / filename).exists():
                    if analysis.packages.manager and analysis.packages.manager != manager:
                        logger.debug(
                            "%s overrides package manager %s",
                            filename, analysis.packages.manager,
                        )
                    analysis.packages.manager = manager
                    break

    def _detect_framework(self, manifest: dict, analysis: Analysis) -> None:
        probe = first_match(FRAMEWORK_PROBES, manifest)
        if probe is None:
            return
        version = manifest[probe.section][probe.package]
        analysis.framework = Framework(name=probe.label, version=version)
        logger.debug("Framework detected: %s %s", probe.label, version)

    def _detect_tooling(self, manifest: dict, patterns: Patterns) -> None:
        for attr, probes in PATTERN_PROBES.items():
            probe = first_match(probes, manifest)
            if probe is not None:
                setattr(patterns, attr, probe.label)

    def _analyze_structure(self, root: Path) -> Structure:
        structure = Structure(type=STRUCTURE_STANDARD)
        structure.folders = [name for name in COMMON_DIRS if (root / name).is_dir()]

        for candidate in SRC_DIR_CANDIDATES:
            if candidate in structure.folders:
                structure.src_dir = candidate
                break

        for indicator in MONOREPO_INDICATORS:
            if (root / indicator).exists():
                structure.type = STRUCTURE_MONOREPO
                logger.debug("Monorepo indicator found: %s", indicator)
                break

        structure.entry_point = self._find_entry_point(root, structure.src_dir)
        return structure

    def _find_entry_point(self, root: Path, src_dir: Optional[str]) -> Optional[str]:
        for candidate in ENTRY_POINT_CANDIDATES:
            if (root / candidate).exists():
                return candidate
        if src_dir:
            for candidate in ENTRY_POINT_CANDIDATES:
                if (root / src_dir / candidate).exists():
                    return f"{src_dir}/{candidate}"
        return None

    def _detect_naming(self, analysis: Analysis) -> None:
        patterns = analysis.patterns
        if patterns.naming_convention:
            return
        detected = analysis.language_names()
        for rule in NAMING_RULES:
            if detected.intersection(rule.languages):
                patterns.naming_convention = rule.naming_convention
                if rule.export_style:
                    patterns.export_style = rule.export_style
                return
