"""Data models for codebase analysis results."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

STRUCTURE_STANDARD = "standard"
STRUCTURE_MONOREPO = "monorepo"


@dataclass
class Language:
    """A recognized language and its share of the recognized files."""
    name: str
    extension: str
    file_count: int
    percentage: float

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "extension": self.extension,
            "fileCount": self.file_count,
            "percentage": self.percentage,
        }


@dataclass
class Framework:
    """The single framework detected from the package manifest."""
    name: str
    version: str = ""

    def to_dict(self) -> dict:
        data = {"name": self.name}
        if self.version:
            data["version"] = self.version
        return data


@dataclass
class Structure:
    """Project layout inferred from well-known directories and files."""
    type: str = STRUCTURE_STANDARD
    src_dir: Optional[str] = None
    folders: list[str] = field(default_factory=list)
    entry_point: Optional[str] = None

    def to_dict(self) -> dict:
        data: dict = {"type": self.type}
        if self.src_dir:
            data["srcDir"] = self.src_dir
        data["folders"] = list(self.folders)
        if self.entry_point:
            data["entryPoint"] = self.entry_point
        return data


@dataclass
class PackageInfo:
    """Package manager and declared dependencies (name -> version)."""
    manager: Optional[str] = None
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        data: dict = {"manager": self.manager or ""}
        if self.dependencies:
            data["dependencies"] = dict(self.dependencies)
        if self.dev_dependencies:
            data["devDependencies"] = dict(self.dev_dependencies)
        return data


@dataclass
class Patterns:
    """Detected conventions; None means "not detected"."""
    naming_convention: Optional[str] = None
    export_style: Optional[str] = None
    test_framework: Optional[str] = None
    linter: Optional[str] = None
    formatter: Optional[str] = None
    orm: Optional[str] = None
    state_management: Optional[str] = None
    styling: Optional[str] = None

    # attribute name -> wire key
    WIRE_KEYS = {
        "naming_convention": "namingConvention",
        "export_style": "exportStyle",
        "test_framework": "testFramework",
        "linter": "linter",
        "formatter": "formatter",
        "orm": "orm",
        "state_management": "stateManagement",
        "styling": "styling",
    }

    def to_dict(self) -> dict:
        return {
            wire: getattr(self, attr)
            for attr, wire in self.WIRE_KEYS.items()
            if getattr(self, attr) is not None
        }


@dataclass
class Decision:
    """An architectural decision attached to an analysis by the decision log."""
    date: str
    text: str
    context: str = ""

    def to_dict(self) -> dict:
        data = {"date": self.date, "text": self.text}
        if self.context:
            data["context"] = self.context
        return data


@dataclass
class Analysis:
    """Complete result of one analyzer run."""
    root_path: Path
    languages: list[Language] = field(default_factory=list)
    framework: Optional[Framework] = None
    structure: Structure = field(default_factory=Structure)
    packages: PackageInfo = field(default_factory=PackageInfo)
    patterns: Patterns = field(default_factory=Patterns)
    decisions: list[Decision] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        """Number of files with a recognized extension."""
        return sum(lang.file_count for lang in self.languages)

    def language_names(self) -> set[str]:
        return {lang.name for lang in self.languages}

    def to_dict(self) -> dict:
        """Serialize to the camelCase shape used by --json and the tool server."""
        data: dict = {
            "rootPath": str(self.root_path),
            "languages": [lang.to_dict() for lang in self.languages],
        }
        if self.framework is not None:
            data["framework"] = self.framework.to_dict()
        data["structure"] = self.structure.to_dict()
        data["packages"] = self.packages.to_dict()
        data["patterns"] = self.patterns.to_dict()
        data["decisions"] = [d.to_dict() for d in self.decisions]
        return data
