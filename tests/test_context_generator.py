"""Tests for the context document generator."""
import pytest

from contextpilot.analyzers.codebase_analyzer import CodebaseAnalyzer
from contextpilot.analyzers.models import (
    Analysis,
    Framework,
    Language,
    PackageInfo,
    Patterns,
    Structure,
)
from contextpilot.core.config_service import ConfigService
from contextpilot.core.context_generator import (
    GENERATED_NOTICE,
    MAX_LISTED_DEPENDENCIES,
    ContextGenerator,
)
from contextpilot.core.decision_service import DecisionService
from contextpilot.errors import ConfigError


@pytest.fixture
def next_analysis(project):
    return Analysis(
        root_path=project,
        languages=[
            Language("JavaScript", ".js", 1, 20.0),
            Language("TypeScript", ".ts", 4, 80.0),
        ],
        framework=Framework("Next.js", "^14.2.0"),
        structure=Structure(type="monorepo", src_dir="src", folders=["src", "lib"],
                            entry_point="src/index.ts"),
        packages=PackageInfo(manager="npm", dependencies={"next": "^14.2.0", "zod": "3"}),
        patterns=Patterns(naming_convention="camelCase", export_style="mixed",
                          test_framework="Vitest", orm="Prisma", styling="Tailwind CSS"),
    )


class TestRender:
    def test_header_per_target(self, next_analysis):
        gen = ContextGenerator(next_analysis)
        assert gen.render("claude").startswith("# CLAUDE.md\n\n" + GENERATED_NOTICE)
        assert gen.render("cursor").startswith("# Cursor Rules\n")
        assert gen.render("copilot").startswith("# Copilot Instructions\n")

    def test_tech_stack(self, next_analysis):
        body = ContextGenerator(next_analysis).render_body()
        assert "## Tech Stack" in body
        # most files first
        assert body.index("- TypeScript (4 files, 80.0%)") < body.index("- JavaScript (1 files, 20.0%)")
        assert "- Framework: Next.js ^14.2.0" in body
        assert "- Package manager: npm" in body

    def test_structure(self, next_analysis):
        body = ContextGenerator(next_analysis).render_body()
        assert "- Layout: Monorepo" in body
        assert "- Source directory: `src/`" in body
        assert "- Entry point: `src/index.ts`" in body
        assert "- Key folders: `src/`, `lib/`" in body

    def test_conventions_and_patterns(self, next_analysis):
        body = ContextGenerator(next_analysis).render_body()
        assert "- Naming: camelCase" in body
        assert "- Tests: Vitest" in body
        assert "## Patterns" in body
        assert "- ORM: Prisma" in body
        assert "- Styling: Tailwind CSS" in body

    def test_dependencies_sorted(self, next_analysis):
        body = ContextGenerator(next_analysis).render_body()
        assert "## Key Dependencies\n\n- `next` ^14.2.0\n- `zod` 3" in body

    def test_dependencies_capped(self, project):
        deps = {f"pkg{i:02d}": "1" for i in range(MAX_LISTED_DEPENDENCIES + 3)}
        analysis = Analysis(root_path=project, packages=PackageInfo("npm", deps))
        body = ContextGenerator(analysis).render_body()
        assert "- ... and 3 more" in body
        assert "`pkg17`" not in body

    def test_empty_analysis(self, project):
        body = ContextGenerator(Analysis(root_path=project)).render_body()
        assert "- No source files detected" in body
        assert "- Layout: Standard single-package layout" in body
        assert "## Conventions" not in body
        assert "## Patterns" not in body
        assert "## Key Dependencies" not in body
        assert "## Architectural Decisions" not in body

    def test_decisions_included(self, next_analysis, project):
        DecisionService(project).add("Use Prisma over Drizzle")
        body = ContextGenerator(next_analysis).render_body()
        assert "## Architectural Decisions" in body
        assert ":** Use Prisma over Drizzle" in body


class TestGenerateAll:
    def test_writes_all_targets(self, project, write_files):
        write_files(project, {"package.json": {"dependencies": {"express": "4"}}, "index.js": ""})
        analysis = CodebaseAnalyzer(project).analyze()
        result = ContextGenerator(analysis, project).generate_all()

        assert [t for t, _ in result.generated_files] == ["cursor", "claude", "copilot"]
        for rel in (".cursorrules", "CLAUDE.md", ".github/copilot-instructions.md"):
            content = (project / rel).read_text()
            assert "- Framework: Express 4" in content
        assert result.config_path == project / ".contextpilot" / "config.yaml"

    def test_records_sync_time(self, project):
        config = ConfigService(project)
        ContextGenerator(Analysis(root_path=project), project, config=config).generate_all()
        assert config.is_initialized()
        assert config.read_project_state().last_sync is not None

    def test_targets_from_config(self, project, contextpilot_home):
        (contextpilot_home / "config.yaml").write_text("output:\n  targets: [claude]\n")
        result = ContextGenerator(Analysis(root_path=project), project).generate_all()
        assert [t for t, _ in result.generated_files] == ["claude"]
        assert not (project / ".cursorrules").exists()

    def test_unknown_target(self, project):
        with pytest.raises(ConfigError, match="windsurf"):
            ContextGenerator(Analysis(root_path=project), project).generate_all(["windsurf"])
        assert not (project / ".contextpilot").exists()
