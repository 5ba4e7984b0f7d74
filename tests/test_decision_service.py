"""Tests for the decision log service."""
from datetime import date

import pytest

from contextpilot.core.decision_service import (
    HEADER,
    DecisionService,
    format_entry,
    parse_decisions,
    summarize,
)
from contextpilot.errors import DecisionNotFoundError
from contextpilot.models import DecisionRecord


class TestSummarize:
    def test_short_text_unchanged(self):
        assert summarize("Use Redis") == "Use Redis"

    def test_first_line_only(self):
        assert summarize("Use Redis\nbecause speed") == "Use Redis"

    def test_truncated(self):
        text = "x" * 80
        result = summarize(text)
        assert len(result) == 60
        assert result.endswith("...")


class TestFormatAndParse:
    def test_format_entry(self):
        entry = format_entry(DecisionRecord(id=2, date="2026-01-05", text="Use Prisma",
                                            context="Team knows it"))
        assert entry == (
            "## [2] Use Prisma\n"
            "**Date:** 2026-01-05\n\n"
            "Use Prisma\n"
            "\n**Context:** Team knows it\n"
            "\n---\n\n"
        )

    def test_parse_multiple(self):
        content = HEADER + "".join([
            format_entry(DecisionRecord(1, "2026-01-01", "First")),
            format_entry(DecisionRecord(2, "2026-01-02", "Second\nwith detail", "why")),
        ])
        decisions = parse_decisions(content)
        assert decisions == [
            DecisionRecord(1, "2026-01-01", "First"),
            DecisionRecord(2, "2026-01-02", "Second\nwith detail", "why"),
        ]

    def test_parse_ignores_header(self):
        assert parse_decisions(HEADER) == []

    def test_structural_text_lines_escaped(self):
        text = "Split the API\n## [9] not a heading\n---\n**Date:** never\n\\---"
        entry = format_entry(DecisionRecord(1, "2026-01-01", text))
        assert "\n\\## [9] not a heading\n" in entry
        assert "\n\\---\n" in entry
        assert "\n\\**Date:** never\n" in entry
        assert "\n\\\\---\n" in entry
        assert parse_decisions(HEADER + entry) == [DecisionRecord(1, "2026-01-01", text)]

    def test_multiline_context_kept_on_one_line(self):
        entry = format_entry(DecisionRecord(1, "2026-01-01", "Use Go", "fast\nsimple"))
        assert parse_decisions(entry)[0].context == "fast simple"


class TestDecisionService:
    def test_add_first(self, project):
        svc = DecisionService(project)
        d = svc.add("Using Redis for sessions", "Scales better")
        assert d.id == 1
        assert d.date == date.today().isoformat()
        content = (project / ".contextpilot" / "decisions.md").read_text()
        assert content.startswith("# Architectural Decisions\n")
        assert "## [1] Using Redis for sessions" in content
        assert "**Context:** Scales better" in content

    def test_ids_increment(self, project):
        svc = DecisionService(project)
        svc.add("One")
        svc.add("Two")
        assert svc.add("Three").id == 3
        assert [d.text for d in svc.list()] == ["One", "Two", "Three"]

    def test_multiline_text_keeps_ids(self, project):
        svc = DecisionService(project)
        svc.add("Plain")
        svc.add("Layers\n## [8] heading-like\n---\n## [9] another")
        svc.add("Last")
        decisions = svc.list()
        assert [d.id for d in decisions] == [1, 2, 3]
        assert decisions[1].text == "Layers\n## [8] heading-like\n---\n## [9] another"

    def test_list_empty(self, project):
        assert DecisionService(project).list() == []

    def test_delete(self, project):
        svc = DecisionService(project)
        svc.add("One")
        svc.add("Two")
        svc.delete(1)
        remaining = svc.list()
        assert [(d.id, d.text) for d in remaining] == [(2, "Two")]
        assert (project / ".contextpilot" / "decisions.md").read_text().startswith(HEADER)

    def test_ids_follow_last_after_delete(self, project):
        svc = DecisionService(project)
        svc.add("One")
        svc.add("Two")
        svc.delete(1)
        assert svc.add("Three").id == 3

    def test_delete_missing(self, project):
        svc = DecisionService(project)
        svc.add("One")
        with pytest.raises(DecisionNotFoundError):
            svc.delete(9)

    def test_for_context(self, project):
        svc = DecisionService(project)
        d1 = svc.add("Use Prisma")
        d2 = svc.add("Use Vitest")
        assert svc.for_context() == (
            f"- **{d1.date}:** Use Prisma\n"
            f"- **{d2.date}:** Use Vitest\n"
        )

    def test_for_context_empty(self, project):
        assert DecisionService(project).for_context() == ""
