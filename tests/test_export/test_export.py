"""Tests for text and JSON report export."""

from __future__ import annotations

import json

import pytest

from promptlint.analysis.schemas import (
    AnalysisReport,
    FileReport,
    Finding,
    Span,
)
from promptlint.constants import RuleId
from promptlint.export import export_json, export_report, render_text


def _finding(rule_id: RuleId, line: int, path: str = "app/a.rb") -> Finding:
    return Finding(
        rule_id=rule_id,
        message="message text",
        span=Span(
            start_line=line,
            start_column=2,
            end_line=line,
            end_column=10,
            start_byte=0,
            end_byte=8,
        ),
        path=path,
    )


@pytest.fixture
def report() -> AnalysisReport:
    return AnalysisReport(
        files=[
            FileReport(
                path="app/a.rb",
                findings=[
                    _finding(RuleId.TOKEN_BUDGET, 3),
                    _finding(RuleId.HEADING_FORMAT, 9),
                ],
            ),
            FileReport(path="app/b.rb", error="Syntax error at app/b.rb:1"),
            FileReport(path="app/c.rb"),
        ]
    )


class TestFinding:
    def test_diagnostic(self) -> None:
        finding = _finding(RuleId.TOKEN_BUDGET, 3)
        assert finding.diagnostic == (
            "app/a.rb:3:3: prompt-token-budget: message text"
        )

    def test_diagnostic_without_path(self) -> None:
        finding = _finding(RuleId.TOKEN_BUDGET, 3).model_copy(
            update={"path": None}
        )
        assert finding.diagnostic.startswith("3:3: prompt-token-budget")

    def test_diagnostic_is_serialized(self) -> None:
        dumped = _finding(RuleId.HEADING_FORMAT, 1).model_dump()
        assert "diagnostic" in dumped


class TestReport:
    def test_totals(self, report: AnalysisReport) -> None:
        assert len(report.findings) == 2
        assert [f.path for f in report.failed_files] == ["app/b.rb"]
        assert report.counts_by_rule() == {
            "prompt-heading-format": 1,
            "prompt-token-budget": 1,
        }


class TestText:
    def test_lines(self, report: AnalysisReport) -> None:
        lines = render_text(report).splitlines()
        assert lines == [
            "app/a.rb:3:3: prompt-token-budget: message text",
            "app/a.rb:9:3: prompt-heading-format: message text",
            "app/b.rb: error: Syntax error at app/b.rb:1",
            "",
            "3 files inspected, 2 findings, 1 failed",
        ]

    def test_empty_report(self) -> None:
        assert render_text(AnalysisReport()) == "0 files inspected, 0 findings"

    def test_singular_summary(self) -> None:
        report = AnalysisReport(
            files=[
                FileReport(
                    path="a.rb",
                    findings=[_finding(RuleId.TOKEN_BUDGET, 1, "a.rb")],
                )
            ]
        )
        assert render_text(report).endswith("1 file inspected, 1 finding")


class TestJson:
    def test_envelope(self, report: AnalysisReport) -> None:
        payload = json.loads(export_json(report))
        assert payload["tool"] == "promptlint"
        assert "generated_at" in payload
        assert payload["summary"] == {
            "file_count": 3,
            "failed_count": 1,
            "finding_count": 2,
            "by_rule": {
                "prompt-heading-format": 1,
                "prompt-token-budget": 1,
            },
        }
        first = payload["files"][0]["findings"][0]
        assert first == {
            "rule_id": "prompt-token-budget",
            "message": "message text",
            "line": 3,
            "column": 3,
            "end_line": 3,
            "end_column": 11,
        }
        assert payload["files"][1]["error"].startswith("Syntax error")


class TestDispatch:
    def test_formats(self, report: AnalysisReport) -> None:
        assert export_report(report, "text") == render_text(report)
        assert json.loads(export_report(report, "json"))["tool"] == (
            "promptlint"
        )

    def test_unknown_format(self, report: AnalysisReport) -> None:
        with pytest.raises(ValueError, match="Unsupported format: xml"):
            export_report(report, "xml")
