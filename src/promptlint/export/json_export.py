"""JSON export — structured envelope."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from promptlint import __version__
from promptlint.analysis.schemas import AnalysisReport, Finding


def export_json(report: AnalysisReport) -> str:
    """Export an analysis run as a JSON document."""
    payload: dict[str, Any] = {
        "tool": "promptlint",
        "version": __version__,
        "generated_at": datetime.now(UTC).isoformat(),
        "summary": {
            "file_count": len(report.files),
            "failed_count": len(report.failed_files),
            "finding_count": len(report.findings),
            "by_rule": report.counts_by_rule(),
        },
        "files": [
            {
                "path": f.path,
                "error": f.error,
                "findings": [_finding_to_dict(x) for x in f.findings],
            }
            for f in report.files
        ],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def _finding_to_dict(finding: Finding) -> dict[str, Any]:
    return {
        "rule_id": str(finding.rule_id),
        "message": finding.message,
        "line": finding.span.start_line,
        "column": finding.span.start_column + 1,
        "end_line": finding.span.end_line,
        "end_column": finding.span.end_column + 1,
    }
