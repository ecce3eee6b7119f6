"""Plain-text export, one diagnostic per line."""

from __future__ import annotations

from promptlint.analysis.schemas import AnalysisReport


def render_text(report: AnalysisReport) -> str:
    """Render findings and failed files followed by a summary line."""
    lines: list[str] = []
    for file_report in report.files:
        if file_report.error:
            lines.append(f"{file_report.path}: error: {file_report.error}")
        lines.extend(f.diagnostic for f in file_report.findings)

    if lines:
        lines.append("")
    lines.append(_summary(report))
    return "\n".join(lines)


def _summary(report: AnalysisReport) -> str:
    files = len(report.files)
    findings = len(report.findings)
    summary = (
        f"{files} file{'s' if files != 1 else ''} inspected, "
        f"{findings} finding{'s' if findings != 1 else ''}"
    )
    failed = len(report.failed_files)
    if failed:
        summary += f", {failed} failed"
    return summary
