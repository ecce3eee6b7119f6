"""Export module — report rendering by output format."""

from collections.abc import Callable

from promptlint.analysis.schemas import AnalysisReport
from promptlint.constants import OutputFormat
from promptlint.export.json_export import export_json
from promptlint.export.text import render_text

__all__ = ["export_json", "export_report", "render_text"]

_EXPORTERS: dict[str, Callable[[AnalysisReport], str]] = {
    OutputFormat.TEXT: render_text,
    OutputFormat.JSON: export_json,
}


def export_report(report: AnalysisReport, fmt: str = "text") -> str:
    """Dispatch export by format string."""
    exporter = _EXPORTERS.get(fmt)
    if exporter is None:
        valid = ", ".join(_EXPORTERS)
        msg = f"Unsupported format: {fmt}. Use: {valid}"
        raise ValueError(msg)
    return exporter(report)
