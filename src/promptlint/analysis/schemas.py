"""Pydantic models for analysis output."""

from pydantic import BaseModel, ConfigDict, Field, computed_field

from promptlint.constants import RuleId


class Span(BaseModel):
    """Source range of a node; lines are 1-based, columns 0-based."""

    model_config = ConfigDict(frozen=True)

    start_line: int
    start_column: int
    end_line: int
    end_column: int
    start_byte: int
    end_byte: int


class Finding(BaseModel):
    """A single rule violation anchored to a source span."""

    model_config = ConfigDict(frozen=True)

    rule_id: RuleId
    message: str
    span: Span
    path: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def diagnostic(self) -> str:
        """``path:line:col: rule-id: message`` (column 1-based)."""
        location = f"{self.span.start_line}:{self.span.start_column + 1}"
        prefix = f"{self.path}:{location}" if self.path else location
        return f"{prefix}: {self.rule_id}: {self.message}"


class FileReport(BaseModel):
    """Findings for one analyzed source unit."""

    path: str
    findings: list[Finding] = Field(default_factory=lambda: list[Finding]())
    error: str | None = None


class AnalysisReport(BaseModel):
    """Combined output of one analysis run."""

    files: list[FileReport] = Field(
        default_factory=lambda: list[FileReport]()
    )

    @property
    def findings(self) -> list[Finding]:
        return [f for report in self.files for f in report.findings]

    @property
    def failed_files(self) -> list[FileReport]:
        return [report for report in self.files if report.error]

    def counts_by_rule(self) -> dict[str, int]:
        """Number of findings per rule id, sorted by id."""
        counts: dict[str, int] = {}
        for finding in self.findings:
            counts[finding.rule_id] = counts.get(finding.rule_id, 0) + 1
        return dict(sorted(counts.items()))
