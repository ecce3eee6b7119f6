"""Prompt analysis — rule engine over tree-sitter syntax trees."""

from promptlint.analysis.engine import (
    analyze_file,
    analyze_paths,
    analyze_source,
    analyze_tree,
)
from promptlint.analysis.schemas import (
    AnalysisReport,
    FileReport,
    Finding,
    Span,
)
from promptlint.analysis.syntax import NodeKind, SyntaxNode, SyntaxTree

__all__ = [
    "AnalysisReport",
    "FileReport",
    "Finding",
    "NodeKind",
    "Span",
    "SyntaxNode",
    "SyntaxTree",
    "analyze_file",
    "analyze_paths",
    "analyze_source",
    "analyze_tree",
]
