"""Exception hierarchy for failures that leave the rule engine.

Rules themselves never raise: a structural mismatch means the rule does
not apply. Only these conditions propagate to the host:

- the Ruby grammar cannot be loaded (nothing can be analyzed)
- a source unit cannot be read or parsed (that unit fails, others run)
"""

from __future__ import annotations

from pathlib import Path


class PromptLintError(Exception):
    """Base class for all promptlint errors."""


class GrammarUnavailableError(PromptLintError):
    """The tree-sitter grammar for a language is not importable."""

    def __init__(self, language: str, module_name: str | None) -> None:
        self.language = language
        self.module_name = module_name
        hint = f" (pip install {module_name.replace('_', '-')})" if module_name else ""
        super().__init__(f"No tree-sitter grammar for {language}{hint}")


class SourceReadError(PromptLintError):
    """A source file could not be read."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {path}: {reason}")


class SourceSyntaxError(PromptLintError):
    """A source unit does not parse cleanly."""

    def __init__(self, path: Path | None, line: int) -> None:
        self.path = path
        self.line = line
        where = f"{path}:{line}" if path else f"line {line}"
        super().__init__(f"Syntax error at {where}")
