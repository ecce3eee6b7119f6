"""End-to-end tests for the rule engine."""

from __future__ import annotations

from pathlib import Path

import pytest

from promptlint.analysis.engine import (
    analyze_file,
    analyze_paths,
    analyze_source,
)
from promptlint.analysis.rules import ALL_RULES
from promptlint.analysis.tokens import TokenCounter
from promptlint.config import RuleConfig, Settings
from promptlint.constants import RuleId
from promptlint.errors import SourceSyntaxError

FIXTURE_DIR = Path(__file__).resolve().parent.parent / "fixtures"


def _ids(source: str, tokens: TokenCounter) -> list[RuleId]:
    findings = analyze_source(source, rules=ALL_RULES, token_counter=tokens)
    return [f.rule_id for f in findings]


def _chat(extra: str, content: str = "Hello") -> str:
    return f"""
class ChatService
  def call
    OpenAI::Client.new.chat(
      parameters: {{
        model: "gpt-4",
        messages: [{{ role: "user", content: "{content}" }}]{extra}
      }}
    )
  end
end
"""


class TestEndToEnd:
    def test_system_literal_without_heading(
        self, tokens: TokenCounter
    ) -> None:
        source = """
class PromptHelper
  def build
    payload = { system: "You are an AI assistant." }
  end
end
"""
        assert _ids(source, tokens) == [RuleId.HEADING_FORMAT]

    def test_interpolated_system_heredoc(self, tokens: TokenCounter) -> None:
        source = """
class ChatHelper
  def generate_system_prompt(user_msg)
    <<~SYSTEM
      You are an AI assistant.
      Context: #{user_msg}
    SYSTEM
  end
end
"""
        assert _ids(source, tokens) == [RuleId.SYSTEM_INJECTION]

    def test_chat_without_termination(self, tokens: TokenCounter) -> None:
        assert _ids(_chat(""), tokens) == [RuleId.MISSING_TERMINATION]

    def test_chat_with_max_tokens(self, tokens: TokenCounter) -> None:
        assert _ids(_chat(",\n        max_tokens: 100"), tokens) == []

    def test_high_temperature_precision_task(
        self, tokens: TokenCounter
    ) -> None:
        source = _chat(
            ",\n        max_tokens: 100,\n        temperature: 0.9",
            content="Calculate the exact result",
        )
        findings = analyze_source(source, token_counter=tokens)
        assert [f.rule_id for f in findings] == [RuleId.TEMPERATURE_RANGE]
        assert "0.9 > 0.7" in findings[0].message

    def test_high_temperature_creative_task(
        self, tokens: TokenCounter
    ) -> None:
        source = _chat(
            ",\n        max_tokens: 100,\n        temperature: 0.9",
            content="Write a creative story",
        )
        assert _ids(source, tokens) == []


class TestOrdering:
    def test_findings_follow_source_position(
        self, tokens: TokenCounter
    ) -> None:
        source = """
class PromptHelper
  def build
    client = OpenAI::Client.new
    client.chat(
      parameters: {
        messages: [{ role: "user", content: "Verify the data" }],
        temperature: 0.9
      }
    )
    payload = { system: "No heading." }
  end
end
"""
        findings = analyze_source(source, token_counter=tokens)
        assert [f.rule_id for f in findings] == [
            RuleId.MISSING_TERMINATION,
            RuleId.TEMPERATURE_RANGE,
            RuleId.HEADING_FORMAT,
        ]
        assert [f.span.start_line for f in findings] == [5, 5, 11]

    def test_rule_subset(self, tokens: TokenCounter) -> None:
        source = _chat("")
        assert analyze_source(source, rules=(), token_counter=tokens) == []

    def test_config_is_applied(self, tokens: TokenCounter) -> None:
        source = 'def prompt\n  "one two three"\nend\n'
        findings = analyze_source(
            source, config=RuleConfig(max_tokens=2), token_counter=tokens
        )
        assert [f.rule_id for f in findings] == [RuleId.TOKEN_BUDGET]


class TestFailures:
    def test_syntax_error_raises(self) -> None:
        with pytest.raises(SourceSyntaxError, match="Syntax error"):
            analyze_source("class Foo\n  def bar(\nend\n")

    def test_syntax_error_is_a_failed_file(
        self, tmp_path: Path, tokens: TokenCounter
    ) -> None:
        path = tmp_path / "broken.rb"
        path.write_text("class PromptBroken\n  def (\n")
        report = analyze_file(path, RuleConfig(), token_counter=tokens)
        assert report.findings == []
        assert report.error is not None
        assert str(path) in report.error

    def test_unreadable_file(
        self, tmp_path: Path, tokens: TokenCounter
    ) -> None:
        report = analyze_file(
            tmp_path / "missing.rb", RuleConfig(), token_counter=tokens
        )
        assert report.error is not None
        assert report.error.startswith("Cannot read")


class TestAnalyzePaths:
    def test_fixture_project(self, tokens: TokenCounter) -> None:
        report = analyze_paths(
            [FIXTURE_DIR / "project"], Settings(), token_counter=tokens
        )
        paths = [Path(f.path).name for f in report.files]
        assert "prompt_builder.rb" in paths
        assert "chat_service.rb" in paths
        assert "notes.txt" not in paths
        assert report.failed_files == []
        counts = report.counts_by_rule()
        assert counts[RuleId.HEADING_FORMAT] == 1
        assert counts[RuleId.SYSTEM_INJECTION] == 1
        assert counts[RuleId.MISSING_TERMINATION] == 1
        assert counts[RuleId.TEMPERATURE_RANGE] == 1
        assert all(f.path for f in report.findings)

    def test_max_tokens_option(
        self, tmp_path: Path, tokens: TokenCounter
    ) -> None:
        (tmp_path / "p.rb").write_text(
            'def prompt\n  "one two three four"\nend\n'
        )
        report = analyze_paths(
            [tmp_path],
            Settings(),
            options={"MaxTokens": 3},
            token_counter=tokens,
        )
        assert [f.rule_id for f in report.findings] == [RuleId.TOKEN_BUDGET]
        assert "(4 > 3 tokens)" in report.findings[0].message

    def test_disabled_rules_setting(
        self, tmp_path: Path, tokens: TokenCounter
    ) -> None:
        (tmp_path / "p.rb").write_text(
            'def prompt\n  payload = { system: "plain" }\nend\n'
        )
        settings = Settings(disabled_rules="prompt-heading-format")  # type: ignore[arg-type]
        report = analyze_paths([tmp_path], settings, token_counter=tokens)
        assert report.findings == []

    def test_units_are_independent(
        self, tmp_path: Path, tokens: TokenCounter
    ) -> None:
        (tmp_path / "a_broken.rb").write_text("def (\n")
        (tmp_path / "b_prompt.rb").write_text(
            'def prompt\n  payload = { system: "plain" }\nend\n'
        )
        report = analyze_paths([tmp_path], Settings(), token_counter=tokens)
        assert len(report.failed_files) == 1
        assert [f.rule_id for f in report.findings] == [
            RuleId.HEADING_FORMAT
        ]
