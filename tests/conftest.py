"""Shared test fixtures — Ruby parsing and a deterministic tokenizer."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable
from pathlib import Path

# Keep a developer's PROMPTLINT_* environment out of the tests.
for _key in [k for k in os.environ if k.startswith("PROMPTLINT_")]:
    del os.environ[_key]

import pytest

from promptlint.analysis.engine import analyze_source
from promptlint.analysis.rules import Rule
from promptlint.analysis.schemas import Finding
from promptlint.analysis.syntax import SyntaxTree
from promptlint.analysis.tokens import TokenCounter
from promptlint.config import RuleConfig

FIXTURE_DIR = Path(__file__).resolve().parent / "fixtures"


def word_counter() -> TokenCounter:
    """One token per whitespace-separated word."""
    return TokenCounter("whitespace", encoder=lambda text: text.split())


@pytest.fixture
def tokens() -> TokenCounter:
    return word_counter()


@pytest.fixture
def parse() -> Callable[[str], SyntaxTree]:
    def _parse(source: str) -> SyntaxTree:
        tree = SyntaxTree.parse(source)
        assert not tree.has_errors, "fixture source must parse cleanly"
        return tree

    return _parse


@pytest.fixture
def lint(tokens: TokenCounter) -> Callable[..., list[Finding]]:
    """Run selected rules over a Ruby snippet and return the findings."""

    def _lint(
        source: str,
        rules: Rule | Iterable[Rule],
        config: RuleConfig | None = None,
    ) -> list[Finding]:
        selected = (rules,) if isinstance(rules, Rule) else tuple(rules)
        return analyze_source(
            source,
            config=config or RuleConfig(),
            rules=selected,
            token_counter=tokens,
        )

    return _lint
