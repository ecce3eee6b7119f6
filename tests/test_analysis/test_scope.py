"""Tests for prompt-scope classification."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from promptlint.analysis.scope import definition_name, is_prompt_scope
from promptlint.analysis.syntax import SyntaxNode, SyntaxTree

type Parse = Callable[[str], SyntaxTree]


def _string(tree: SyntaxTree) -> SyntaxNode:
    return next(n for n in tree.walk() if n.type == "string")


@pytest.mark.parametrize(
    "source",
    [
        'class PromptHelper\n  def build\n    "x"\n  end\nend\n',
        'class Helper\n  def build_prompt\n    "x"\n  end\nend\n',
        'module AIPrompts\n  def self.build\n    "x"\n  end\nend\n',
        'class Chat::SystemPROMPT\n  def build\n    "x"\n  end\nend\n',
        'def prompt\n  "x"\nend\n',
    ],
)
def test_prompt_scopes(parse: Parse, source: str) -> None:
    assert is_prompt_scope(_string(parse(source)))


@pytest.mark.parametrize(
    "source",
    [
        'x = "prompt"\n',
        'class Helper\n  def build\n    "x"\n  end\nend\n',
        'class Prompt::Helper\n  def build\n    "x"\n  end\nend\n',
    ],
)
def test_non_prompt_scopes(parse: Parse, source: str) -> None:
    """Only declared names count; string contents and qualifiers do not."""
    assert not is_prompt_scope(_string(parse(source)))


def test_nesting_is_monotonic(parse: Parse) -> None:
    """A prompt-named outer namespace covers everything inside it."""
    source = """
module PromptKit
  class Renderer
    def render
      "x"
    end
  end
end
"""
    assert is_prompt_scope(_string(parse(source)))


def test_definition_itself_is_in_scope(parse: Parse) -> None:
    tree = parse("def prompt_text\nend\n")
    method = next(n for n in tree.walk() if n.type == "method")
    assert is_prompt_scope(method)


class TestDefinitionName:
    def test_method(self, parse: Parse) -> None:
        tree = parse("def build_prompt(a)\nend\n")
        method = next(n for n in tree.walk() if n.type == "method")
        assert definition_name(method) == "build_prompt"

    def test_singleton_method(self, parse: Parse) -> None:
        tree = parse("def self.render\nend\n")
        method = next(n for n in tree.walk() if n.type == "singleton_method")
        assert definition_name(method) == "render"

    def test_qualified_class(self, parse: Parse) -> None:
        tree = parse("class Outer::Inner::Leaf\nend\n")
        klass = next(n for n in tree.walk() if n.type == "class")
        assert definition_name(klass) == "Leaf"

    def test_singleton_class_has_no_name(self, parse: Parse) -> None:
        tree = parse("class Foo\n  class << self\n  end\nend\n")
        node = next(n for n in tree.walk() if n.type == "singleton_class")
        assert definition_name(node) is None

    def test_non_definition(self, parse: Parse) -> None:
        tree = parse("x = 1\n")
        assert definition_name(tree.root) is None
