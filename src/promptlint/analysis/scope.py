"""Decide whether a tree position sits inside prompt-building code."""

from __future__ import annotations

from promptlint.analysis.syntax import NodeKind, SyntaxNode
from promptlint.constants import PROMPT_SCOPE_MARKER

_METHOD_TYPES = frozenset({"method", "singleton_method"})
_NAMESPACE_TYPES = frozenset({"class", "module"})


def is_prompt_scope(node: SyntaxNode) -> bool:
    """Return True if ``node`` or an enclosing definition names a prompt.

    Methods are tested on their own name; classes and modules on the last
    segment of a possibly qualified name (``Chat::PromptBuilder``). The
    walk starts at ``node`` itself and stops at the first match.
    """
    if _names_prompt(node):
        return True
    return any(_names_prompt(a) for a in node.ancestors())


def definition_name(node: SyntaxNode) -> str | None:
    """Declared name of a class, module or method node."""
    if node.kind is not NodeKind.DEFINITION:
        return None
    name = node.field("name")
    if name is None:
        # class << self
        return None
    if node.type in _METHOD_TYPES:
        return name.text
    if node.type in _NAMESPACE_TYPES:
        if name.type == "scope_resolution":
            last = name.field("name")
            return last.text if last is not None else None
        return name.text
    return None


def _names_prompt(node: SyntaxNode) -> bool:
    name = definition_name(node)
    return name is not None and PROMPT_SCOPE_MARKER in name.lower()
