"""Rule contract shared by every check."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from promptlint.analysis.extractor import pair_key
from promptlint.analysis.schemas import Finding
from promptlint.analysis.syntax import NodeKind, SyntaxNode
from promptlint.analysis.tokens import TokenCounter
from promptlint.config import RuleConfig
from promptlint.constants import SYSTEM_KEY, RuleId

STRING_KINDS = frozenset({NodeKind.LITERAL_STRING, NodeKind.COMPOSITE_STRING})


@dataclass(frozen=True)
class RuleContext:
    """Everything a rule may read while checking one node."""

    node: SyntaxNode
    config: RuleConfig
    tokens: TokenCounter


type RuleCheck = Callable[[RuleContext], Finding | None]


@dataclass(frozen=True)
class Rule:
    """A registered check and the node kinds that trigger it."""

    rule_id: RuleId
    description: str
    triggers: frozenset[NodeKind]
    check: RuleCheck


def make_finding(node: SyntaxNode, rule_id: RuleId, message: str) -> Finding:
    path = node.tree.path
    return Finding(
        rule_id=rule_id,
        message=message,
        span=node.span,
        path=str(path) if path is not None else None,
    )


def is_system_pair(node: SyntaxNode) -> bool:
    return node.kind is NodeKind.PAIR and pair_key(node) == SYSTEM_KEY


def normalize_newlines(content: str) -> str:
    """Turn literal ``\\n`` sequences left in raw strings into newlines."""
    return content.replace("\\n", "\n")
