"""Labeled sections (### text) belong at the start or end of a prompt.

Models attend best to the beginning and end of long instructions, so a
``### Label`` line buried in the middle third is flagged. Content of six
or fewer non-blank lines has no meaningful middle and is never flagged.
"""

from __future__ import annotations

import math
import re

from promptlint.analysis.extractor import extract_static_text, pair_value
from promptlint.analysis.rules.base import (
    STRING_KINDS,
    Rule,
    RuleContext,
    is_system_pair,
    make_finding,
    normalize_newlines,
)
from promptlint.analysis.schemas import Finding
from promptlint.analysis.scope import is_prompt_scope
from promptlint.analysis.syntax import NodeKind, SyntaxNode
from promptlint.constants import (
    SECTION_MIN_EDGE_LINES,
    SECTION_MIN_LINES,
    RuleId,
)

MSG = (
    "Labeled sections (### text) should appear at the beginning or end, "
    "not in the middle"
)

_LABEL_RE = re.compile(r"^###\s+.+")


def check(ctx: RuleContext) -> Finding | None:
    node = ctx.node
    target: SyntaxNode | None
    if node.kind is NodeKind.PAIR:
        if not is_system_pair(node):
            return None
        target = pair_value(node)
    else:
        # Strings under a system: pair are checked through the pair
        if any(is_system_pair(a) for a in node.ancestors()):
            return None
        target = node

    if target is None or not is_prompt_scope(node):
        return None

    content = extract_static_text(target)
    if content is None or not content.strip():
        return None
    if not has_middle_section(content):
        return None

    return make_finding(node, RuleId.SECTION_PLACEMENT, MSG)


def has_middle_section(content: str) -> bool:
    """True if a ``### `` line falls outside the first and last thirds."""
    lines = [
        line.strip() for line in normalize_newlines(content).split("\n")
    ]
    lines = [line for line in lines if line]
    labeled = [i for i, line in enumerate(lines) if _LABEL_RE.match(line)]
    if not labeled:
        return False

    total = len(lines)
    if total < SECTION_MIN_LINES:
        return False

    edge = max(math.ceil(total / 3), SECTION_MIN_EDGE_LINES)
    first_third, last_third = edge, total - edge
    return any(first_third <= i < last_third for i in labeled)


RULE = Rule(
    rule_id=RuleId.SECTION_PLACEMENT,
    description="### labeled sections sit in the first or last third",
    triggers=frozenset({NodeKind.PAIR, *STRING_KINDS}),
    check=check,
)
