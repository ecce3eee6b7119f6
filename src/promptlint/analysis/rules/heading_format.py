"""system: prompt blocks must open with a Markdown heading."""

from __future__ import annotations

import re

from promptlint.analysis.extractor import extract_static_text, pair_value
from promptlint.analysis.rules.base import (
    Rule,
    RuleContext,
    is_system_pair,
    make_finding,
    normalize_newlines,
)
from promptlint.analysis.schemas import Finding
from promptlint.analysis.scope import is_prompt_scope
from promptlint.analysis.syntax import NodeKind
from promptlint.constants import RuleId

MSG = "system: block should start with a Markdown heading (# text)"

_HEADING_RE = re.compile(r"^#\s+.+")


def check(ctx: RuleContext) -> Finding | None:
    node = ctx.node
    if not is_system_pair(node) or not is_prompt_scope(node):
        return None

    value = pair_value(node)
    content = extract_static_text(value) if value is not None else None
    if content is None or not content.strip():
        return None
    if starts_with_heading(content):
        return None

    return make_finding(node, RuleId.HEADING_FORMAT, MSG)


def starts_with_heading(content: str) -> bool:
    """True if the first non-blank line reads ``# <text>``."""
    trimmed = normalize_newlines(content).strip()
    if not trimmed:
        return False
    first_line = trimmed.splitlines()[0].strip()
    return _HEADING_RE.match(first_line) is not None


RULE = Rule(
    rule_id=RuleId.HEADING_FORMAT,
    description="system: blocks in prompt code start with a '# ' heading",
    triggers=frozenset({NodeKind.PAIR}),
    check=check,
)
