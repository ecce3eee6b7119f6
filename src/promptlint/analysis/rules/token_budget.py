"""Prompt strings must fit the configured token budget."""

from __future__ import annotations

from promptlint.analysis.extractor import extract_static_text
from promptlint.analysis.rules.base import (
    STRING_KINDS,
    Rule,
    RuleContext,
    make_finding,
)
from promptlint.analysis.schemas import Finding
from promptlint.analysis.scope import is_prompt_scope
from promptlint.constants import RuleId

MSG = "Prompt text exceeds maximum token limit ({actual} > {limit} tokens)"


def check(ctx: RuleContext) -> Finding | None:
    node = ctx.node
    if not is_prompt_scope(node):
        return None

    content = extract_static_text(node)
    if content is None or not content.strip():
        return None

    count = ctx.tokens.count(content)
    limit = ctx.config.max_tokens
    if count.value <= limit:
        return None

    return make_finding(
        node,
        RuleId.TOKEN_BUDGET,
        MSG.format(actual=count.value, limit=limit),
    )


RULE = Rule(
    rule_id=RuleId.TOKEN_BUDGET,
    description="Prompt strings stay within MaxTokens (default 4000)",
    triggers=STRING_KINDS,
    check=check,
)
