"""No interpolation inside SYSTEM heredocs."""

from __future__ import annotations

from promptlint.analysis.extractor import extract_text, is_tagged_block
from promptlint.analysis.rules.base import Rule, RuleContext, make_finding
from promptlint.analysis.schemas import Finding
from promptlint.analysis.scope import is_prompt_scope
from promptlint.analysis.syntax import NodeKind
from promptlint.constants import RuleId

MSG = (
    "Avoid dynamic interpolation in SYSTEM heredocs to prevent prompt "
    "injection vulnerabilities"
)


def check(ctx: RuleContext) -> Finding | None:
    node = ctx.node
    if node.kind is not NodeKind.COMPOSITE_STRING:
        return None
    if not is_prompt_scope(node):
        return None
    if not is_tagged_block(node, ctx.config.system_delimiter):
        return None

    extracted = extract_text(node)
    if extracted is None or not extracted.has_dynamic:
        return None

    return make_finding(node, RuleId.SYSTEM_INJECTION, MSG)


RULE = Rule(
    rule_id=RuleId.SYSTEM_INJECTION,
    description="SYSTEM heredocs in prompt code contain no interpolation",
    triggers=frozenset({NodeKind.COMPOSITE_STRING}),
    check=check,
)
