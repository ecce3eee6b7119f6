"""High temperature does not suit precision tasks.

A call with ``temperature`` above 0.7 is flagged when the text of its
``messages`` asks for accuracy (analyze, calculate, classify, debug...).
"""

from __future__ import annotations

from promptlint.analysis.extractor import (
    extract_static_text,
    numeric_value,
    pair_key,
    pair_value,
)
from promptlint.analysis.matcher import (
    CallSignature,
    extract_keyword_value,
    match_client_call,
    read_call,
)
from promptlint.analysis.rules.base import Rule, RuleContext, make_finding
from promptlint.analysis.schemas import Finding
from promptlint.analysis.scope import is_prompt_scope
from promptlint.analysis.syntax import NodeKind, SyntaxNode
from promptlint.constants import COMPLETION_METHODS, PARAMETERS_KEY, RuleId

MSG = (
    "High temperature ({temperature:.1f} > {threshold:.1f}) should not be "
    "used for precision tasks. Consider using temperature <= "
    "{threshold:.1f} for tasks requiring accuracy."
)


def check(ctx: RuleContext) -> Finding | None:
    signature = _candidate_call(ctx)
    if signature is None:
        return None

    threshold = ctx.config.temperature_threshold
    temperature_node = extract_keyword_value(
        signature, "temperature", PARAMETERS_KEY
    )
    if temperature_node is None:
        return None
    temperature = numeric_value(temperature_node)
    if temperature is None or temperature <= threshold:
        return None

    messages = extract_keyword_value(signature, "messages", PARAMETERS_KEY)
    content = message_content(messages) if messages is not None else None
    if not content or not is_precision_task(
        content, ctx.config.precision_keywords
    ):
        return None

    return make_finding(
        ctx.node,
        RuleId.TEMPERATURE_RANGE,
        MSG.format(temperature=temperature, threshold=threshold),
    )


def _candidate_call(ctx: RuleContext) -> CallSignature | None:
    """A recognized client call anywhere, or a receiver.chat-shaped call
    inside prompt code."""
    matched = match_client_call(ctx.node, COMPLETION_METHODS, ctx.config)
    if matched is not None:
        return matched

    signature = read_call(ctx.node, ctx.config)
    if signature is None or signature.method not in COMPLETION_METHODS:
        return None
    if signature.receiver.node is None:
        return None
    return signature if is_prompt_scope(ctx.node) else None


def message_content(messages: SyntaxNode) -> str | None:
    """Join the literal ``content:`` of every message hash in an array."""
    if messages.type != "array":
        return None
    contents: list[str] = []
    for message in messages.children:
        if message.type != "hash":
            continue
        for pair in message.children:
            if pair_key(pair) != "content":
                continue
            value = pair_value(pair)
            text = extract_static_text(value) if value is not None else None
            if text:
                contents.append(text)
    return " ".join(contents)


def is_precision_task(content: str, keywords: tuple[str, ...]) -> bool:
    if not content.strip():
        return False
    lowered = content.lower()
    return any(keyword in lowered for keyword in keywords)


RULE = Rule(
    rule_id=RuleId.TEMPERATURE_RANGE,
    description="temperature > 0.7 is not used for precision tasks",
    triggers=frozenset({NodeKind.CALL}),
    check=check,
)
