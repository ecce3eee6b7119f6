"""Chat calls must bound their output with stop: or max_tokens:."""

from __future__ import annotations

from promptlint.analysis.matcher import (
    CallSignature,
    ReceiverKind,
    constant_path,
    extract_keyword_value,
    keywords_are_complete,
    match_client_call,
)
from promptlint.analysis.rules.base import Rule, RuleContext, make_finding
from promptlint.analysis.schemas import Finding
from promptlint.analysis.syntax import NodeKind
from promptlint.constants import (
    CHAT_METHODS,
    PARAMETERS_KEY,
    TERMINATION_KEYS,
    RuleId,
)

MSG = (
    "{call} call should include 'stop:' or 'max_tokens:' parameter "
    "to prevent runaway generation"
)


def check(ctx: RuleContext) -> Finding | None:
    signature = match_client_call(ctx.node, CHAT_METHODS, ctx.config)
    if signature is None or not signature.keywords:
        return None

    # parameters: some_variable cannot be inspected
    parameters = signature.keywords.get(PARAMETERS_KEY)
    if parameters is not None and parameters.type != "hash":
        return None
    if not keywords_are_complete(signature, PARAMETERS_KEY):
        return None

    if any(
        extract_keyword_value(signature, key, PARAMETERS_KEY) is not None
        for key in TERMINATION_KEYS
    ):
        return None

    return make_finding(
        ctx.node,
        RuleId.MISSING_TERMINATION,
        MSG.format(call=describe_call(signature)),
    )


def describe_call(signature: CallSignature) -> str:
    """``OpenAI::Client.chat`` for constructed clients, else ``var.chat``."""
    receiver = signature.receiver
    constructor = None
    if receiver.kind is ReceiverKind.DIRECT_CONSTRUCTION:
        constructor = receiver.node
    elif receiver.kind is ReceiverKind.TRACED_VARIABLE and receiver.origin:
        constructor = receiver.origin.field("right")

    if constructor is not None:
        target = constructor.field("receiver")
        path = constant_path(target) if target is not None else None
        if path:
            return f"{'::'.join(path)}.{signature.method}"
    if receiver.node is not None:
        return f"{receiver.node.text}.{signature.method}"
    return signature.method


RULE = Rule(
    rule_id=RuleId.MISSING_TERMINATION,
    description="Client chat calls pass stop: or max_tokens:",
    triggers=frozenset({NodeKind.CALL}),
    check=check,
)
