"""Recognize generative-AI client calls by their syntactic shape.

Without type information a receiver is resolved, in priority order, as:

1. DIRECT_CONSTRUCTION: ``OpenAI::Client.new.chat(...)``
2. TRACED_VARIABLE: a variable receiver (``client.chat(...)``) whose
   enclosing scope assigns ``OpenAI::Client.new`` to any variable
3. NAMING_HEURISTIC: a local variable whose name contains a
   client-suggestive fragment (``llm_client``)

Anything else is UNKNOWN and never matched, so unrelated ``chat``
methods stay silent.
"""

from __future__ import annotations

from collections.abc import Collection, Iterator
from dataclasses import dataclass, field
from enum import StrEnum

from promptlint.analysis.extractor import pair_key, pair_value
from promptlint.analysis.syntax import NodeKind, SyntaxNode
from promptlint.config import RuleConfig

# Nodes that open a new lookup scope for assignment tracing
_SCOPE_TYPES = frozenset({
    "method",
    "singleton_method",
    "class",
    "module",
    "singleton_class",
    "program",
})
_VARIABLE_TYPES = frozenset({
    "identifier",
    "instance_variable",
    "class_variable",
    "global_variable",
})
_ASSIGNMENT_TYPES = frozenset({"assignment", "operator_assignment"})
_PARAMETER_LIST_TYPES = frozenset({
    "method_parameters",
    "block_parameters",
    "lambda_parameters",
})
# Arguments that expand to keywords unknown until runtime
_SPLAT_TYPES = frozenset({"splat_argument", "hash_splat_argument"})


class ReceiverKind(StrEnum):
    DIRECT_CONSTRUCTION = "direct_construction"
    TRACED_VARIABLE = "traced_variable"
    NAMING_HEURISTIC = "naming_heuristic"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Receiver:
    """How the receiver of a call was resolved."""

    kind: ReceiverKind
    node: SyntaxNode | None = None
    # The assignment that constructs the client, for TRACED_VARIABLE
    origin: SyntaxNode | None = None


@dataclass(frozen=True)
class CallSignature:
    """Method name, receiver and keyword arguments of a call node."""

    node: SyntaxNode
    method: str
    receiver: Receiver
    keywords: dict[str, SyntaxNode] = field(default_factory=dict)
    # A splat may add keywords that cannot be read statically
    splatted: bool = False

    @property
    def is_client_call(self) -> bool:
        return self.receiver.kind is not ReceiverKind.UNKNOWN


def read_call(node: SyntaxNode, config: RuleConfig) -> CallSignature | None:
    """Describe any call node; the receiver may resolve to UNKNOWN."""
    if node.kind is not NodeKind.CALL:
        return None
    method = node.field("method")
    if method is None:
        return None
    return CallSignature(
        node=node,
        method=method.text,
        receiver=resolve_receiver(node.field("receiver"), config),
        keywords=_keyword_arguments(node),
        splatted=_has_splat(node.field("arguments")),
    )


def match_client_call(
    node: SyntaxNode,
    target_methods: Collection[str],
    config: RuleConfig,
) -> CallSignature | None:
    """Return the signature only for a known client calling a target method."""
    signature = read_call(node, config)
    if signature is None or signature.method not in target_methods:
        return None
    if not signature.is_client_call:
        return None
    return signature


def extract_keyword_value(
    signature: CallSignature,
    key: str,
    nested_under: str | None = None,
) -> SyntaxNode | None:
    """Look up a keyword argument, optionally one level inside a hash.

    ``chat(temperature: 0.9)`` and
    ``chat(parameters: { temperature: 0.9 })`` both resolve
    ``temperature`` when ``nested_under="parameters"``.
    """
    direct = signature.keywords.get(key)
    if direct is not None:
        return direct
    if nested_under is None:
        return None
    nested = nested_keywords(signature, nested_under)
    return nested.get(key) if nested is not None else None


def nested_keywords(
    signature: CallSignature, key: str
) -> dict[str, SyntaxNode] | None:
    """Pairs of the hash passed as keyword ``key``, or None if not a hash."""
    value = signature.keywords.get(key)
    if value is None or value.type != "hash":
        return None
    return _pairs(value)


def keywords_are_complete(
    signature: CallSignature, nested_under: str | None = None
) -> bool:
    """False when a splat may supply keywords the source does not show.

    Checks the call's own arguments and, with ``nested_under``, the hash
    passed under that keyword.
    """
    if signature.splatted:
        return False
    if nested_under is None:
        return True
    value = signature.keywords.get(nested_under)
    return value is None or not _has_splat(value)


# ---------------------------------------------------------------------------
# Receiver resolution
# ---------------------------------------------------------------------------


def resolve_receiver(
    receiver: SyntaxNode | None, config: RuleConfig
) -> Receiver:
    if receiver is None:
        return Receiver(kind=ReceiverKind.UNKNOWN)

    if is_client_construction(receiver, config):
        return Receiver(kind=ReceiverKind.DIRECT_CONSTRUCTION, node=receiver)

    if receiver.type in _VARIABLE_TYPES:
        origin = _trace_assignment(receiver, config)
        if origin is not None:
            return Receiver(
                kind=ReceiverKind.TRACED_VARIABLE,
                node=receiver,
                origin=origin,
            )

    if receiver.type == "identifier" and _is_local_variable(receiver):
        name = receiver.text.lower()
        if any(hint in name for hint in config.client_name_hints):
            return Receiver(
                kind=ReceiverKind.NAMING_HEURISTIC, node=receiver
            )

    return Receiver(kind=ReceiverKind.UNKNOWN, node=receiver)


def is_client_construction(node: SyntaxNode, config: RuleConfig) -> bool:
    """True for ``<ClientType>.new(...)`` with an exact constant path."""
    if node.kind is not NodeKind.CALL:
        return False
    method = node.field("method")
    if method is None or method.text != "new":
        return False
    constant = node.field("receiver")
    if constant is None:
        return False
    path = constant_path(constant)
    return path is not None and path in config.client_type_paths


def constant_path(node: SyntaxNode) -> tuple[str, ...] | None:
    """Segments of a constant reference (``::OpenAI::Client`` → both names)."""
    if node.type == "constant":
        return (node.text,)
    if node.type != "scope_resolution":
        return None
    name = node.field("name")
    if name is None or name.type != "constant":
        return None
    scope = node.field("scope")
    if scope is None:
        return (name.text,)
    prefix = constant_path(scope)
    if prefix is None:
        return None
    return (*prefix, name.text)


def enclosing_scope(node: SyntaxNode) -> SyntaxNode:
    """Nearest enclosing method, class, module or the program root."""
    last = node
    for ancestor in node.ancestors():
        if ancestor.type in _SCOPE_TYPES:
            return ancestor
        last = ancestor
    return last


def scope_nodes(scope: SyntaxNode) -> Iterator[SyntaxNode]:
    """Nodes of ``scope`` in document order.

    At the top level, nested method, class and module bodies belong to
    their own scopes and are skipped.
    """
    if scope.type != "program":
        yield from scope.descendants()
        return
    stack = list(reversed(scope.children))
    while stack:
        node = stack.pop()
        yield node
        if node.type not in _SCOPE_TYPES:
            stack.extend(reversed(node.children))


def _trace_assignment(
    receiver: SyntaxNode, config: RuleConfig
) -> SyntaxNode | None:
    """First assignment in scope whose value constructs a client."""
    for candidate in scope_nodes(enclosing_scope(receiver)):
        if candidate.type not in _ASSIGNMENT_TYPES:
            continue
        right = candidate.field("right")
        if right is not None and is_client_construction(right, config):
            return candidate
    return None


def _is_local_variable(identifier: SyntaxNode) -> bool:
    """An identifier assigned earlier in its scope or bound as a parameter.

    A bare identifier can also be a method call; only bindings visible in
    the enclosing scope count as local variables.
    """
    name = identifier.text
    start = identifier.raw.start_byte
    for candidate in scope_nodes(enclosing_scope(identifier)):
        if candidate.type in _ASSIGNMENT_TYPES:
            left = candidate.field("left")
            if (
                left is not None
                and left.type == "identifier"
                and left.text == name
                and candidate.raw.start_byte < start
            ):
                return True
        elif candidate.type in _PARAMETER_LIST_TYPES:
            if any(
                d.type == "identifier" and d.text == name
                for d in (candidate, *candidate.descendants())
            ):
                return True
    return False


# ---------------------------------------------------------------------------
# Keyword arguments
# ---------------------------------------------------------------------------


def _keyword_arguments(call: SyntaxNode) -> dict[str, SyntaxNode]:
    """Keyword pairs of a call, whether bare or wrapped in ``{...}``."""
    arguments = call.field("arguments")
    if arguments is None:
        return {}
    keywords: dict[str, SyntaxNode] = {}
    for arg in arguments.children:
        if arg.kind is NodeKind.PAIR:
            _add_pair(keywords, arg)
        elif arg.type == "hash":
            for key, value in _pairs(arg).items():
                keywords.setdefault(key, value)
    return keywords


def _pairs(hash_node: SyntaxNode) -> dict[str, SyntaxNode]:
    pairs: dict[str, SyntaxNode] = {}
    for child in hash_node.children:
        _add_pair(pairs, child)
    return pairs


def _add_pair(target: dict[str, SyntaxNode], pair: SyntaxNode) -> None:
    """Record a pair's value under its key; the first occurrence wins."""
    if pair.kind is not NodeKind.PAIR:
        return
    key = pair_key(pair)
    value = pair_value(pair)
    if key is None or value is None:
        return
    target.setdefault(key, value)


def _has_splat(container: SyntaxNode | None) -> bool:
    """True if an argument list or hash expands ``*args``/``**opts``."""
    if container is None:
        return False
    for child in container.children:
        if child.type in _SPLAT_TYPES:
            return True
        if container.type != "hash" and child.type == "hash":
            if _has_splat(child):
                return True
    return False
