"""Read-only view over a tree-sitter syntax tree.

A :class:`SyntaxTree` is built once per source unit. It indexes every
named node in document order, records an explicit parent index and child
lists, classifies each node into a closed :class:`NodeKind`, and pairs
heredoc openings with their bodies. Rules only ever see
:class:`SyntaxNode` handles into this view; nothing here mutates the
underlying tree.
"""

from __future__ import annotations

import importlib
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import tree_sitter

from promptlint.analysis.schemas import Span
from promptlint.config import GRAMMAR_MODULES
from promptlint.errors import GrammarUnavailableError


class NodeKind(Enum):
    """Closed set of node categories the rules dispatch on."""

    LITERAL_STRING = "literal_string"
    COMPOSITE_STRING = "composite_string"
    CALL = "call"
    PAIR = "pair"
    COLLECTION = "collection"
    DEFINITION = "definition"
    OTHER = "other"


# Grammar node types per kind (tree-sitter-ruby)
_DEFINITION_TYPES = frozenset({
    "class",
    "module",
    "method",
    "singleton_method",
    "singleton_class",
})
_COLLECTION_TYPES = frozenset({"hash", "array", "argument_list"})
_HEREDOC_OPENING = "heredoc_beginning"
_HEREDOC_BODY = "heredoc_body"


def _classify(raw: tree_sitter.Node, parent_type: str | None) -> NodeKind:
    """Map a grammar node type onto a :class:`NodeKind`."""
    node_type = raw.type
    if node_type == "string":
        # Parts of "a" "b" belong to the enclosing chained_string
        if parent_type == "chained_string":
            return NodeKind.OTHER
        if any(c.type == "interpolation" for c in raw.named_children):
            return NodeKind.COMPOSITE_STRING
        return NodeKind.LITERAL_STRING
    if node_type in ("chained_string", _HEREDOC_OPENING):
        return NodeKind.COMPOSITE_STRING
    if node_type == "call":
        return NodeKind.CALL
    if node_type == "pair":
        return NodeKind.PAIR
    if node_type in _COLLECTION_TYPES:
        return NodeKind.COLLECTION
    if node_type in _DEFINITION_TYPES:
        return NodeKind.DEFINITION
    return NodeKind.OTHER


@dataclass(frozen=True, eq=False)
class SyntaxNode:
    """Non-owning handle to one named node of a :class:`SyntaxTree`."""

    tree: SyntaxTree = field(repr=False)
    index: int
    kind: NodeKind
    type: str

    @property
    def raw(self) -> tree_sitter.Node:
        return self.tree.raw(self)

    @property
    def span(self) -> Span:
        raw = self.raw
        return Span(
            start_line=raw.start_point[0] + 1,
            start_column=raw.start_point[1],
            end_line=raw.end_point[0] + 1,
            end_column=raw.end_point[1],
            start_byte=raw.start_byte,
            end_byte=raw.end_byte,
        )

    @property
    def text(self) -> str:
        return self.tree.text(self)

    @property
    def parent(self) -> SyntaxNode | None:
        return self.tree.parent(self)

    @property
    def children(self) -> list[SyntaxNode]:
        return self.tree.children(self)

    def field(self, name: str) -> SyntaxNode | None:
        """Return the named child stored under grammar field ``name``."""
        return self.tree.field(self, name)

    def ancestors(self) -> Iterator[SyntaxNode]:
        """Yield enclosing nodes, nearest first (excluding self)."""
        return self.tree.ancestors(self)

    def descendants(self) -> Iterator[SyntaxNode]:
        """Yield all nested nodes in document order (excluding self)."""
        return self.tree.descendants(self)


class SyntaxTree:
    """Indexed, immutable view over one parsed source unit."""

    def __init__(
        self,
        source: bytes,
        tree: tree_sitter.Tree,
        path: Path | None = None,
    ) -> None:
        self.source = source
        self.path = path
        self._tree = tree
        self._raw: list[tree_sitter.Node] = []
        self._parents: list[int] = []
        self._children: list[list[int]] = []
        self._index_by_id: dict[int, int] = {}
        self.nodes: list[SyntaxNode] = []
        self._build_index()
        self._heredoc_bodies = self._pair_heredocs()

    @classmethod
    def parse(
        cls,
        source: str | bytes,
        path: Path | None = None,
        language: str = "ruby",
    ) -> SyntaxTree:
        """Parse ``source`` with the cached parser for ``language``."""
        data = source.encode("utf-8") if isinstance(source, str) else source
        parser = get_parser(language)
        return cls(data, parser.parse(data), path)

    # -- construction ---------------------------------------------------

    def _build_index(self) -> None:
        """Pre-order walk assigning document-ordered indices."""
        stack: list[tuple[tree_sitter.Node, int, str | None]] = [
            (self._tree.root_node, -1, None)
        ]
        while stack:
            raw, parent, parent_type = stack.pop()
            index = len(self._raw)
            self._raw.append(raw)
            self._parents.append(parent)
            self._children.append([])
            self._index_by_id[raw.id] = index
            if parent >= 0:
                self._children[parent].append(index)
            self.nodes.append(
                SyntaxNode(
                    tree=self,
                    index=index,
                    kind=_classify(raw, parent_type),
                    type=raw.type,
                )
            )
            for child in reversed(raw.named_children):
                stack.append((child, index, raw.type))

    def _pair_heredocs(self) -> dict[int, int]:
        """Pair each heredoc opening with its body.

        Bodies follow their openings in the same order the openings
        appear, so matching by start offset is exact.
        """
        openings = sorted(
            (n for n in self.nodes if n.type == _HEREDOC_OPENING),
            key=lambda n: self._raw[n.index].start_byte,
        )
        bodies = sorted(
            (n for n in self.nodes if n.type == _HEREDOC_BODY),
            key=lambda n: self._raw[n.index].start_byte,
        )
        return {
            opening.index: body.index
            for opening, body in zip(openings, bodies, strict=False)
        }

    # -- structure ------------------------------------------------------

    @property
    def root(self) -> SyntaxNode:
        return self.nodes[0]

    @property
    def has_errors(self) -> bool:
        return self._tree.root_node.has_error

    def first_error_line(self) -> int | None:
        """1-based line of the first ERROR or MISSING node, if any."""
        if not self.has_errors:
            return None
        for raw in self._raw:
            if raw.type == "ERROR" or raw.is_missing:
                return raw.start_point[0] + 1
        return self._tree.root_node.start_point[0] + 1

    def raw(self, node: SyntaxNode) -> tree_sitter.Node:
        return self._raw[node.index]

    def parent(self, node: SyntaxNode) -> SyntaxNode | None:
        parent = self._parents[node.index]
        return self.nodes[parent] if parent >= 0 else None

    def children(self, node: SyntaxNode) -> list[SyntaxNode]:
        return [self.nodes[i] for i in self._children[node.index]]

    def field(self, node: SyntaxNode, name: str) -> SyntaxNode | None:
        child = self._raw[node.index].child_by_field_name(name)
        if child is None:
            return None
        index = self._index_by_id.get(child.id)
        return self.nodes[index] if index is not None else None

    def ancestors(self, node: SyntaxNode) -> Iterator[SyntaxNode]:
        parent = self._parents[node.index]
        while parent >= 0:
            yield self.nodes[parent]
            parent = self._parents[parent]

    def descendants(self, node: SyntaxNode) -> Iterator[SyntaxNode]:
        stack = list(reversed(self._children[node.index]))
        while stack:
            index = stack.pop()
            yield self.nodes[index]
            stack.extend(reversed(self._children[index]))

    def walk(self) -> Iterator[SyntaxNode]:
        """Top-down traversal of every node, root first."""
        return iter(self.nodes)

    def heredoc_body(self, node: SyntaxNode) -> SyntaxNode | None:
        """Return the body paired with a heredoc opening node."""
        body = self._heredoc_bodies.get(node.index)
        return self.nodes[body] if body is not None else None

    # -- source text ----------------------------------------------------

    def text(self, node: SyntaxNode) -> str:
        raw = self._raw[node.index]
        return self.source[raw.start_byte:raw.end_byte].decode(
            "utf-8", errors="replace"
        )

    def line_at(self, byte_offset: int) -> str:
        """Return the single source line containing ``byte_offset``."""
        begin = self.source.rfind(b"\n", 0, byte_offset) + 1
        end = self.source.find(b"\n", byte_offset)
        if end == -1:
            end = len(self.source)
        return self.source[begin:end].decode("utf-8", errors="replace")


# ---------------------------------------------------------------------------
# Parser cache
# ---------------------------------------------------------------------------

_parser_cache: dict[str, tree_sitter.Parser] = {}


def get_parser(language: str) -> tree_sitter.Parser:
    """Get or create a cached tree-sitter parser.

    Raises :class:`GrammarUnavailableError` when the grammar package
    for ``language`` is unknown or cannot be imported.
    """
    if language in _parser_cache:
        return _parser_cache[language]

    module_name = GRAMMAR_MODULES.get(language)
    if module_name is None:
        raise GrammarUnavailableError(language, None)

    try:
        mod = importlib.import_module(module_name)
        capsule: object = mod.language()
        lang = tree_sitter.Language(capsule)
        parser = tree_sitter.Parser(lang)
    except (ImportError, AttributeError) as exc:
        raise GrammarUnavailableError(language, module_name) from exc
    _parser_cache[language] = parser
    return parser
