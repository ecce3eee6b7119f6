"""Pull literal text and values out of string-like and argument nodes.

String content is returned as ordered fragments: literal characters are
``STATIC``, interpolated sub-expressions are ``DYNAMIC``. Joining only
the static fragments gives the compile-time-known text; any dynamic
fragment means the runtime text cannot be known.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from promptlint.analysis.syntax import NodeKind, SyntaxNode

# Decoded values for escape sequences inside string literals. Anything
# not listed (\u{...}, \x.., octal) is kept as written.
_ESCAPES: dict[str, str] = {
    "\\n": "\n",
    "\\t": "\t",
    "\\r": "\r",
    "\\s": " ",
    "\\0": "\0",
    "\\e": "\x1b",
    '\\"': '"',
    "\\'": "'",
    "\\\\": "\\",
    "\\#": "#",
}

_STATIC_PARTS = frozenset({"string_content", "heredoc_content"})
_HEREDOC_TAG_RE = re.compile(r"<<[~-]?(['\"`]?)(\w+)\1")


class FragmentKind(StrEnum):
    STATIC = "static"
    DYNAMIC = "dynamic"


@dataclass(frozen=True)
class Fragment:
    """One piece of a string node's content."""

    kind: FragmentKind
    text: str


@dataclass(frozen=True)
class ExtractedText:
    """Ordered fragments reconstructed from a string node."""

    fragments: tuple[Fragment, ...]

    @property
    def static_text(self) -> str:
        """Concatenation of the compile-time-known fragments."""
        return "".join(
            f.text for f in self.fragments if f.kind is FragmentKind.STATIC
        )

    @property
    def has_dynamic(self) -> bool:
        return any(f.kind is FragmentKind.DYNAMIC for f in self.fragments)


def extract_text(node: SyntaxNode) -> ExtractedText | None:
    """Reconstruct the content of a literal or composite string node.

    Returns None for every other node kind, and for strings whose content
    is blank with nothing interpolated.
    """
    match node.kind:
        case NodeKind.LITERAL_STRING:
            fragments = (
                Fragment(FragmentKind.STATIC, _literal_value(node)),
            )
        case NodeKind.COMPOSITE_STRING:
            fragments = tuple(_composite_fragments(node))
        case (
            NodeKind.CALL
            | NodeKind.PAIR
            | NodeKind.COLLECTION
            | NodeKind.DEFINITION
            | NodeKind.OTHER
        ):
            return None

    extracted = ExtractedText(fragments=fragments)
    if not extracted.has_dynamic and not extracted.static_text.strip():
        return None
    return extracted


def extract_static_text(node: SyntaxNode) -> str | None:
    """Compile-time-known text of a string node, or None."""
    extracted = extract_text(node)
    return extracted.static_text if extracted is not None else None


def _literal_value(node: SyntaxNode) -> str:
    return "".join(
        _decode_part(child)
        for child in node.children
        if child.type in _STATIC_PARTS or child.type == "escape_sequence"
    )


def _composite_fragments(node: SyntaxNode) -> list[Fragment]:
    """One fragment per content child of a string, chain or heredoc."""
    if node.type == "chained_string":
        fragments: list[Fragment] = []
        for part in node.children:
            if part.type == "string":
                fragments.extend(_composite_fragments(part))
        return fragments

    if node.type == "heredoc_beginning":
        return _heredoc_fragments(node)

    fragments = []
    for child in node.children:
        if child.type == "interpolation":
            fragments.append(Fragment(FragmentKind.DYNAMIC, child.text))
        elif child.type in _STATIC_PARTS or child.type == "escape_sequence":
            fragments.append(
                Fragment(FragmentKind.STATIC, _decode_part(child))
            )
    return fragments


# (kind, text, written) where ``written`` marks body text copied verbatim
# from the source, as opposed to decoded escapes and interpolations.
type _Piece = tuple[FragmentKind, str, bool]


def _heredoc_fragments(opening: SyntaxNode) -> list[Fragment]:
    """Body of a heredoc as Ruby sees it at compile time.

    The body node starts with the newline that ends the opening line and
    ends with the indentation of the terminator; neither is content.
    ``<<~`` bodies also lose the common indentation of their non-blank
    lines.
    """
    body = opening.tree.heredoc_body(opening)
    if body is None:
        return []

    pieces: list[_Piece] = []
    for child in body.children:
        if child.type == "interpolation":
            pieces.append((FragmentKind.DYNAMIC, child.text, False))
        elif child.type == "heredoc_content":
            pieces.append((FragmentKind.STATIC, child.text, True))
        elif child.type == "escape_sequence":
            pieces.append((FragmentKind.STATIC, _decode_part(child), False))

    if pieces and pieces[0][2] and pieces[0][1].startswith("\n"):
        pieces[0] = (pieces[0][0], pieces[0][1][1:], True)

    lines = _split_lines(pieces)
    if lines and _is_terminator_indent(lines[-1]):
        lines.pop()

    if opening.text.startswith("<<~"):
        lines = _dedent(lines)

    fragments: list[Fragment] = []
    for line in lines:
        for kind, text, _ in line:
            if not text and kind is FragmentKind.STATIC:
                continue
            if (
                fragments
                and kind is FragmentKind.STATIC
                and fragments[-1].kind is FragmentKind.STATIC
            ):
                fragments[-1] = Fragment(
                    FragmentKind.STATIC, fragments[-1].text + text
                )
            else:
                fragments.append(Fragment(kind, text))
    return fragments


def _split_lines(pieces: list[_Piece]) -> list[list[_Piece]]:
    """Group pieces by source line; only written text breaks lines."""
    lines: list[list[_Piece]] = [[]]
    for kind, text, written in pieces:
        if not written:
            lines[-1].append((kind, text, written))
            continue
        parts = text.split("\n")
        for part in parts[:-1]:
            lines[-1].append((kind, part + "\n", True))
            lines.append([])
        if parts[-1]:
            lines[-1].append((kind, parts[-1], True))
    if not lines[-1]:
        lines.pop()
    return lines


def _is_terminator_indent(line: list[_Piece]) -> bool:
    return all(
        written and not text.endswith("\n") and not text.strip()
        for _, text, written in line
    )


def _is_blank(line: list[_Piece]) -> bool:
    return all(written and not text.strip() for _, text, written in line)


def _indent(line: list[_Piece]) -> int:
    width = 0
    for _, text, written in line:
        if not written:
            return width
        stripped = text.lstrip(" \t")
        width += len(text) - len(stripped)
        if stripped:
            return width
    return width


def _dedent(lines: list[list[_Piece]]) -> list[list[_Piece]]:
    widths = [_indent(line) for line in lines if not _is_blank(line)]
    margin = min(widths, default=0)
    if margin == 0:
        return lines

    dedented: list[list[_Piece]] = []
    for line in lines:
        remaining = margin
        kept: list[_Piece] = []
        for kind, text, written in line:
            if remaining and written:
                stripped = text.lstrip(" \t")
                cut = min(remaining, len(text) - len(stripped))
                remaining = remaining - cut if stripped == "" else 0
                text = text[cut:]
            else:
                remaining = 0
            kept.append((kind, text, written))
        dedented.append(kept)
    return dedented


def _decode_part(node: SyntaxNode) -> str:
    text = node.text
    if node.type == "escape_sequence":
        return _ESCAPES.get(text, text)
    return text


# ---------------------------------------------------------------------------
# Keys and scalar values
# ---------------------------------------------------------------------------


def pair_key(pair: SyntaxNode) -> str | None:
    """Name of a hash pair's key (``system:``, ``:system =>``, ``"system" =>``)."""
    if pair.kind is not NodeKind.PAIR:
        return None
    key = pair.field("key")
    if key is None:
        return None
    if key.type == "hash_key_symbol":
        return key.text
    if key.type == "simple_symbol":
        return key.text.lstrip(":")
    if key.type in ("string", "delimited_symbol"):
        extracted = extract_text(key) if key.type == "string" else None
        if extracted is not None:
            return None if extracted.has_dynamic else extracted.static_text
        raw = key.text.lstrip(":")
        if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in "\"'":
            return raw[1:-1]
        return None
    return None


def pair_value(pair: SyntaxNode) -> SyntaxNode | None:
    return pair.field("value") if pair.kind is NodeKind.PAIR else None


def numeric_value(node: SyntaxNode) -> float | None:
    """Numeric literal as a float (integers are widened), else None."""
    if node.type == "unary":
        operand = node.field("operand")
        if operand is None or not node.text.startswith("-"):
            return None
        value = numeric_value(operand)
        return -value if value is not None else None

    text = node.text.replace("_", "")
    if node.type == "float":
        try:
            return float(text)
        except ValueError:
            return None
    if node.type == "integer":
        try:
            return float(int(text, 0))
        except ValueError:
            # Ruby octal without the 'o' (0755)
            try:
                return float(int(text, 8))
            except ValueError:
                return None
    return None


# ---------------------------------------------------------------------------
# Delimiter sniffing
# ---------------------------------------------------------------------------


def heredoc_tag(node: SyntaxNode) -> str | None:
    """Delimiter of a heredoc opening (``<<~SYSTEM`` → ``SYSTEM``)."""
    if node.type != "heredoc_beginning":
        return None
    match = _HEREDOC_TAG_RE.search(node.text)
    return match.group(2) if match else None


def sniff_delimiter(node: SyntaxNode, tag: str) -> bool:
    """Check the source line where ``node`` opens for a ``<<TAG`` heredoc.

    Reads exactly one line, located by the node's start byte. Never
    scans the rest of the buffer.
    """
    line = node.tree.line_at(node.raw.start_byte)
    for match in _HEREDOC_TAG_RE.finditer(line):
        if match.group(2) == tag:
            return True
    return False


def is_tagged_block(node: SyntaxNode, tag: str) -> bool:
    """True if ``node`` is the heredoc tagged ``tag`` or opens on its line."""
    if heredoc_tag(node) == tag:
        return True
    return sniff_delimiter(node, tag)
