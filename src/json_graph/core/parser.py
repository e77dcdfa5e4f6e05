"""Tolerant JSON parsing on top of tree-sitter.

tree-sitter recovers from syntax errors, so a malformed document still yields a
concrete syntax tree in which the damaged regions are ``ERROR`` nodes and
tokens the grammar had to invent are ``MISSING`` nodes. This module turns that
tree into a :class:`StructuralNode` tree (skipping damaged regions) plus a list
of :class:`ParseError` entries. It never raises for bad input.
"""

from __future__ import annotations

import json
import re
import threading
from bisect import bisect_right
from itertools import accumulate
from typing import cast

from tree_sitter import Node, Parser
from tree_sitter_language_pack import SupportedLanguage, get_parser

from json_graph.models import NodeKind, ParseError, ParseErrorCode, ParseResult, PathSegment, StructuralNode

_VALUE_TYPES: dict[str, NodeKind] = {
    "object": NodeKind.OBJECT,
    "array": NodeKind.ARRAY,
    "string": NodeKind.STRING,
    "number": NodeKind.NUMBER,
    "true": NodeKind.BOOLEAN,
    "false": NodeKind.BOOLEAN,
    "null": NodeKind.NULL,
}

_MISSING_TOKEN_CODES: dict[str, ParseErrorCode] = {
    "}": ParseErrorCode.CLOSE_BRACE_EXPECTED,
    "]": ParseErrorCode.CLOSE_BRACKET_EXPECTED,
    ":": ParseErrorCode.COLON_EXPECTED,
    ",": ParseErrorCode.COMMA_EXPECTED,
    '"': ParseErrorCode.UNEXPECTED_END_OF_STRING,
    "*/": ParseErrorCode.UNEXPECTED_END_OF_COMMENT,
}

_JSON_NUMBER = re.compile(r"-?(?:0|[1-9]\d*)(\.\d+)?([eE][+-]?\d+)?")

_local = threading.local()


def _get_parser() -> Parser:
    # tree-sitter parsers are not safe to share between threads
    parser = getattr(_local, "parser", None)
    if parser is None:
        parser = get_parser(cast(SupportedLanguage, "json"))
        _local.parser = parser
    return parser


class _Offsets:
    """Convert tree-sitter byte offsets into character offsets of the source text."""

    def __init__(self, source: bytes, text: str) -> None:
        # byte offset at which each character starts, plus the end of the source
        self._starts: list[int] | None = None
        if len(source) != len(text):
            self._starts = [0, *accumulate(len(ch.encode("utf-8")) for ch in text)]

    def char(self, byte_offset: int) -> int:
        if self._starts is None:
            return byte_offset
        return bisect_right(self._starts, byte_offset) - 1

    def span(self, start_byte: int, end_byte: int) -> tuple[int, int]:
        start = self.char(start_byte)
        return start, self.char(end_byte) - start


class _Converter:
    def __init__(self, source: bytes, text: str) -> None:
        self.source = source
        self.offsets = _Offsets(source, text)
        self.errors: list[ParseError] = []

    def error(self, code: ParseErrorCode, start_byte: int, end_byte: int | None = None) -> None:
        offset, length = self.offsets.span(start_byte, start_byte if end_byte is None else end_byte)
        self.errors.append(ParseError(code=code, offset=offset, length=length))

    def node_text(self, node: Node) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    # -- syntax errors -----------------------------------------------------

    def collect_syntax_errors(self, root: Node) -> None:
        stack = [root]
        while stack:
            node = stack.pop()
            if node.is_missing:
                code = _MISSING_TOKEN_CODES.get(node.type, ParseErrorCode.VALUE_EXPECTED)
                self.error(code, node.start_byte)
                continue
            if node.type == "ERROR":
                self.classify_error_node(node)
                continue
            if node.has_error:
                stack.extend(reversed(node.children))

    def classify_error_node(self, node: Node) -> None:
        raw = self.source[node.start_byte : node.end_byte]
        tokens = [child for child in node.children if child.type != "comment"]
        parent = node.parent

        if parent is not None and parent.type == "document":
            prev = node.prev_named_sibling
            while prev is not None and prev.type not in _VALUE_TYPES:
                prev = prev.prev_named_sibling
            if prev is not None:
                self.error(ParseErrorCode.END_OF_FILE_EXPECTED, node.start_byte, node.end_byte)
                return
        if raw.startswith(b"/*"):
            self.error(ParseErrorCode.UNEXPECTED_END_OF_COMMENT, node.start_byte, node.end_byte)
            return
        if raw.startswith(b"/"):
            self.error(ParseErrorCode.INVALID_COMMENT_TOKEN, node.start_byte, node.end_byte)
            return
        if tokens and _next_member(node) is not None and all(_is_member(token, parent) for token in tokens):
            # complete members followed by another member: only the separators are missing
            for token in tokens:
                self.error(ParseErrorCode.COMMA_EXPECTED, token.end_byte)
            return
        if _has_open_string(tokens):
            self.error(ParseErrorCode.UNEXPECTED_END_OF_STRING, node.start_byte, node.end_byte)
            return

        last = tokens[-1] if tokens else None
        if last is not None:
            if last.type == ":":
                self.error(ParseErrorCode.VALUE_EXPECTED, last.end_byte)
                return
            if last.type == ",":
                inside_object = parent is not None and parent.type == "object"
                code = ParseErrorCode.PROPERTY_NAME_EXPECTED if inside_object else ParseErrorCode.VALUE_EXPECTED
                self.error(code, last.end_byte)
                return
            if last.type == "{":
                self.error(ParseErrorCode.CLOSE_BRACE_EXPECTED, node.end_byte)
                return
            if last.type == "[":
                self.error(ParseErrorCode.CLOSE_BRACKET_EXPECTED, node.end_byte)
                return
            if len(tokens) == 1 and last.type == "string" and parent is not None and parent.type == "object":
                self.error(ParseErrorCode.COLON_EXPECTED, last.end_byte)
                return

        self.error(ParseErrorCode.INVALID_SYMBOL, node.start_byte, node.end_byte)

    # -- values ------------------------------------------------------------

    def decode_string(self, node: Node) -> str:
        raw = self.node_text(node)
        try:
            return cast(str, json.loads(raw))
        except json.JSONDecodeError as exc:
            if exc.msg.startswith("Invalid control character"):
                code = ParseErrorCode.INVALID_CHARACTER
            elif exc.msg.startswith("Invalid \\u"):
                code = ParseErrorCode.INVALID_UNICODE
            elif exc.msg.startswith("Unterminated string"):
                code = ParseErrorCode.UNEXPECTED_END_OF_STRING
            else:
                code = ParseErrorCode.INVALID_ESCAPE_CHARACTER
            start = self.offsets.char(node.start_byte) + exc.pos
            self.errors.append(ParseError(code=code, offset=start, length=1))
            return raw[1:-1] if len(raw) >= 2 and raw.endswith('"') else raw[1:]

    def decode_number(self, node: Node) -> int | float | str:
        raw = self.node_text(node)
        match = _JSON_NUMBER.fullmatch(raw)
        if match is None:
            self.error(ParseErrorCode.INVALID_NUMBER_FORMAT, node.start_byte, node.end_byte)
            return raw
        if match.group(1) or match.group(2):
            return float(raw)
        return int(raw)

    def primitive(self, node: Node) -> str | int | float | bool | None:
        if node.type == "string":
            return self.decode_string(node)
        if node.type == "number":
            return self.decode_number(node)
        if node.type == "true":
            return True
        if node.type == "false":
            return False
        return None

    def member_key(self, key: Node) -> str:
        if key.type == "string":
            return self.decode_string(key)
        self.error(ParseErrorCode.PROPERTY_NAME_EXPECTED, key.start_byte, key.end_byte)
        return self.node_text(key)

    def convert(self, root: Node) -> StructuralNode:
        """Build the structural tree iteratively, pre-order, children in source order."""
        top = self.make_node(root)
        stack: list[tuple[Node, StructuralNode]] = [(root, top)]
        while stack:
            ts_node, node = stack.pop()
            members: list[tuple[PathSegment, Node]] = []
            if ts_node.type == "object":
                for pair in ts_node.named_children:
                    if pair.type != "pair":
                        continue
                    key = pair.child_by_field_name("key")
                    value = pair.child_by_field_name("value")
                    if key is None or key.is_missing or not _is_value(value):
                        continue
                    members.append((self.member_key(key), cast(Node, value)))
            elif ts_node.type == "array":
                elements = [child for child in ts_node.named_children if _is_value(child)]
                members.extend(enumerate(elements))
            else:
                continue

            pending: list[tuple[Node, StructuralNode]] = []
            for segment, child in members:
                child_node = self.make_node(child)
                node.children.append((segment, child_node))
                pending.append((child, child_node))
            stack.extend(reversed(pending))
        return top

    def make_node(self, ts_node: Node) -> StructuralNode:
        kind = _VALUE_TYPES[ts_node.type]
        offset, length = self.offsets.span(ts_node.start_byte, ts_node.end_byte)
        value = None if kind in (NodeKind.OBJECT, NodeKind.ARRAY) else self.primitive(ts_node)
        return StructuralNode(kind=kind, value=value, offset=offset, length=length)


def _is_value(node: Node | None) -> bool:
    return node is not None and not node.is_missing and node.type in _VALUE_TYPES


def _is_member(node: Node, container: Node | None) -> bool:
    """True for a complete object pair or array element of ``container``."""
    if container is None or node.has_error or node.is_missing:
        return False
    if container.type == "object":
        return node.type == "pair"
    if container.type == "array":
        return node.type in _VALUE_TYPES
    return False


def _next_member(node: Node) -> Node | None:
    sibling = node.next_named_sibling
    while sibling is not None and sibling.type == "comment":
        sibling = sibling.next_named_sibling
    if sibling is not None and _is_member(sibling, node.parent):
        return sibling
    return None


def _has_open_string(tokens: list[Node]) -> bool:
    """A bare unmatched quote token, or a string whose closing quote had to be invented."""
    quotes = sum(1 for token in tokens if token.type == '"')
    if quotes % 2:
        return True
    return any(
        token.type == "string" and token.child_count > 0 and token.children[-1].is_missing for token in tokens
    )


def parse(text: str) -> ParseResult:
    """Parse ``text`` into a structural tree and an ordered list of errors.

    On malformed input the tree is the best-effort partial tree tree-sitter
    recovered, or ``None`` when no value could be found at all.
    """
    source = text.encode("utf-8")
    converter = _Converter(source, text)
    document = _get_parser().parse(source).root_node

    if document.has_error or document.is_missing:
        converter.collect_syntax_errors(document)

    values = [child for child in document.named_children if _is_value(child)]
    if document.type in _VALUE_TYPES and not values:
        # some grammar versions hand back the value itself as the root
        values = [document]

    tree: StructuralNode | None = None
    if values:
        tree = converter.convert(values[0])
        for extra in values[1:]:
            converter.error(ParseErrorCode.END_OF_FILE_EXPECTED, extra.start_byte, extra.end_byte)
    elif not converter.errors:
        converter.error(ParseErrorCode.VALUE_EXPECTED, 0)

    errors = sorted(converter.errors, key=lambda e: e.offset)
    return ParseResult(tree=tree, errors=errors)
