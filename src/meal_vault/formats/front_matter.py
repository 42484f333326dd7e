"""Front matter document codec.

A document is a ``---`` divider line, a header written in a small YAML
subset, a closing divider, a blank line and a free-form Markdown body. The
header parser is a state machine over a stack of frames keyed by
indentation; it never raises and skips lines it cannot place, so a
hand-edited header degrades to partial data instead of losing the body.
"""

import logging
import re
from dataclasses import dataclass
from typing import Literal

from meal_vault.formats.scalars import StructuredValue, parse_scalar, stringify_scalar

FRONT_MATTER_DIVIDER = "---"

_INDENT_STEP = "  "
_LINE_SPLIT_RE = re.compile(r"\r?\n")
_ITEM_ENTRY_RE = re.compile(r"([^\s\"'\[\]{}#,:-][^:]*?)\s*:(?:\s+(.*))?")

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParsedDocument:
    """Decoded document header and body."""

    header: dict[str, StructuredValue]
    body: str


@dataclass
class _Frame:
    indent: int
    kind: Literal["mapping", "sequence"]
    value: dict[str, StructuredValue] | list[StructuredValue]


def decode(source: str) -> ParsedDocument:
    """Split a document into its parsed header and body."""
    header_text, body = _split_front_matter(source)
    if header_text is None:
        return ParsedDocument(header={}, body=source)
    return ParsedDocument(header=parse_header(header_text), body=body)


def encode(header: dict[str, StructuredValue], body: str) -> str:
    """Serialize a header and body into a front matter document."""
    header_text = stringify_header(header)
    return (
        f"{FRONT_MATTER_DIVIDER}\n{header_text}\n{FRONT_MATTER_DIVIDER}\n\n"
        f"{body.rstrip()}\n"
    )


def parse_header(text: str) -> dict[str, StructuredValue]:
    """Parse front matter lines into nested mappings and sequences."""
    return _HeaderParser(_LINE_SPLIT_RE.split(text)).parse()


def stringify_header(header: dict[str, StructuredValue]) -> str:
    """Render a header mapping with a two-space indent per level."""
    return "\n".join(_mapping_lines(header, 0))


def _split_front_matter(source: str) -> tuple[str | None, str]:
    lines = _LINE_SPLIT_RE.split(source)
    if lines[0].strip() != FRONT_MATTER_DIVIDER:
        return None, source
    end_index = None
    for index in range(1, len(lines)):
        if lines[index].strip() == FRONT_MATTER_DIVIDER:
            end_index = index
            break
    if end_index is None:
        _logger.debug("Front matter is missing its closing divider")
        return None, source

    body_lines = lines[end_index + 1 :]
    if body_lines and not body_lines[0].strip():
        body_lines = body_lines[1:]
    body = "\n".join(body_lines)
    if body.endswith("\n"):
        body = body[:-1]
    return "\n".join(lines[1:end_index]), body


class _HeaderParser:
    def __init__(self, lines: list[str]) -> None:
        self._lines = lines
        self._root: dict[str, StructuredValue] = {}
        self._stack = [_Frame(indent=-1, kind="mapping", value=self._root)]

    def parse(self) -> dict[str, StructuredValue]:
        for index, raw_line in enumerate(self._lines):
            stripped = raw_line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            indent = _count_indent(raw_line)
            is_item = _is_list_item(stripped)
            self._unwind(indent, is_item)
            if is_item:
                self._handle_item(stripped, indent, index)
            else:
                self._handle_entry(stripped, indent, index)
        return self._root

    def _unwind(self, indent: int, is_item: bool) -> None:
        while len(self._stack) > 1:
            top = self._stack[-1]
            if indent > top.indent:
                return
            if indent == top.indent and (top.kind == "mapping" or is_item):
                return
            self._stack.pop()

    def _handle_item(self, stripped: str, indent: int, index: int) -> None:
        top = self._stack[-1]
        if top.kind != "sequence" or not isinstance(top.value, list):
            _logger.debug("Skipping list item outside a sequence: %r", stripped)
            return
        content = stripped[1:].strip()
        if not content:
            item: dict[str, StructuredValue] = {}
            top.value.append(item)
            self._stack.append(
                _Frame(self._child_indent(index, indent + 2), "mapping", item)
            )
            return
        entry = _ITEM_ENTRY_RE.fullmatch(content)
        if entry is None:
            top.value.append(parse_scalar(content))
            return
        item = {}
        top.value.append(item)
        column = indent + len(stripped) - len(content)
        frame = _Frame(column, "mapping", item)
        self._stack.append(frame)
        self._assign(frame, entry.group(1), entry.group(2) or "", column, index)

    def _handle_entry(self, stripped: str, indent: int, index: int) -> None:
        top = self._stack[-1]
        key, separator, rest = stripped.partition(":")
        key = key.strip()
        if not separator or not key:
            _logger.debug("Skipping unparseable front matter line: %r", stripped)
            return
        if top.kind != "mapping":
            _logger.debug("Skipping mapping entry inside a sequence: %r", stripped)
            return
        self._assign(top, key, rest.strip(), indent, index)

    def _assign(
        self, frame: _Frame, key: str, raw: str, key_indent: int, index: int
    ) -> None:
        if not isinstance(frame.value, dict):
            return
        if raw:
            frame.value[key] = parse_scalar(raw)
            return
        next_line = self._peek(index + 1)
        if next_line is not None:
            next_indent = _count_indent(next_line)
            if _is_list_item(next_line.strip()) and next_indent >= key_indent:
                sequence: list[StructuredValue] = []
                frame.value[key] = sequence
                self._stack.append(_Frame(next_indent, "sequence", sequence))
                return
            if next_indent > key_indent:
                mapping: dict[str, StructuredValue] = {}
                frame.value[key] = mapping
                self._stack.append(_Frame(next_indent, "mapping", mapping))
                return
        frame.value[key] = {}

    def _peek(self, start: int) -> str | None:
        for line in self._lines[start:]:
            stripped = line.strip()
            if stripped and not stripped.startswith("#"):
                return line
        return None

    def _child_indent(self, index: int, default: int) -> int:
        next_line = self._peek(index + 1)
        if next_line is None:
            return default
        return max(_count_indent(next_line), default)


def _count_indent(line: str) -> int:
    count = 0
    for char in line:
        if char == " ":
            count += 1
        elif char == "\t":
            count += 2
        else:
            break
    return count


def _is_list_item(stripped: str) -> bool:
    return stripped == "-" or stripped.startswith("- ")


def _is_block(value: StructuredValue) -> bool:
    return isinstance(value, dict | list) and len(value) > 0


def _block_lines(value: StructuredValue, level: int) -> list[str]:
    if isinstance(value, dict):
        return _mapping_lines(value, level)
    if isinstance(value, list):
        return _sequence_lines(value, level)
    return [f"{_INDENT_STEP * level}{stringify_scalar(value)}"]


def _mapping_lines(mapping: dict[str, StructuredValue], level: int) -> list[str]:
    pad = _INDENT_STEP * level
    lines: list[str] = []
    for key, value in mapping.items():
        if _is_block(value):
            lines.append(f"{pad}{key}:")
            lines.extend(_block_lines(value, level + 1))
        else:
            lines.append(f"{pad}{key}: {stringify_scalar(value)}")
    return lines


def _sequence_lines(items: list[StructuredValue], level: int) -> list[str]:
    pad = _INDENT_STEP * level
    lines: list[str] = []
    for item in items:
        if not isinstance(item, dict) or not item:
            lines.append(f"{pad}- {stringify_scalar(item)}")
            continue
        (first_key, first_value), *rest = item.items()
        if _is_block(first_value):
            lines.append(f"{pad}- {first_key}:")
            lines.extend(_block_lines(first_value, level + 2))
        else:
            lines.append(f"{pad}- {first_key}: {stringify_scalar(first_value)}")
        lines.extend(_mapping_lines(dict(rest), level + 1))
    return lines
