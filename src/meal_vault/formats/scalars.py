"""Scalar conversion for the front matter YAML subset."""

import json
import math
import re
from decimal import Decimal

StructuredValue = (
    str
    | int
    | float
    | bool
    | None
    | list["StructuredValue"]
    | dict[str, "StructuredValue"]
)

_NULL_TOKENS = {"", "~", "null"}
_TRUE_TOKENS = {"true", "True"}
_FALSE_TOKENS = {"false", "False"}
_NUMBER_RE = re.compile(r"-?\d+(\.\d+)?")
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)
_UNESCAPES = {"n": "\n", "r": "\r"}


def parse_scalar(raw: str) -> StructuredValue:
    """Convert a front matter token into a typed value, falling back to text."""
    if raw in _NULL_TOKENS:
        return None
    if raw in _TRUE_TOKENS:
        return True
    if raw in _FALSE_TOKENS:
        return False
    match = _NUMBER_RE.fullmatch(raw)
    if match:
        try:
            return float(raw) if match.group(1) else int(raw)
        except ValueError:
            return raw
    if len(raw) >= 2 and raw.startswith('"') and raw.endswith('"'):
        return _unescape(raw[1:-1])
    if len(raw) >= 2 and raw.startswith("'") and raw.endswith("'"):
        return raw[1:-1].replace("''", "'")
    if raw.startswith("[") and raw.endswith("]"):
        parsed = _parse_inline(raw, list)
        if parsed is not None:
            return parsed
    if raw.startswith("{") and raw.endswith("}"):
        parsed = _parse_inline(raw, dict)
        if parsed is not None:
            return parsed
    return raw


def stringify_scalar(value: StructuredValue) -> str:
    """Render a value as a single front matter token."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, str):
        return f'"{escape_string(value)}"'
    if isinstance(value, list | dict):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return f'"{escape_string(str(value))}"'


def format_number(value: float) -> str:
    """Return the shortest exact decimal form of a number, without exponent."""
    if isinstance(value, int):
        return str(value)
    if not math.isfinite(value):
        return "null"
    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)), "f")


def escape_string(value: str) -> str:
    """Escape a string for use inside double quotes."""
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )


def _unescape(inner: str) -> str:
    return _ESCAPE_RE.sub(lambda m: _UNESCAPES.get(m.group(1), m.group(1)), inner)


def _parse_inline(
    raw: str, expected: type[list] | type[dict]
) -> StructuredValue | None:
    for candidate in (raw, raw.replace("'", '"')):
        try:
            parsed = json.loads(candidate)
        except (json.JSONDecodeError, RecursionError):
            continue
        if isinstance(parsed, expected):
            return parsed
    return None
