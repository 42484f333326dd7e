"""Generated regions inside a Markdown body.

An auto block is delimited by ``<!--AUTO:{marker} START-->`` and
``<!--AUTO:{marker} END-->``. Upserting replaces the block interior and
keeps any text written around it.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class AutoBlockSpan:
    """Location of an auto block within a body."""

    start: int
    end: int
    content: str


def start_token(marker: str) -> str:
    """Return the canonical opening token for a marker."""
    return f"<!--AUTO:{marker} START-->"


def end_token(marker: str) -> str:
    """Return the canonical closing token for a marker."""
    return f"<!--AUTO:{marker} END-->"


def format_auto_block(marker: str, content: str) -> str:
    """Build a complete auto block around trimmed content."""
    return f"{start_token(marker)}\n{content.strip()}\n{end_token(marker)}"


def find_auto_block(body: str, marker: str) -> AutoBlockSpan | None:
    """Locate a block, accepting the older spaced token form as well.

    The block ends at the first END token preceded by a START and begins
    at the nearest such START. Unmatched tokens are left in place.
    """
    token_pairs = (
        (start_token(marker), end_token(marker)),
        (f"<!-- AUTO:{marker} START -->", f"<!-- AUTO:{marker} END -->"),
    )
    for opening, closing in token_pairs:
        end = body.find(closing)
        while end != -1:
            start = body.rfind(opening, 0, end)
            if start != -1:
                return AutoBlockSpan(
                    start=start,
                    end=end + len(closing),
                    content=body[start + len(opening) : end].strip(),
                )
            end = body.find(closing, end + len(closing))
    return None


def upsert_auto_block(body: str, marker: str, content: str) -> str:
    """Replace or append the block for ``marker`` and return the new body."""
    block = format_auto_block(marker, content)
    span = find_auto_block(body, marker)
    if span is None:
        existing = body.strip()
        if not existing:
            return f"{block}\n"
        return f"{existing}\n\n{block}\n"

    before = body[: span.start].rstrip()
    after = body[span.end :].strip()
    pieces = [piece for piece in (before, block, after) if piece]
    return "\n\n".join(pieces) + "\n"


def strip_auto_block(body: str, marker: str) -> str:
    """Return the body with the block for ``marker`` removed."""
    span = find_auto_block(body, marker)
    if span is None:
        return body.strip()
    before = body[: span.start].rstrip()
    after = body[span.end :].strip()
    return "\n\n".join(piece for piece in (before, after) if piece)
