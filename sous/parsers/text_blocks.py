"""Generic helpers for splitting and reading semi-structured model text.

All functions are pure; the extractors build on them.
"""

import re
from typing import Optional


_DIGIT_RUN = re.compile(r"\d+")
_WHITESPACE_ONLY_LINE = re.compile(r"^[ \t]+$", re.MULTILINE)


def split_items(text: str, separator: str) -> list[str]:
    """Split text on separator, returning trimmed non-empty parts.

    Args:
        text: Raw text to split.
        separator: Literal separator, e.g. "," for ingredient lists or "\\n\\n" for recipe blocks.

    Returns:
        Parts in source order with surrounding whitespace removed. Empty parts are dropped.
    """
    return [part.strip() for part in text.split(separator) if part.strip()]


def split_blocks(text: str) -> list[str]:
    """Split text into blank-line separated blocks.

    Normalizes Windows line endings and whitespace-only lines first, so a line
    containing only spaces still separates two blocks.
    """
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    normalized = _WHITESPACE_ONLY_LINE.sub("", normalized)
    return split_items(normalized, "\n\n")


def split_lines(block: str) -> list[str]:
    """Return the trimmed, non-empty lines of a block."""
    return split_items(block.replace("\r\n", "\n"), "\n")


def extract_field(line: str, prefix: str, case_sensitive: bool = True) -> Optional[str]:
    """Read the value of a ``Label: value`` line.

    Args:
        line: Line to inspect (leading whitespace is ignored).
        prefix: Label including its colon, e.g. "Time:".
        case_sensitive: Whether the prefix must match case exactly.

    Returns:
        The remainder after the prefix, trimmed, or None if the line does not start with prefix.
    """
    candidate = line.lstrip()
    if case_sensitive:
        matches = candidate.startswith(prefix)
    else:
        matches = candidate.lower().startswith(prefix.lower())
    if not matches:
        return None
    return candidate[len(prefix):].strip()


def extract_leading_number(text: str) -> Optional[int]:
    """Parse an unsigned integer out of a value such as ``Protein: 25g``.

    Everything up to the last colon is treated as the label and dropped. The
    longest run of decimal digits in the rest wins (the first one on ties).

    Returns:
        The parsed integer, or None when no digits are present.
    """
    value = text.rsplit(":", 1)[-1]
    runs = _DIGIT_RUN.findall(value)
    if not runs:
        return None
    return int(max(runs, key=len))
