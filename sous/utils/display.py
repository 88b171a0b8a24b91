"""Display helpers for the UI shell: emphasis segments and recipe timers.

These work on presentation text only; the parsers never call them.
"""

from typing import NamedTuple


class TextSegment(NamedTuple):
    text: str
    emphasized: bool


def segment_emphasis(instruction: str, marker: str = "_") -> list[TextSegment]:
    """Split an instruction into alternating plain/emphasized segments.

    Odd-numbered parts between markers are emphasized, so an unpaired trailing
    marker emphasizes the rest of the line. Empty parts are dropped.

    Example:
        "Stir _gently_ now" -> ("Stir ", plain), ("gently", emphasized), (" now", plain)
    """
    parts = instruction.split(marker)
    return [TextSegment(part, index % 2 == 1) for index, part in enumerate(parts) if part]


def parse_duration_seconds(duration_text: str) -> int:
    """Convert "25 mins", "15 minutes" or "1 hour" into seconds for the cooking timer.

    The first word must be a number; a unit starting with "hour" means hours,
    anything else means minutes. Unparseable text gives 0.
    """
    words = (duration_text or "").lower().split()
    if not words:
        return 0
    try:
        value = float(words[0])
    except ValueError:
        return 0

    if len(words) >= 2 and words[1].startswith("hour"):
        return int(value * 60 * 60)
    return int(value * 60)


def format_timer(total_seconds: int) -> str:
    """Format seconds as MM:SS."""
    minutes, seconds = divmod(max(int(total_seconds), 0), 60)
    return f"{minutes:02d}:{seconds:02d}"
