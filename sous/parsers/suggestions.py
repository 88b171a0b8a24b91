"""Recipe suggestion extraction from the recommendation model's answer.

The suggestion prompt asks for one block per recipe, separated by blank lines:

    **Pasta Primavera
    Time: 20 minutes
    Desc: Quick and fresh.
    Protein: 30g
    Carbs: 45g
    Fats: 10g

Each line is classified by a case-sensitive prefix (see ``LINE_PREFIXES``).
Blocks without a name are dropped; partial model output is expected and is
only logged.
"""

from typing import Optional

from sous.models.errors import EmptyResponse, NoSuggestionsParsed
from sous.models.models import RecipeSuggestion
from sous.parsers.text_blocks import extract_field, extract_leading_number, split_blocks, split_lines
from sous.utils.logger import logger


NAME_MARKER = "**"

# Evaluated in order; the first matching prefix classifies the line
LINE_PREFIXES = (
    (NAME_MARKER, "name"),
    ("Time:", "duration_text"),
    ("Desc:", "description"),
    ("Protein:", "protein"),
    ("Carbs:", "carbs"),
    ("Fats:", "fats"),
)

MACRO_FIELDS = ("protein", "carbs", "fats")


def _classify_line(line: str) -> Optional[tuple[str, object]]:
    """Return (field, value) for a recognized line, or None for anything else."""
    for prefix, field in LINE_PREFIXES:
        if field == "name":
            if line.startswith(prefix):
                # Models sometimes wrap the whole name: "**Pasta**"
                return field, line.replace("*", "").strip()
            continue

        value = extract_field(line, prefix)
        if value is None:
            continue
        if field in MACRO_FIELDS:
            number = extract_leading_number(line)
            if number is None:
                logger.debug(f"No macro value in line {line!r}, leaving {field} unset")
            return field, number
        return field, value
    return None


def parse_suggestion_block(block: str) -> Optional[RecipeSuggestion]:
    """Parse one recipe block.

    Later lines override earlier ones for the same field.

    Returns:
        RecipeSuggestion, or None if the block has no usable name.
    """
    fields: dict[str, object] = {}
    for line in split_lines(block):
        classified = _classify_line(line)
        if classified is None:
            continue
        field, value = classified
        fields[field] = value

    name = fields.get("name")
    if not name:
        return None

    return RecipeSuggestion(
        name=name,
        description=fields.get("description") or None,
        duration_text=fields.get("duration_text") or None,
        protein=fields.get("protein"),
        carbs=fields.get("carbs"),
        fats=fields.get("fats"),
    )


def parse_recipe_suggestions(response_text: Optional[str]) -> list[RecipeSuggestion]:
    """Parse a multi-recipe response into suggestions, keeping the model's order.

    Args:
        response_text: Raw model text.

    Returns:
        Non-empty list of suggestions in block order.

    Raises:
        EmptyResponse: If the response has no text at all.
        NoSuggestionsParsed: If text was returned but no block contained a valid name.
    """
    if response_text is None or not response_text.strip():
        raise EmptyResponse("No text response received from the recipe model.")

    blocks = split_blocks(response_text)
    suggestions = []
    dropped = 0
    for block in blocks:
        suggestion = parse_suggestion_block(block)
        if suggestion is None:
            dropped += 1
            logger.debug(f"Recipe block without a name starting with '{NAME_MARKER}', skipping:\n{block}")
            continue
        logger.debug(
            f"Parsed block: name={suggestion.name!r}, time={suggestion.duration_text!r}, "
            f"P={suggestion.protein}, C={suggestion.carbs}, F={suggestion.fats}"
        )
        suggestions.append(suggestion)

    if dropped:
        logger.warning(f"Dropped {dropped}/{len(blocks)} recipe blocks without a valid name")

    if not suggestions:
        raise NoSuggestionsParsed()

    return suggestions
