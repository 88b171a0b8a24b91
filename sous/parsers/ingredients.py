"""Ingredient extraction from the vision model's free-text answer.

The detection prompt asks for a comma-separated list of ``name (quantity)``
entries, e.g. ``tomatoes (500g), onions (3), garlic``. This module turns that
answer into ``DetectedIngredient`` objects:

- Items are split on commas and trimmed
- Each item is matched against ``INGREDIENT_PATTERN`` (name, optional parenthesized quantity)
- Items that don't match are kept whole as a name without quantity
- Duplicates are kept; merging is left to the UI
"""

import re
from typing import Optional

from sous.models.errors import EmptyResponse, InternalParsingFailure
from sous.models.models import DetectedIngredient
from sous.parsers.text_blocks import split_items
from sous.utils.logger import logger


# Group 1: name (lazy), group 2: optional quantity inside trailing parentheses
INGREDIENT_PATTERN = r"^(.+?)(?:\s*\((.+?)\))?$"


def _compile_ingredient_pattern() -> re.Pattern:
    """Compile INGREDIENT_PATTERN, converting a pattern error into InternalParsingFailure."""
    try:
        return re.compile(INGREDIENT_PATTERN)
    except re.error as e:
        logger.error(f"Invalid ingredient pattern {INGREDIENT_PATTERN!r}: {e}")
        raise InternalParsingFailure(f"Internal error: invalid ingredient pattern ({e}).") from e


def parse_ingredient_item(item: str, pattern: re.Pattern) -> Optional[DetectedIngredient]:
    """Parse one comma-separated item.

    Args:
        item: Trimmed item text, e.g. "chicken breast (400g)".
        pattern: Compiled ingredient pattern.

    Returns:
        DetectedIngredient, or None if the item reduces to an empty name.
    """
    match = pattern.match(item)
    if match is None:
        # Multi-line or otherwise unexpected item: keep it whole
        logger.debug(f"Ingredient pattern did not match {item!r}, treating as name only")
        name, quantity = item.strip(), None
    else:
        name = (match.group(1) or "").strip()
        quantity = match.group(2)
        if quantity is not None:
            quantity = quantity.strip() or None

    if not name:
        logger.warning(f"Could not extract a valid ingredient name from {item!r}, skipping")
        return None

    return DetectedIngredient(name=name, quantity=quantity)


def parse_ingredients(response_text: Optional[str]) -> list[DetectedIngredient]:
    """Parse the vision model response into detected ingredients.

    Args:
        response_text: Raw model text. None or blank means the model returned nothing.

    Returns:
        Ingredients in response order. May be empty if every item was unusable;
        that is a valid "zero ingredients" result, not an error.

    Raises:
        EmptyResponse: If the response has no text at all.
        InternalParsingFailure: If the ingredient pattern cannot be compiled.
    """
    if response_text is None or not response_text.strip():
        raise EmptyResponse("No text response received from the vision model.")

    pattern = _compile_ingredient_pattern()

    ingredients = []
    for item in split_items(response_text, ","):
        ingredient = parse_ingredient_item(item, pattern)
        if ingredient is not None:
            ingredients.append(ingredient)

    logger.debug(f"Parsed {len(ingredients)} ingredients: {[i.display_text for i in ingredients]}")
    return ingredients
