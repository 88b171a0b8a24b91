"""Recipe detail extraction: ingredient and instruction sections.

Expected response shape (headings matched case-insensitively at the start of a line):

    INGREDIENTS:
    Eggs: 2
    Spinach: 1 cup

    INSTRUCTIONS:
    1. _Crack the eggs into a bowl._
    2. _Whisk like you mean it._

Empty sections are reported on the returned ``ParsedRecipeDetail`` instead of
raising; the orchestrator decides how to fill the gap.
"""

import re
from enum import Enum
from typing import Optional

from sous.models.errors import EmptyResponse
from sous.models.models import ParsedRecipeDetail, RecipeIngredient
from sous.parsers.text_blocks import split_lines
from sous.utils.logger import logger


INGREDIENTS_HEADING = "INGREDIENTS:"
INSTRUCTIONS_HEADING = "INSTRUCTIONS:"

_STEP_NUMBER = re.compile(r"^\d+[.)]\s*")
_BULLET = re.compile(r"^[-*•]\s+")


class Section(Enum):
    INGREDIENTS = "ingredients"
    INSTRUCTIONS = "instructions"


def _heading_for(line: str) -> Optional[Section]:
    upper = line.upper()
    if upper.startswith(INGREDIENTS_HEADING):
        return Section.INGREDIENTS
    if upper.startswith(INSTRUCTIONS_HEADING):
        return Section.INSTRUCTIONS
    return None


def parse_ingredient_line(line: str) -> Optional[RecipeIngredient]:
    """Split ``Name: quantity`` on the first colon. No colon means an empty quantity."""
    line = _BULLET.sub("", line).strip()
    name, _, quantity = line.partition(":")
    name = name.strip()
    if not name:
        return None
    return RecipeIngredient(name=name, quantity=quantity.strip())


def parse_instruction_line(line: str) -> Optional[str]:
    """Strip a leading step number ("1." or "2)"). Emphasis markers are kept verbatim."""
    instruction = _STEP_NUMBER.sub("", line, count=1).strip()
    return instruction or None


def parse_recipe_detail(response_text: Optional[str]) -> ParsedRecipeDetail:
    """Parse a recipe detail response into ingredients and instructions.

    Lines before the first heading are ignored. Heading lines themselves are
    discarded. Order within each section is preserved.

    Args:
        response_text: Raw model text.

    Returns:
        ParsedRecipeDetail; check has_ingredients / has_instructions for empty sections.

    Raises:
        EmptyResponse: If the response has no text at all.
    """
    if response_text is None or not response_text.strip():
        raise EmptyResponse("No text response received for recipe details.")

    ingredients: list[RecipeIngredient] = []
    instructions: list[str] = []
    section: Optional[Section] = None

    for line in split_lines(response_text):
        heading = _heading_for(line)
        if heading is not None:
            section = heading
            continue

        if section is Section.INGREDIENTS:
            ingredient = parse_ingredient_line(line)
            if ingredient is not None:
                ingredients.append(ingredient)
        elif section is Section.INSTRUCTIONS:
            instruction = parse_instruction_line(line)
            if instruction is not None:
                instructions.append(instruction)

    parsed = ParsedRecipeDetail(ingredients=ingredients, instructions=instructions)
    if not parsed.has_ingredients:
        logger.warning("Could not parse any ingredients from recipe detail response")
    if not parsed.has_instructions:
        logger.warning("Could not parse any instructions from recipe detail response")
    logger.debug(f"Parsed {len(ingredients)} ingredients and {len(instructions)} instructions")
    return parsed
