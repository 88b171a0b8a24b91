"""Prompt factories for the three pipeline stages.

Each prompt spells out the exact text format the matching parser in
``sous.parsers`` expects, so prompt and parser must change together:

- Ingredient detection -> sous.parsers.ingredients (comma list, "name (quantity)")
- Recipe suggestions   -> sous.parsers.suggestions ("**", "Time:", "Desc:", macros, blank-line blocks)
- Recipe detail        -> sous.parsers.recipe_detail ("INGREDIENTS:" then "INSTRUCTIONS:")
"""

from datetime import date
from typing import Optional, Sequence

from sous.models.models import DetectedIngredient, UserProfileView


NOT_AVAILABLE = "N/A"


def get_ingredient_detection_prompt() -> str:
    """Prompt sent together with the captured image to the vision model."""
    return (
        "Identify all food ingredients visible in this image. "
        "For each ingredient, list its name followed by an estimated quantity in parentheses "
        "(e.g., weight like '300g' or count like '(6)'). "
        "If quantity cannot be reasonably estimated, just list the name. "
        "Separate each ingredient entry with a comma. "
        "Example: tomatoes (500g), onions (3), garlic, chicken breast (400g)"
    )


def format_profile_date(value: date) -> str:
    """Medium date style, e.g. 'Mar 5, 2026'."""
    return f"{value.strftime('%b')} {value.day}, {value.year}"


def _or_na(value: Optional[object], suffix: str = "") -> str:
    if value is None or value == "":
        return NOT_AVAILABLE
    return f"{value}{suffix}"


def _get_profile_section(profile: UserProfileView) -> str:
    """Render the USER PROFILE block; absent fields become N/A."""
    dietary = ", ".join(p for p in profile.dietary_preferences if p.strip()) or "None"
    target_date = format_profile_date(profile.target_date) if profile.target_date else NOT_AVAILABLE
    return f"""USER PROFILE:
- Goal: {_or_na(profile.goal)}
- Current Weight: {_or_na(profile.current_weight_kg, "kg")}
- Target Weight: {_or_na(profile.target_weight_kg, "kg")}
- Dietary Preferences: {dietary}
- Activity Level: {_or_na(profile.activity_level)}
- Target Date: {target_date}
- Sex: {_or_na(profile.sex)}
- Age: {_or_na(profile.age)}
- Country: {_or_na(profile.country)}"""


def get_recipe_suggestion_prompt(
    ingredients: Sequence[DetectedIngredient],
    profile: UserProfileView,
    recipe_count: int = 3,
) -> str:
    """Build the personalized suggestion prompt.

    Args:
        ingredients: Detected ingredients, rendered as "name (quantity)".
        profile: User profile used for personalization.
        recipe_count: Number of suggestions to request.

    Returns:
        Prompt text asking for blank-line separated recipe blocks.
    """
    ingredient_text = ", ".join(ingredient.display_text for ingredient in ingredients)
    return f"""Generate {recipe_count} personalized recipe suggestions based on these ingredients and user profile:

INGREDIENTS: {ingredient_text}

{_get_profile_section(profile)}

For each recipe, provide:
1. Recipe name on its own line, starting with "**".
2. Approximate cooking time on its own line, starting with "Time:".
3. A very brief, single-sentence description on its own line, starting with "Desc:".
4. Macronutrient breakdown, each on its own line:
   - Start line with "Protein:"
   - Start line with "Carbs:"
   - Start line with "Fats:"

Separate each recipe suggestion with a blank line.
Example Recipe Format:
**Example Recipe Name
Time: 25 minutes
Desc: A very short description fitting one line.
Protein: 30g
Carbs: 45g
Fats: 12g

**Another Recipe Name
..."""


def get_recipe_detail_prompt(
    recipe_name: str,
    available_ingredients: Sequence[DetectedIngredient],
    min_steps: int = 5,
    max_steps: int = 7,
    emphasis_marker: str = "_",
) -> str:
    """Build the prompt asking for one recipe's ingredients and instructions.

    The detected ingredients are given as context only; the model lists the
    ingredients the recipe actually needs.
    """
    ingredient_list = ", ".join(ingredient.name for ingredient in available_ingredients) or "None"
    m = emphasis_marker
    return f"""For the recipe "{recipe_name}", provide the required ingredients and cooking instructions.

FIRST, list the ingredients under an "INGREDIENTS:" heading.
Each ingredient should be on a new line with its name and quantity (e.g., "Spinach: 1 cup", "Eggs: 2").

SECOND, provide clear, numbered cooking instructions under an "INSTRUCTIONS:" heading.
Aim for {min_steps}-{max_steps} easy-to-follow steps (not more).
Make the tone fun and lighthearted for about 80% of the instruction steps, but keep jokes short and concise.
Each instruction should be wrapped in italic text using {m} (e.g., "{m}Preheat your oven to 350°F.{m}").
Each instruction step should provide enough detail (heat, technique, cues) but remain concise.

Assume the user initially had these ingredients available (for context, but list only the ones NEEDED for THIS recipe): {ingredient_list}

Output Format Example:
INGREDIENTS:
Ingredient A: Quantity A
Ingredient B: Quantity B

INSTRUCTIONS:
1. {m}Funny, concise instruction step 1.{m}
2. {m}Clear, direct instruction step 2.{m}
3. {m}Another fun, brief step 3.{m}
... ({min_steps}-{max_steps} steps total)"""
