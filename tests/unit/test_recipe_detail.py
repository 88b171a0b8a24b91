"""Unit tests for recipe detail extraction."""

import pytest

from sous.models.errors import EmptyResponse
from sous.models.models import RecipeIngredient
from sous.parsers.recipe_detail import parse_ingredient_line, parse_instruction_line, parse_recipe_detail


class TestParseRecipeDetail:
    """Test section-based parsing of the detail response."""

    def test_canonical_example(self):
        parsed = parse_recipe_detail("INGREDIENTS:\nEggs: 2\nINSTRUCTIONS:\n1. _Crack eggs._")

        assert parsed.ingredients == [RecipeIngredient(name="Eggs", quantity="2", is_missing=False)]
        assert parsed.instructions == ["_Crack eggs._"]

    def test_counts_and_order_preserved(self):
        ingredients = [f"Item {i}: {i} cups" for i in range(1, 5)]
        steps = [f"{i}. _Step {i}._" for i in range(1, 7)]
        text = "INGREDIENTS:\n" + "\n".join(ingredients) + "\n\nINSTRUCTIONS:\n" + "\n".join(steps)

        parsed = parse_recipe_detail(text)

        assert [i.name for i in parsed.ingredients] == [f"Item {i}" for i in range(1, 5)]
        assert parsed.instructions == [f"_Step {i}._" for i in range(1, 7)]

    def test_headings_case_insensitive(self):
        parsed = parse_recipe_detail("Ingredients:\nRice: 1 cup\ninstructions:\n1) Boil water.")

        assert parsed.ingredients[0].name == "Rice"
        assert parsed.instructions == ["Boil water."]

    def test_preamble_ignored(self):
        parsed = parse_recipe_detail("Here you go!\nINGREDIENTS:\nSalt: pinch\nINSTRUCTIONS:\n1. Season.")

        assert [i.name for i in parsed.ingredients] == ["Salt"]

    def test_ingredient_without_colon_has_empty_quantity(self):
        parsed = parse_recipe_detail("INGREDIENTS:\nSalt to taste\nINSTRUCTIONS:\n1. Season.")

        assert parsed.ingredients == [RecipeIngredient(name="Salt to taste", quantity="")]

    def test_missing_instructions_section(self):
        parsed = parse_recipe_detail("INGREDIENTS:\nEggs: 2")

        assert parsed.has_ingredients
        assert not parsed.has_instructions

    def test_no_headings_gives_empty_sections(self):
        parsed = parse_recipe_detail("Just crack some eggs.")

        assert not parsed.has_ingredients
        assert not parsed.has_instructions

    @pytest.mark.parametrize("text", [None, "", " \n "])
    def test_empty_response_raises(self, text):
        with pytest.raises(EmptyResponse):
            parse_recipe_detail(text)

    def test_idempotent(self):
        text = "INGREDIENTS:\nEggs: 2\nINSTRUCTIONS:\n1. _Crack eggs._"
        assert parse_recipe_detail(text) == parse_recipe_detail(text)


class TestLineParsers:
    """Test individual line parsing."""

    def test_ingredient_split_on_first_colon(self):
        assert parse_ingredient_line("Flour: 1 cup: sifted") == RecipeIngredient(name="Flour", quantity="1 cup: sifted")

    def test_ingredient_bullet_stripped(self):
        assert parse_ingredient_line("- Basil: 5 leaves").name == "Basil"

    def test_ingredient_without_name_skipped(self):
        assert parse_ingredient_line(": 2 cups") is None

    def test_instruction_number_stripped_markers_kept(self):
        assert parse_instruction_line("12. _Serve hot._") == "_Serve hot._"

    def test_unnumbered_instruction_kept(self):
        assert parse_instruction_line("Let it rest.") == "Let it rest."

    def test_number_only_instruction_skipped(self):
        assert parse_instruction_line("3.") is None
