"""Recipe pipeline orchestrator: the per-image state machine.

One ``RecipePipeline`` is created per submitted image and discarded when the
user submits another one. It sequences the three model stages:

1. DETECTING_INGREDIENTS: image + detection prompt -> parse_ingredients
   - non-empty list: hands off to FETCHING_SUGGESTIONS immediately
   - empty list:     NO_INGREDIENTS (no suggestion call)
   - failure:        INGREDIENTS_FAILED
2. FETCHING_SUGGESTIONS: profile + ingredients -> parse_recipe_suggestions
   - missing profile: SUGGESTIONS_FAILED with ProfileUnavailable, no model call
   - SUGGESTIONS_READY / SUGGESTIONS_FAILED
3. Detail sub-flow, per recipe name and independent of the session stages:
   FETCHING_DETAIL -> DETAIL_READY / DETAIL_FAILED

All state changes happen on the event loop between awaits, so observers see
each transition as one atomic snapshot. The only suspension points are calls
to the GenerativeTextService.
"""

from typing import Callable, Iterable, Optional

from sous.models.errors import ErrorKind, GenerationError, NoSession, PipelineError, ProfileUnavailable
from sous.models.models import (
    CapturedImage,
    DetailPhase,
    DetailState,
    DetectedIngredient,
    ParsedRecipeDetail,
    PipelinePhase,
    PipelineState,
    RecipeDetail,
    RecipeIngredient,
    RecipeSuggestion,
    StageError,
    UserProfileView,
)
from sous.parsers.ingredients import parse_ingredients
from sous.parsers.recipe_detail import parse_recipe_detail
from sous.parsers.suggestions import parse_recipe_suggestions
from sous.prompts.prompts import (
    get_ingredient_detection_prompt,
    get_recipe_detail_prompt,
    get_recipe_suggestion_prompt,
)
from sous.services.generative import GenerativeTextService
from sous.services.profiles import PantryMissingSet, ProfileStore
from sous.utils.config import Config, config as default_config
from sous.utils.logger import logger


StateListener = Callable[[PipelineState], None]

MISSING_INGREDIENTS_PLACEHOLDER = "Could not load ingredients"
MISSING_INSTRUCTIONS_PLACEHOLDER = "Failed to load instructions. Please try again later."
UNKNOWN_DURATION = "N/A"


def clean_recipe_name(name: str) -> str:
    """Strip emphasis asterisks and surrounding whitespace from a recipe name."""
    return name.replace("*", "").strip()


def apply_missing_flags(ingredients: Iterable[RecipeIngredient], missing_names: Iterable[str]) -> list[RecipeIngredient]:
    """Copy pantry "missing" status onto detail ingredients, matching names case-insensitively.

    Ingredients already flagged stay flagged.
    """
    missing = {name.strip().lower() for name in missing_names if name}
    return [
        ingredient.model_copy(update={"is_missing": ingredient.is_missing or ingredient.name.strip().lower() in missing})
        for ingredient in ingredients
    ]


def fill_empty_sections(parsed: ParsedRecipeDetail) -> tuple[list[RecipeIngredient], list[str]]:
    """Replace an empty ingredient or instruction section with a single placeholder entry."""
    ingredients = list(parsed.ingredients)
    instructions = list(parsed.instructions)
    if not parsed.has_ingredients:
        ingredients = [RecipeIngredient(name=MISSING_INGREDIENTS_PLACEHOLDER, quantity="", is_missing=True)]
    if not parsed.has_instructions:
        instructions = [MISSING_INSTRUCTIONS_PLACEHOLDER]
    return ingredients, instructions


def _stage_error(error: Exception) -> StageError:
    """StageError for any failure; errors outside the taxonomy count as generation failures."""
    if not isinstance(error, PipelineError):
        error = GenerationError(str(error) or type(error).__name__)
    return error.to_stage_error()


class RecipePipeline:
    """State machine for one ingredient-to-recipe session.

    Args:
        image: Captured image to analyze.
        text_service: Generative model collaborator.
        profile_store: Source of the user profile for personalization.
        pantry: Optional source of ingredient names the user marked unavailable.
        settings: Configuration (defaults to module config).
    """

    def __init__(
        self,
        image: CapturedImage,
        text_service: GenerativeTextService,
        profile_store: ProfileStore,
        pantry: Optional[PantryMissingSet] = None,
        settings: Config = None,
    ) -> None:
        self.image = image
        self.text_service = text_service
        self.profile_store = profile_store
        self.pantry = pantry
        self.settings = settings or default_config
        self._state = PipelineState()
        self._listeners: list[StateListener] = []

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def session_id(self) -> str:
        return self._state.session_id

    @property
    def state(self) -> PipelineState:
        """Deep copy of the current state."""
        return self.snapshot()

    def snapshot(self) -> PipelineState:
        return self._state.model_copy(deep=True)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called with a snapshot after every transition.

        Returns:
            Function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _transition(self, **changes) -> None:
        """Apply changes as one new state record, then notify listeners."""
        self._state = self._state.model_copy(update=changes)
        for listener in list(self._listeners):
            try:
                listener(self.snapshot())
            except Exception as e:
                logger.warning(f"State listener failed: {e}", extra=self._log_extra())

    def _log_extra(self, stage: str = None, recipe_name: str = None) -> dict:
        extra = {"session_id": self.session_id}
        if stage:
            extra["stage"] = stage
        if recipe_name:
            extra["recipe_name"] = recipe_name
        return extra

    # ------------------------------------------------------------------
    # Ingredient detection
    # ------------------------------------------------------------------

    async def start(self) -> PipelineState:
        """Run ingredient detection and, on success, suggestion fetching."""
        await self.detect_ingredients()
        return self.snapshot()

    async def detect_ingredients(self) -> None:
        """Detect ingredients in the image, then fetch suggestions automatically.

        Ignored while either session stage is already loading.
        """
        extra = self._log_extra("ingredients")
        if self._state.is_busy:
            logger.info("Ingredient detection already in progress, ignoring request", extra=extra)
            return

        # Suggestions and details are derived from the ingredients, so they go too
        self._transition(
            phase=PipelinePhase.DETECTING_INGREDIENTS,
            is_loading_ingredients=True,
            ingredient_error=None,
            ingredients=[],
            is_loading_recipes=False,
            recipe_error=None,
            suggestions=[],
            details={},
        )
        logger.info("Starting ingredient detection...", extra=extra)

        try:
            response_text = await self.text_service.generate(get_ingredient_detection_prompt(), image=self.image)
            ingredients = parse_ingredients(response_text)
        except Exception as e:
            error = _stage_error(e)
            if error.kind == ErrorKind.INTERNAL_PARSING_FAILURE:
                logger.error(f"Ingredient parsing failed internally: {error.message}", extra=extra)
            else:
                logger.warning(f"Ingredient detection failed ({error.kind.value}): {error.message}", extra=extra)
            self._transition(
                phase=PipelinePhase.INGREDIENTS_FAILED,
                is_loading_ingredients=False,
                ingredient_error=error,
            )
            return

        if not ingredients:
            logger.info("No ingredients detected, skipping recipe suggestions", extra=extra)
            self._transition(phase=PipelinePhase.NO_INGREDIENTS, is_loading_ingredients=False)
            return

        logger.info(f"Detected {len(ingredients)} ingredients: {[i.display_text for i in ingredients]}", extra=extra)
        # Hand-off: ingredient loading ends and recipe loading begins in one transition
        self._transition(
            ingredients=ingredients,
            is_loading_ingredients=False,
            phase=PipelinePhase.FETCHING_SUGGESTIONS,
            is_loading_recipes=True,
            recipe_error=None,
            suggestions=[],
        )
        await self._run_suggestion_stage()

    def add_ingredient(self, name: str, quantity: Optional[str] = None) -> bool:
        """Add an ingredient the model missed. Rejected while a stage is loading.

        Returns:
            True if the ingredient was added.
        """
        if self._state.is_busy:
            logger.warning(f"Cannot add ingredient {name!r} while a stage is loading", extra=self._log_extra())
            return False
        name = (name or "").strip()
        if not name:
            return False
        ingredient = DetectedIngredient(name=name, quantity=(quantity or "").strip() or None)
        self._transition(ingredients=[*self._state.ingredients, ingredient])
        logger.debug(f"Added ingredient manually: {ingredient.display_text}", extra=self._log_extra())
        return True

    # ------------------------------------------------------------------
    # Recipe suggestions
    # ------------------------------------------------------------------

    async def fetch_suggestions(self) -> None:
        """(Re)fetch personalized suggestions for the current ingredients.

        Skipped when there are no ingredients or a stage is already loading.
        """
        extra = self._log_extra("suggestions")
        if self._state.is_busy:
            logger.info("A pipeline stage is already loading, ignoring suggestion request", extra=extra)
            return
        if not self._state.ingredients:
            logger.info("Skipping personalized recipe fetch: no ingredients detected", extra=extra)
            return

        self._transition(
            phase=PipelinePhase.FETCHING_SUGGESTIONS,
            is_loading_recipes=True,
            recipe_error=None,
            suggestions=[],
        )
        await self._run_suggestion_stage()

    def _read_profile(self) -> UserProfileView:
        try:
            profile = self.profile_store.current_profile()
        except NoSession as e:
            raise ProfileUnavailable(f"{ProfileUnavailable.default_message} ({e.message})") from e
        except Exception as e:
            logger.warning(f"Profile store failed: {e}", extra=self._log_extra("suggestions"))
            raise ProfileUnavailable(f"{ProfileUnavailable.default_message} ({e})") from e
        if profile is None:
            raise ProfileUnavailable()
        return profile

    async def _run_suggestion_stage(self) -> None:
        extra = self._log_extra("suggestions")
        try:
            # Checked before any model call: no personalization data, no spend
            profile = self._read_profile()
            prompt = get_recipe_suggestion_prompt(
                self._state.ingredients,
                profile,
                recipe_count=self.settings.SUGGESTION_COUNT,
            )
            logger.info("Fetching personalized recipes with user profile and detected ingredients...", extra=extra)
            response_text = await self.text_service.generate(prompt)
            suggestions = parse_recipe_suggestions(response_text)
        except Exception as e:
            error = _stage_error(e)
            logger.warning(f"Recipe suggestions failed ({error.kind.value}): {error.message}", extra=extra)
            self._transition(
                phase=PipelinePhase.SUGGESTIONS_FAILED,
                is_loading_recipes=False,
                recipe_error=error,
            )
            return

        logger.info(f"✓ Parsed {len(suggestions)} personalized recipes", extra=extra)
        self._transition(
            phase=PipelinePhase.SUGGESTIONS_READY,
            is_loading_recipes=False,
            suggestions=suggestions,
        )

    # ------------------------------------------------------------------
    # Recipe detail
    # ------------------------------------------------------------------

    def find_suggestion(self, recipe_name: str) -> Optional[RecipeSuggestion]:
        """Look up a suggestion by name, ignoring emphasis asterisks."""
        target = clean_recipe_name(recipe_name)
        for suggestion in self._state.suggestions:
            if suggestion.clean_name == target:
                return suggestion
        return None

    def _set_detail(self, detail_state: DetailState) -> None:
        self._transition(details={**self._state.details, detail_state.recipe_name: detail_state})

    async def fetch_recipe_detail(self, recipe_name: str) -> DetailState:
        """Fetch ingredients and instructions for one recipe.

        Runs independently per recipe name; concurrent fetches for different
        names don't interfere and never touch suggestion state. A second call
        for a name that is still loading returns the in-flight state.

        Returns:
            Final DetailState for the recipe (copy).
        """
        name = clean_recipe_name(recipe_name)
        extra = self._log_extra("detail", name)

        current = self._state.details.get(name)
        if current is not None and current.is_loading:
            logger.info("Recipe detail already loading, ignoring request", extra=extra)
            return current.model_copy(deep=True)

        self._set_detail(DetailState(recipe_name=name, phase=DetailPhase.FETCHING_DETAIL))

        suggestion = self.find_suggestion(name)
        if suggestion is None:
            logger.warning("No matching suggestion found, fetching detail by name only", extra=extra)
        duration_text = suggestion.duration_text if suggestion and suggestion.duration_text else UNKNOWN_DURATION

        try:
            prompt = get_recipe_detail_prompt(
                name,
                self._state.ingredients,
                min_steps=self.settings.DETAIL_MIN_STEPS,
                max_steps=self.settings.DETAIL_MAX_STEPS,
                emphasis_marker=self.settings.EMPHASIS_MARKER,
            )
            logger.info("Fetching recipe details...", extra=extra)
            response_text = await self.text_service.generate(prompt)
            parsed = parse_recipe_detail(response_text)
            ingredients, instructions = fill_empty_sections(parsed)
            missing_names = self.pantry.missing_names() if self.pantry is not None else set()
            detail = RecipeDetail(
                name=name,
                duration_text=duration_text,
                ingredients=apply_missing_flags(ingredients, missing_names),
                instructions=instructions,
            )
        except Exception as e:
            error = _stage_error(e)
            logger.warning(f"Recipe detail failed ({error.kind.value}): {error.message}", extra=extra)
            self._set_detail(DetailState(recipe_name=name, phase=DetailPhase.DETAIL_FAILED, error=error))
            return self._state.details[name].model_copy(deep=True)

        logger.info(
            f"✓ Recipe detail ready: {len(detail.ingredients)} ingredients, {len(detail.instructions)} steps",
            extra=extra,
        )
        self._set_detail(DetailState(recipe_name=name, phase=DetailPhase.DETAIL_READY, detail=detail))
        return self._state.details[name].model_copy(deep=True)
