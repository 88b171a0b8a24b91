"""Data models for the ingredient-to-recipe pipeline.

Defines Pydantic models for the parsed domain objects, the user profile input
and the observable pipeline state.
All models use Pydantic v2 for strict validation.
"""

import uuid
from datetime import date
from enum import Enum
from typing import Annotated, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from sous.models.errors import ErrorKind


class DetectedIngredient(BaseModel):
    """Ingredient identified in the captured image.

    Immutable; two detections are equal when name and quantity are equal.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: Annotated[str, Field(min_length=1, description="Ingredient name as reported by the vision model")]
    quantity: Annotated[
        Optional[str], Field(description="Estimated quantity, e.g. '500g' or '3' (None if not estimated)")
    ] = None

    @property
    def display_text(self) -> str:
        """Render as ``name (quantity)`` or just ``name``."""
        if self.quantity:
            return f"{self.name} ({self.quantity})"
        return self.name


class RecipeSuggestion(BaseModel):
    """One personalized recipe suggestion parsed from a response block.

    Macro fields are None when the model did not report them, which is
    different from a reported 0.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: Annotated[str, Field(min_length=1, description="Recipe name (required)")]
    description: Annotated[Optional[str], Field(description="Single-sentence description")] = None
    duration_text: Annotated[Optional[str], Field(description="Approximate cooking time, e.g. '20 minutes'")] = None
    protein: Annotated[Optional[int], Field(ge=0, description="Protein in grams")] = None
    carbs: Annotated[Optional[int], Field(ge=0, description="Carbohydrates in grams")] = None
    fats: Annotated[Optional[int], Field(ge=0, description="Fats in grams")] = None

    @property
    def clean_name(self) -> str:
        """Name with any emphasis asterisks removed, used for lookups."""
        return self.name.replace("*", "").strip()


class RecipeIngredient(BaseModel):
    """Ingredient line of a detailed recipe."""

    name: str
    quantity: str = ""
    is_missing: bool = False


class RecipeDetail(BaseModel):
    """Fully detailed recipe shown after the user selects a suggestion.

    Instruction strings keep emphasis markers verbatim; see
    ``sous.utils.display.segment_emphasis`` for rendering.
    """

    name: str
    duration_text: str
    ingredients: List[RecipeIngredient] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)


class ParsedRecipeDetail(BaseModel):
    """Raw output of the recipe detail extractor, before orchestrator post-processing."""

    ingredients: List[RecipeIngredient] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)

    @property
    def has_ingredients(self) -> bool:
        return bool(self.ingredients)

    @property
    def has_instructions(self) -> bool:
        return bool(self.instructions)


class UserProfileView(BaseModel):
    """Read-only view of the user's nutrition profile, supplied by the profile store."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    goal: Optional[str] = None
    current_weight_kg: Annotated[Optional[float], Field(gt=0)] = None
    target_weight_kg: Annotated[Optional[float], Field(gt=0)] = None
    dietary_preferences: List[str] = Field(default_factory=list)
    activity_level: Optional[str] = None
    target_date: Optional[date] = None
    sex: Optional[str] = None
    age: Annotated[Optional[int], Field(ge=0, le=150)] = None
    country: Optional[str] = None


class CapturedImage(BaseModel):
    """Image descriptor passed to the generative service with the detection prompt."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    mime_type: Annotated[str, Field(pattern=r"^image/")]


class StageError(BaseModel):
    """Failure recorded in pipeline state for display and retry."""

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str


class PipelinePhase(str, Enum):
    """Session stages for one submitted image."""

    IDLE = "idle"
    DETECTING_INGREDIENTS = "detecting_ingredients"
    INGREDIENTS_FAILED = "ingredients_failed"
    NO_INGREDIENTS = "no_ingredients"
    FETCHING_SUGGESTIONS = "fetching_suggestions"
    SUGGESTIONS_FAILED = "suggestions_failed"
    SUGGESTIONS_READY = "suggestions_ready"


class DetailPhase(str, Enum):
    """Stages of one recipe detail fetch."""

    FETCHING_DETAIL = "fetching_detail"
    DETAIL_FAILED = "detail_failed"
    DETAIL_READY = "detail_ready"


class DetailState(BaseModel):
    """State of the detail sub-flow for one recipe name."""

    recipe_name: str
    phase: DetailPhase = DetailPhase.FETCHING_DETAIL
    detail: Optional[RecipeDetail] = None
    error: Optional[StageError] = None

    @property
    def is_loading(self) -> bool:
        return self.phase == DetailPhase.FETCHING_DETAIL


class PipelineState(BaseModel):
    """Mutable state record of one pipeline session.

    Only the orchestrator writes to it; observers receive deep copies.
    """

    session_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:8])
    phase: PipelinePhase = PipelinePhase.IDLE
    ingredients: List[DetectedIngredient] = Field(default_factory=list)
    ingredient_error: Optional[StageError] = None
    is_loading_ingredients: bool = False
    suggestions: List[RecipeSuggestion] = Field(default_factory=list)
    recipe_error: Optional[StageError] = None
    is_loading_recipes: bool = False
    details: Dict[str, DetailState] = Field(default_factory=dict)

    @property
    def is_busy(self) -> bool:
        """True while either session stage is awaiting the model."""
        return self.is_loading_ingredients or self.is_loading_recipes
