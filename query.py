#!/usr/bin/env python3
"""Ad hoc runner for the SousChef recipe pipeline.

Runs one image through the full pipeline without the app shell.

Usage:
    python query.py --image images/fridge.jpg
    python query.py --image images/fridge.jpg --profile profile.json
    python query.py --image images/fridge.jpg --recipe "Chicken Stir-Fry"
    python query.py --image images/fridge.jpg --missing "soy sauce,ginger"
    python query.py --debug --image images/fridge.jpg  # Show full JSON state

Features:
- Ingredient detection, personalized suggestions and recipe detail in one run
- Profile read from a JSON file (field names as in UserProfileView)
- Detail fetched for --recipe, or for the first suggestion if omitted
- Debug mode to display the final pipeline state as JSON
"""

import asyncio
import sys

from rich.console import Console
from rich.text import Text

from sous.models.errors import PipelineError
from sous.models.models import DetailPhase, PipelinePhase, PipelineState
from sous.pipeline.orchestrator import RecipePipeline
from sous.services.generative import GeminiTextService
from sous.services.images import load_image
from sous.services.profiles import StaticPantry, StaticProfileStore, load_profile_file
from sous.utils.config import config
from sous.utils.display import format_timer, parse_duration_seconds, segment_emphasis
from sous.utils.logger import logger

console = Console()


def print_state_change(state: PipelineState) -> None:
    """Subscriber: log each phase the session moves through."""
    logger.debug(f"[{state.session_id}] phase={state.phase.value}")


def render_instruction(step_number: int, instruction: str) -> Text:
    """Render one instruction with emphasized spans in italics."""
    text = Text(f"{step_number}. ")
    for segment in segment_emphasis(instruction, config.EMPHASIS_MARKER):
        text.append(segment.text, style="italic" if segment.emphasized else None)
    return text


async def run_pipeline(
    image_path: str,
    profile_path: str = None,
    recipe_name: str = None,
    missing: list = None,
    debug: bool = False,
) -> int:
    """Run detection, suggestions and one recipe detail, printing each result.

    Returns:
        Process exit code.
    """
    config.validate()
    image = await load_image(image_path)

    profile = load_profile_file(profile_path) if profile_path else None
    pipeline = RecipePipeline(
        image=image,
        text_service=GeminiTextService(),
        profile_store=StaticProfileStore(profile),
        pantry=StaticPantry(missing or []),
    )
    pipeline.subscribe(print_state_change)

    state = await pipeline.start()

    if state.ingredient_error:
        console.print(f"[red]✗ Ingredient detection failed: {state.ingredient_error.message}[/red]")
        return 1
    if state.phase == PipelinePhase.NO_INGREDIENTS:
        console.print("[yellow]No ingredients detected in the image[/yellow]")
        return 0

    console.print("[bold cyan]Detected ingredients[/bold cyan]")
    for ingredient in state.ingredients:
        console.print(f"  • {ingredient.display_text}")
    console.print()

    if state.recipe_error:
        console.print(f"[red]✗ Recipe suggestions failed: {state.recipe_error.message}[/red]")
        return 1

    console.print("[bold cyan]Suggested recipes[/bold cyan]")
    for suggestion in state.suggestions:
        macros = ", ".join(
            f"{label} {value}g"
            for label, value in (("P", suggestion.protein), ("C", suggestion.carbs), ("F", suggestion.fats))
            if value is not None
        )
        console.print(f"  [bold]{suggestion.clean_name}[/bold] ({suggestion.duration_text or 'N/A'}) {macros}")
        if suggestion.description:
            console.print(f"    [dim]{suggestion.description}[/dim]")
    console.print()

    if not state.suggestions:
        return 0

    detail_state = await pipeline.fetch_recipe_detail(recipe_name or state.suggestions[0].name)
    if detail_state.phase == DetailPhase.DETAIL_FAILED:
        console.print(f"[red]✗ Recipe detail failed: {detail_state.error.message}[/red]")
        return 1

    detail = detail_state.detail
    timer = format_timer(parse_duration_seconds(detail.duration_text))
    console.print(f"[bold cyan]{detail.name}[/bold cyan] [dim](timer {timer})[/dim]")
    for ingredient in detail.ingredients:
        line = f"  • {ingredient.name}" + (f": {ingredient.quantity}" if ingredient.quantity else "")
        console.print(f"[red]{line} (missing)[/red]" if ingredient.is_missing else line)
    console.print()
    for number, instruction in enumerate(detail.instructions, start=1):
        console.print(render_instruction(number, instruction))

    if debug:
        console.print()
        console.print("[bold cyan]Debug Mode: Final Pipeline State[/bold cyan]")
        console.print("[dim]" + "=" * 60 + "[/dim]")
        console.print_json(pipeline.snapshot().model_dump_json())
        console.print("[dim]" + "=" * 60 + "[/dim]")

    return 0


def main(argv: list) -> int:
    debug_mode = False
    image_path = None
    profile_path = None
    recipe_name = None
    missing = []
    index = 1

    while index < len(argv):
        flag = argv[index]
        if flag == "--debug":
            debug_mode = True
            index += 1
        elif flag in ("--image", "--profile", "--recipe", "--missing"):
            if index + 1 >= len(argv):
                print(f"Error: {flag} flag requires a value")
                return 1
            value = argv[index + 1]
            if flag == "--image":
                image_path = value
            elif flag == "--profile":
                profile_path = value
            elif flag == "--recipe":
                recipe_name = value
            else:
                missing = [name.strip() for name in value.split(",") if name.strip()]
            index += 2
        else:
            print(f"Unknown flag: {flag}")
            return 1

    if not image_path:
        print("Usage: python query.py --image PATH [--profile FILE] [--recipe NAME] [--missing a,b] [--debug]")
        return 1

    try:
        return asyncio.run(run_pipeline(image_path, profile_path, recipe_name, missing, debug_mode))
    except KeyboardInterrupt:
        logger.info("\nRun interrupted by user.")
        return 0
    except (ValueError, PipelineError) as e:
        console.print(f"[red]✗ Error: {e}[/red]")
        return 1


if __name__ == "__main__":
    sys.exit(main(sys.argv))
