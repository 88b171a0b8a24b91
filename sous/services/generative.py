"""Generative text service: the pipeline's only network-facing collaborator.

``GenerativeTextService`` is the protocol the orchestrator depends on.
``GeminiTextService`` implements it with the google-genai SDK:

- Image + prompt (ingredient detection) -> config.VISION_MODEL
- Prompt only (suggestions, recipe detail) -> config.TEXT_MODEL
- Single attempt per call, bounded by config.REQUEST_TIMEOUT_SECONDS
- Every failure is raised as GenerationError with the provider message preserved
"""

import asyncio
from typing import Optional, Protocol, runtime_checkable

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from sous.models.errors import ErrorKind, GenerationError
from sous.models.models import CapturedImage
from sous.utils.config import Config, config as default_config
from sous.utils.logger import logger


@runtime_checkable
class GenerativeTextService(Protocol):
    """Anything that can turn a prompt (and optional image) into text."""

    async def generate(self, prompt: str, image: Optional[CapturedImage] = None) -> str:
        """Return the model's text answer, or "" if it produced none.

        Raises:
            GenerationError: On transport, quota, auth, timeout or malformed-response failures.
        """
        ...


def classify_api_error(error: genai_errors.APIError) -> ErrorKind:
    """Map a google-genai API error to an ErrorKind by HTTP status code."""
    code = getattr(error, "code", None)
    if code in (401, 403):
        return ErrorKind.AUTH
    if code == 429:
        return ErrorKind.QUOTA
    if isinstance(code, int) and 400 <= code < 500:
        return ErrorKind.MALFORMED
    return ErrorKind.TRANSPORT


class GeminiTextService:
    """GenerativeTextService backed by Google Gemini.

    Construction validates configuration and creates the SDK client once; the
    composition root owns the instance and shares it between pipelines.
    """

    def __init__(self, settings: Config = None, client: genai.Client = None) -> None:
        self.settings = settings or default_config
        if client is None:
            self.settings.validate()
            client = genai.Client(api_key=self.settings.GEMINI_API_KEY)
        self.client = client

    def _build_contents(self, prompt: str, image: Optional[CapturedImage]) -> list:
        if image is None:
            return [prompt]
        return [prompt, types.Part.from_bytes(data=image.data, mime_type=image.mime_type)]

    async def generate(self, prompt: str, image: Optional[CapturedImage] = None) -> str:
        """Call Gemini once and return the response text.

        Args:
            prompt: Prompt text.
            image: Optional image; selects the vision model when present.

        Returns:
            Response text, "" if the model returned no text.

        Raises:
            GenerationError: With kind auth/quota/malformed/transport/timeout.
        """
        model = self.settings.VISION_MODEL if image is not None else self.settings.TEXT_MODEL
        generation_config = types.GenerateContentConfig(
            temperature=self.settings.TEMPERATURE,
            max_output_tokens=self.settings.MAX_OUTPUT_TOKENS,
        )
        logger.debug(f"Gemini call: model={model}, prompt={len(prompt)} chars, image={image is not None}")

        try:
            response = await asyncio.wait_for(
                asyncio.to_thread(
                    self.client.models.generate_content,
                    model=model,
                    contents=self._build_contents(prompt, image),
                    config=generation_config,
                ),
                timeout=self.settings.REQUEST_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError as e:
            logger.warning(f"Gemini call timed out after {self.settings.REQUEST_TIMEOUT_SECONDS}s (model={model})")
            raise GenerationError(
                f"The model did not respond within {self.settings.REQUEST_TIMEOUT_SECONDS:g} seconds.",
                kind=ErrorKind.TIMEOUT,
            ) from e
        except genai_errors.APIError as e:
            kind = classify_api_error(e)
            logger.warning(f"Gemini API error ({kind.value}, code={e.code}): {e.message or e}")
            raise GenerationError(str(e.message or e), kind=kind, status_code=e.code) from e
        except Exception as e:
            logger.warning(f"Gemini call failed (model={model}): {e}")
            raise GenerationError(str(e) or type(e).__name__, kind=ErrorKind.TRANSPORT) from e

        try:
            text = response.text
        except (AttributeError, ValueError) as e:
            raise GenerationError(f"Malformed model response: {e}", kind=ErrorKind.MALFORMED) from e

        return text or ""
