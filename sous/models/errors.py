"""Error taxonomy for the recipe pipeline.

Every failure that can end a pipeline stage is a ``PipelineError`` carrying an
``ErrorKind``. The orchestrator records it in ``PipelineState`` as a
``StageError`` so the UI can show the message and offer a retry.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Machine-readable failure categories surfaced in pipeline state."""

    EMPTY_RESPONSE = "empty_response"
    INTERNAL_PARSING_FAILURE = "internal_parsing_failure"
    NO_SUGGESTIONS_PARSED = "no_suggestions_parsed"
    PROFILE_UNAVAILABLE = "profile_unavailable"
    NO_SESSION = "no_session"
    IMAGE_INVALID = "image_invalid"
    # Generative service failures
    AUTH = "auth"
    QUOTA = "quota"
    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    MALFORMED = "malformed"


class PipelineError(Exception):
    """Base class for all pipeline failures."""

    kind: ErrorKind = ErrorKind.TRANSPORT
    default_message = "Pipeline stage failed"

    def __init__(self, message: str = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_stage_error(self):
        """Convert to the StageError record stored in pipeline state."""
        # Imported here: models imports ErrorKind from this module
        from sous.models.models import StageError

        return StageError(kind=self.kind, message=self.message)


class EmptyResponse(PipelineError):
    """Raised when the model returned no usable text."""

    kind = ErrorKind.EMPTY_RESPONSE
    default_message = "No text response received from the model."


class InternalParsingFailure(PipelineError):
    """Raised when a parsing pattern cannot be constructed. Always a bug."""

    kind = ErrorKind.INTERNAL_PARSING_FAILURE
    default_message = "Internal error: invalid parsing pattern."


class NoSuggestionsParsed(PipelineError):
    """Raised when a response had text but no block yielded a named recipe."""

    kind = ErrorKind.NO_SUGGESTIONS_PARSED
    default_message = "Could not parse recipe suggestions from the model response."


class ProfileUnavailable(PipelineError):
    """Raised when no user profile can be read for the suggestion stage."""

    kind = ErrorKind.PROFILE_UNAVAILABLE
    default_message = "Could not load the user profile needed for personalized recipes."


class NoSession(PipelineError):
    """Raised by a profile store when there is no signed-in user."""

    kind = ErrorKind.NO_SESSION
    default_message = "No active user session."


class ImageError(PipelineError):
    """Raised when an image source cannot be loaded or fails validation."""

    kind = ErrorKind.IMAGE_INVALID
    default_message = "Invalid image."


class GenerationError(PipelineError):
    """Raised by a generative text service on any failed call.

    The underlying provider message is preserved for display.
    """

    default_message = "Generative model call failed."

    def __init__(self, message: str = None, kind: ErrorKind = ErrorKind.TRANSPORT, status_code: int = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code
