"""Configuration management for the SousChef recipe pipeline.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults
"""

import os

from dotenv import load_dotenv


# Load .env file (if exists, silently continues if missing)
load_dotenv()


class Config:
    """Pipeline configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        self.GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
        # Vision Model: used for the ingredient detection stage (image + prompt)
        # Default: gemini-2.5-flash-lite (fast, cost-effective for images)
        self.VISION_MODEL: str = os.getenv("VISION_MODEL", "gemini-2.5-flash-lite")
        # Text Model: used for the suggestion and recipe detail stages
        self.TEXT_MODEL: str = os.getenv("TEXT_MODEL", "gemini-2.5-flash")
        # Temperature: Controls randomness (0.0 = deterministic, 1.0 = max randomness)
        # Suggestions benefit from some variety, the parsers tolerate it
        self.TEMPERATURE: float = float(os.getenv("TEMPERATURE", "0.4"))
        # Max Output Tokens: 2048 is enough for a full recipe with 5-7 steps
        self.MAX_OUTPUT_TOKENS: int = int(os.getenv("MAX_OUTPUT_TOKENS", "2048"))
        # Request Timeout: seconds before a model call is treated as a failed stage
        self.REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "60"))
        # Number of personalized recipe suggestions requested per image. Default: 3
        self.SUGGESTION_COUNT: int = int(os.getenv("SUGGESTION_COUNT", "3"))
        # Instruction step range requested in the recipe detail prompt
        self.DETAIL_MIN_STEPS: int = int(os.getenv("DETAIL_MIN_STEPS", "5"))
        self.DETAIL_MAX_STEPS: int = int(os.getenv("DETAIL_MAX_STEPS", "7"))
        # Emphasis Marker: character wrapping italic spans in instruction steps
        self.EMPHASIS_MARKER: str = os.getenv("EMPHASIS_MARKER", "_")
        # Maximum image size (in MB) that can be processed. Default: 5 MB
        self.MAX_IMAGE_SIZE_MB: int = int(os.getenv("MAX_IMAGE_SIZE_MB", "5"))
        # Image Compression: Enable/disable image compression before upload
        self.COMPRESS_IMG: bool = os.getenv("COMPRESS_IMG", "true").lower() in ("true", "1", "yes")
        # Image Compression Threshold: Only compress images above this size (in KB)
        self.COMPRESS_IMG_THRESHOLD_KB: int = int(os.getenv("COMPRESS_IMG_THRESHOLD_KB", "300"))

    def validate(self) -> None:
        """Validate required configuration.

        Raises:
            ValueError: If the API key is missing or invalid values provided.
        """
        if not self.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY environment variable is required")
        if not (0.0 <= self.TEMPERATURE <= 1.0):
            raise ValueError(
                f"TEMPERATURE must be between 0.0 and 1.0, got: {self.TEMPERATURE}"
            )
        if self.MAX_OUTPUT_TOKENS < 512:
            raise ValueError(
                f"MAX_OUTPUT_TOKENS must be at least 512, got: {self.MAX_OUTPUT_TOKENS}"
            )
        if self.REQUEST_TIMEOUT_SECONDS <= 0:
            raise ValueError(
                f"REQUEST_TIMEOUT_SECONDS must be positive, got: {self.REQUEST_TIMEOUT_SECONDS}"
            )
        if self.SUGGESTION_COUNT < 1:
            raise ValueError(
                f"SUGGESTION_COUNT must be at least 1, got: {self.SUGGESTION_COUNT}"
            )
        if not (1 <= self.DETAIL_MIN_STEPS <= self.DETAIL_MAX_STEPS):
            raise ValueError(
                f"DETAIL_MIN_STEPS/DETAIL_MAX_STEPS must satisfy 1 <= min <= max, "
                f"got: {self.DETAIL_MIN_STEPS}/{self.DETAIL_MAX_STEPS}"
            )
        if len(self.EMPHASIS_MARKER) != 1:
            raise ValueError(
                f"EMPHASIS_MARKER must be a single character, got: {self.EMPHASIS_MARKER!r}"
            )


# Module-level config instance; validated by the composition root (GeminiTextService, query.py)
config = Config()
