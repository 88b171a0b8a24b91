"""Unit tests for configuration management."""

import pytest

from sous.utils.config import Config


ENV_VARS = (
    "GEMINI_API_KEY",
    "VISION_MODEL",
    "TEXT_MODEL",
    "TEMPERATURE",
    "MAX_OUTPUT_TOKENS",
    "REQUEST_TIMEOUT_SECONDS",
    "SUGGESTION_COUNT",
    "DETAIL_MIN_STEPS",
    "DETAIL_MAX_STEPS",
    "EMPHASIS_MARKER",
    "MAX_IMAGE_SIZE_MB",
    "COMPRESS_IMG",
    "COMPRESS_IMG_THRESHOLD_KB",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every pipeline variable so defaults apply."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfigInitialization:
    """Test Config class initialization and environment variable loading."""

    def test_config_loads_default_values(self, clean_env):
        """Test that Config uses default values when env vars not set."""
        config = Config()

        assert config.GEMINI_API_KEY == ""
        assert config.VISION_MODEL == "gemini-2.5-flash-lite"
        assert config.TEXT_MODEL == "gemini-2.5-flash"
        assert config.TEMPERATURE == 0.4
        assert config.MAX_OUTPUT_TOKENS == 2048
        assert config.REQUEST_TIMEOUT_SECONDS == 60
        assert config.SUGGESTION_COUNT == 3
        assert config.DETAIL_MIN_STEPS == 5
        assert config.DETAIL_MAX_STEPS == 7
        assert config.EMPHASIS_MARKER == "_"
        assert config.MAX_IMAGE_SIZE_MB == 5
        assert config.COMPRESS_IMG is True
        assert config.COMPRESS_IMG_THRESHOLD_KB == 300

    def test_config_loads_from_environment(self, clean_env):
        """Test that Config loads values from environment variables."""
        clean_env.setenv("GEMINI_API_KEY", "test_gemini_key")
        clean_env.setenv("VISION_MODEL", "vision-model")
        clean_env.setenv("TEXT_MODEL", "text-model")
        clean_env.setenv("SUGGESTION_COUNT", "5")
        clean_env.setenv("EMPHASIS_MARKER", "*")

        config = Config()

        assert config.GEMINI_API_KEY == "test_gemini_key"
        assert config.VISION_MODEL == "vision-model"
        assert config.TEXT_MODEL == "text-model"
        assert config.SUGGESTION_COUNT == 5
        assert config.EMPHASIS_MARKER == "*"

    def test_config_converts_numeric_types(self, clean_env):
        """Test that Config properly converts numeric environment variables."""
        clean_env.setenv("TEMPERATURE", "0.7")
        clean_env.setenv("MAX_OUTPUT_TOKENS", "4096")
        clean_env.setenv("REQUEST_TIMEOUT_SECONDS", "12.5")

        config = Config()

        assert isinstance(config.TEMPERATURE, float)
        assert isinstance(config.MAX_OUTPUT_TOKENS, int)
        assert config.REQUEST_TIMEOUT_SECONDS == 12.5

    @pytest.mark.parametrize("value,expected", [("true", True), ("1", True), ("YES", True), ("false", False), ("0", False)])
    def test_compress_img_flag_parsing(self, clean_env, value, expected):
        clean_env.setenv("COMPRESS_IMG", value)
        assert Config().COMPRESS_IMG is expected


class TestConfigValidation:
    """Test Config validation logic."""

    @pytest.fixture
    def valid_env(self, clean_env):
        clean_env.setenv("GEMINI_API_KEY", "key")
        return clean_env

    def test_validate_succeeds_with_defaults_and_key(self, valid_env):
        Config().validate()  # Should not raise

    def test_validate_raises_error_for_missing_gemini_key(self, clean_env):
        """Test that validate() raises ValueError if GEMINI_API_KEY missing."""
        with pytest.raises(ValueError, match="GEMINI_API_KEY"):
            Config().validate()

    @pytest.mark.parametrize(
        "name,value,match",
        [
            ("TEMPERATURE", "1.5", "TEMPERATURE"),
            ("TEMPERATURE", "-0.1", "TEMPERATURE"),
            ("MAX_OUTPUT_TOKENS", "100", "MAX_OUTPUT_TOKENS"),
            ("REQUEST_TIMEOUT_SECONDS", "0", "REQUEST_TIMEOUT_SECONDS"),
            ("SUGGESTION_COUNT", "0", "SUGGESTION_COUNT"),
            ("DETAIL_MIN_STEPS", "0", "DETAIL_MIN_STEPS"),
            ("DETAIL_MIN_STEPS", "9", "DETAIL_MIN_STEPS"),
            ("EMPHASIS_MARKER", "__", "EMPHASIS_MARKER"),
            ("EMPHASIS_MARKER", "", "EMPHASIS_MARKER"),
        ],
    )
    def test_validate_rejects_invalid_values(self, valid_env, name, value, match):
        valid_env.setenv(name, value)
        with pytest.raises(ValueError, match=match):
            Config().validate()

    def test_validate_accepts_equal_step_bounds(self, valid_env):
        valid_env.setenv("DETAIL_MIN_STEPS", "6")
        valid_env.setenv("DETAIL_MAX_STEPS", "6")
        Config().validate()  # Should not raise
