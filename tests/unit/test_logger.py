"""Unit tests for logging infrastructure."""

import json
import logging
import sys

from sous.utils.logger import JSONFormatter, RichTextFormatter, get_logger, logger


def make_record(msg="Test message", level=logging.INFO, name="test_logger", exc_info=None, **extra):
    record = logging.LogRecord(
        name=name,
        level=level,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Test JSONFormatter produces valid JSON output."""

    def test_json_formatter_outputs_valid_json(self):
        """Test that JSONFormatter produces valid JSON."""
        parsed = json.loads(JSONFormatter().format(make_record()))

        assert parsed["level"] == "INFO"
        assert parsed["logger"] == "test_logger"
        assert parsed["message"] == "Test message"
        assert "timestamp" in parsed

    def test_json_formatter_includes_exception_traceback(self):
        """Test that JSONFormatter includes exception traceback when present."""
        try:
            raise ValueError("Test error")
        except ValueError:
            record = make_record("Error occurred", level=logging.ERROR, exc_info=sys.exc_info())

        parsed = json.loads(JSONFormatter().format(record))

        assert "exception" in parsed
        assert "ValueError" in parsed["exception"]

    def test_json_formatter_includes_pipeline_context(self):
        """Test that session_id, stage and recipe_name from extra= are copied."""
        record = make_record(session_id="a1b2c3d4", stage="detail", recipe_name="Omelette")

        parsed = json.loads(JSONFormatter().format(record))

        assert parsed["session_id"] == "a1b2c3d4"
        assert parsed["stage"] == "detail"
        assert parsed["recipe_name"] == "Omelette"

    def test_json_formatter_omits_absent_context(self):
        """Test that context keys are only present when set."""
        parsed = json.loads(JSONFormatter().format(make_record()))

        assert "session_id" not in parsed
        assert "stage" not in parsed


class TestRichTextFormatter:
    """Test RichTextFormatter produces colored text output."""

    def test_rich_text_formatter_includes_emoji_icon(self):
        """Test that RichTextFormatter includes emoji icons for each level."""
        formatter = RichTextFormatter()

        for level in (logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR):
            record = make_record("Test", level=level)
            icon = RichTextFormatter.ICONS[logging.getLevelName(level)]
            assert icon in formatter.format(record)

    def test_rich_text_formatter_includes_level_logger_and_message(self):
        """Test that RichTextFormatter includes level name, logger name and message."""
        output = RichTextFormatter().format(make_record("Custom message", name="my_logger"))

        assert "INFO" in output
        assert "my_logger" in output
        assert "Custom message" in output

    def test_rich_text_formatter_includes_session_tag(self):
        """Test that the session id is rendered as a tag before the message."""
        output = RichTextFormatter().format(make_record("Detecting", session_id="feedbeef"))

        assert "[feedbeef] Detecting" in output

    def test_rich_text_formatter_includes_exception_traceback(self):
        """Test that RichTextFormatter includes exception traceback."""
        try:
            raise RuntimeError("Test error")
        except RuntimeError:
            record = make_record("Error occurred", level=logging.ERROR, exc_info=sys.exc_info())

        output = RichTextFormatter().format(record)
        assert "RuntimeError" in output
        assert "Test error" in output


class TestGetLogger:
    """Test get_logger function."""

    @staticmethod
    def _fresh(name):
        existing = logging.getLogger(name)
        existing.handlers.clear()
        return name

    def test_get_logger_returns_logger_instance(self):
        """Test that get_logger returns a logging.Logger instance."""
        assert isinstance(get_logger("test_module"), logging.Logger)

    def test_get_logger_reuses_configured_logger(self):
        """Test that a second call does not add another handler."""
        first = get_logger("test_module_2")
        second = get_logger("test_module_2")

        assert first is second
        assert len(second.handlers) == 1

    def test_get_logger_respects_log_level_env(self, monkeypatch):
        """Test that get_logger respects LOG_LEVEL environment variable."""
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        test_logger = get_logger(self._fresh("test_level_logger"))

        assert test_logger.level == logging.DEBUG

    def test_invalid_log_level_defaults_to_info(self, monkeypatch):
        """Test that invalid LOG_LEVEL defaults to INFO."""
        monkeypatch.setenv("LOG_LEVEL", "INVALID")
        test_logger = get_logger(self._fresh("test_invalid_level"))

        assert test_logger.level == logging.INFO

    def test_get_logger_respects_log_type_json(self, monkeypatch):
        """Test that get_logger uses JSONFormatter with LOG_TYPE=json."""
        monkeypatch.setenv("LOG_TYPE", "json")
        test_logger = get_logger(self._fresh("test_json_logger"))

        assert any(isinstance(h.formatter, JSONFormatter) for h in test_logger.handlers)

    def test_log_type_text_default(self, monkeypatch):
        """Test that LOG_TYPE defaults to text."""
        monkeypatch.delenv("LOG_TYPE", raising=False)
        test_logger = get_logger(self._fresh("test_default_type"))

        assert any(isinstance(h.formatter, RichTextFormatter) for h in test_logger.handlers)


class TestModuleLevelLogger:
    """Test module-level logger instance."""

    def test_logger_name(self):
        assert isinstance(logger, logging.Logger)
        assert logger.name == "sous"

    def test_logger_has_handlers(self):
        assert len(logger.handlers) > 0

    def test_genai_logger_is_quietened(self):
        assert logging.getLogger("google.genai").level == logging.WARNING
