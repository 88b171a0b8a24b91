"""Unit tests for display helpers."""

import pytest

from sous.utils.display import TextSegment, format_timer, parse_duration_seconds, segment_emphasis


class TestSegmentEmphasis:
    """Test emphasis segmentation of instruction text."""

    def test_fully_wrapped_instruction(self):
        assert segment_emphasis("_Crack eggs._") == [TextSegment("Crack eggs.", True)]

    def test_mixed_segments(self):
        assert segment_emphasis("Stir _gently_ now") == [
            TextSegment("Stir ", False),
            TextSegment("gently", True),
            TextSegment(" now", False),
        ]

    def test_unpaired_marker_emphasizes_rest(self):
        assert segment_emphasis("Bake _until golden") == [
            TextSegment("Bake ", False),
            TextSegment("until golden", True),
        ]

    def test_plain_text(self):
        assert segment_emphasis("Serve.") == [TextSegment("Serve.", False)]

    def test_custom_marker(self):
        assert segment_emphasis("*Whisk*", marker="*") == [TextSegment("Whisk", True)]


class TestParseDurationSeconds:
    @pytest.mark.parametrize(
        "text,seconds",
        [
            ("25 mins", 1500),
            ("15 minutes", 900),
            ("1 hour", 3600),
            ("2 hours", 7200),
            ("1.5 hours", 5400),
            ("45", 2700),
            ("about 20 minutes", 0),
            ("N/A", 0),
            ("", 0),
            (None, 0),
        ],
    )
    def test_durations(self, text, seconds):
        assert parse_duration_seconds(text) == seconds


class TestFormatTimer:
    @pytest.mark.parametrize("seconds,text", [(0, "00:00"), (65, "01:05"), (1500, "25:00"), (-5, "00:00")])
    def test_format(self, seconds, text):
        assert format_timer(seconds) == text
