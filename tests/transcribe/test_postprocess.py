"""
Tests for pipeline/transcribe/postprocess.py
"""

import pytest

from pipeline.transcribe.postprocess import clean_transcript, is_refusal, refusal_reason


class TestCleanTranscript:

    def test_drops_leading_page_number_line(self):
        assert clean_transcript("12\nIt was a dark night.") == "It was a dark night."

    def test_only_first_page_number_line_dropped(self):
        raw = "12\nChapter One\n3\nText"

        assert clean_transcript(raw) == "Chapter One\n3\nText"

    def test_strips_lines_and_drops_blank_ones(self):
        raw = "  First line  \n\n\n   Second line\t\n"

        assert clean_transcript(raw) == "First line\nSecond line"

    def test_numbers_inside_text_kept(self):
        assert clean_transcript("In 1984 there were 3 of them.") == "In 1984 there were 3 of them."

    def test_trailing_number_line_kept(self):
        assert clean_transcript("It was a dark night.\n12") == "It was a dark night.\n12"

    def test_lone_number_without_newline_kept(self):
        assert clean_transcript("1984") == "1984"

    @pytest.mark.parametrize("raw", [None, "", "   \n\n  ", "42\n"])
    def test_nothing_left(self, raw):
        assert clean_transcript(raw) == ""


class TestRefusalDetection:

    @pytest.mark.parametrize("text", [
        "I'm sorry, I can't help with that.",
        "i’m sorry but I cannot read this image",
        "I'M SORRY",
    ])
    def test_short_apology_is_refusal(self, text):
        assert is_refusal(text)
        assert refusal_reason(text) == "apology"

    def test_long_text_never_refusal(self):
        text = "I'm sorry, she said, and walked on. " * 5

        assert len(text) >= 100
        assert not is_refusal(text)

    def test_threshold_is_configurable(self):
        text = "I'm sorry, she said."

        assert is_refusal(text, max_chars=100)
        assert not is_refusal(text, max_chars=10)

    def test_ordinary_text(self):
        assert not is_refusal("Chapter One")
