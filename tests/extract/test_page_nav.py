"""
Tests for pipeline/extract/page_nav.py

Key behaviors to verify:
1. "Page N of M" parses to a page position
2. "Location N of M" parses to a location position
3. Roman front-matter pages become locations
4. Anything else (including zeros) is None
"""

import pytest

from pipeline.extract.page_nav import parse_page_nav, deromanize


class TestParsePageNav:

    def test_page_of_total(self):
        position = parse_page_nav("Page 42 of 320")

        assert position.page == 42
        assert position.location is None
        assert position.total == 320

    def test_location_of_total(self):
        position = parse_page_nav("Location 15 of 6000")

        assert position.page is None
        assert position.location == 15
        assert position.total == 6000

    def test_roman_page_reported_as_location(self):
        position = parse_page_nav("Page xiv of 320")

        assert position.page is None
        assert position.location == 14
        assert position.total == 320

    def test_surrounding_text_and_whitespace(self):
        position = parse_page_nav("  Page\n 7   of 12 ● 58%  ")

        assert position.page == 7
        assert position.total == 12

    def test_case_insensitive(self):
        assert parse_page_nav("PAGE 3 OF 9").page == 3

    @pytest.mark.parametrize("text", [
        None,
        "",
        "Learning reading speed",
        "Page 0 of 320",
        "Page 5 of 0",
        "Location 0 of 100",
        "Page abc of 10",
    ])
    def test_unparseable_is_none(self, text):
        assert parse_page_nav(text) is None


class TestDeromanize:

    @pytest.mark.parametrize("roman,expected", [
        ("i", 1),
        ("iv", 4),
        ("ix", 9),
        ("xiv", 14),
        ("XL", 40),
        ("mcmxcix", 1999),
    ])
    def test_values(self, roman, expected):
        assert deromanize(roman) == expected

    def test_invalid_character(self):
        assert deromanize("xq") is None

    def test_empty(self):
        assert deromanize("") is None
