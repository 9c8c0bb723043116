import re
from typing import Optional

from .schemas import PagePosition

ROMAN_NUMERALS = {
    "I": 1,
    "V": 5,
    "X": 10,
    "L": 50,
    "C": 100,
    "D": 500,
    "M": 1000,
}

PAGE_PATTERN = re.compile(r"page\s+(\d+)\s+of\s+(\d+)", re.IGNORECASE)
LOCATION_PATTERN = re.compile(r"location\s+(\d+)\s+of\s+(\d+)", re.IGNORECASE)
ROMAN_PAGE_PATTERN = re.compile(r"page\s+([ivxlcdm]+)\s+of\s+(\d+)", re.IGNORECASE)


def deromanize(roman: str) -> Optional[int]:
    """Roman numeral to int, with subtractive pairs. None on any other character."""
    if not roman:
        return None

    value = 0
    previous = 0
    for char in reversed(roman.upper()):
        numeral = ROMAN_NUMERALS.get(char)
        if numeral is None:
            return None
        if numeral < previous:
            value -= numeral
        else:
            value += numeral
            previous = numeral
    return value


def _position(page: Optional[int], location: Optional[int], total: int) -> Optional[PagePosition]:
    current = page if page is not None else location
    if not current or current < 1 or total < 1:
        return None
    return PagePosition(page=page, location=location, total=total)


def parse_page_nav(text: Optional[str]) -> Optional[PagePosition]:
    """
    Parse the reader footer into a PagePosition.

    "Page 42 of 320"      -> page 42 / 320
    "Location 15 of 6000" -> location 15 / 6000
    "Page xiv of 320"     -> location 14 / 320
    anything else         -> None
    """
    if not text:
        return None

    normalized = " ".join(text.split())

    match = PAGE_PATTERN.search(normalized)
    if match:
        return _position(int(match.group(1)), None, int(match.group(2)))

    match = LOCATION_PATTERN.search(normalized)
    if match:
        return _position(None, int(match.group(1)), int(match.group(2)))

    match = ROMAN_PAGE_PATTERN.search(normalized)
    if match:
        location = deromanize(match.group(1))
        if location is None:
            return None
        return _position(None, location, int(match.group(2)))

    return None
