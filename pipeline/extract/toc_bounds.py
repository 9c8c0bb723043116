import re
from typing import List, Optional, Tuple, Pattern

from .errors import NoContentPagesError
from .schemas import ContentBounds, TocEntry

# (pattern, meaning); checked in order, case-insensitive
BACK_MATTER_PATTERNS: List[Tuple[Pattern, str]] = [
    (re.compile(r"acknowledgements", re.IGNORECASE), "acknowledgements"),
    (re.compile(r"^discover more$", re.IGNORECASE), "publisher promotion"),
    (re.compile(r"^extras$", re.IGNORECASE), "bonus material"),
    (re.compile(r"about the author", re.IGNORECASE), "author biography"),
    (re.compile(r"meet the author", re.IGNORECASE), "author biography"),
    (re.compile(r"^also by ", re.IGNORECASE), "bibliography"),
    (re.compile(r"^copyright$", re.IGNORECASE), "copyright page"),
    (re.compile(r" teaser$", re.IGNORECASE), "sample of another book"),
    (re.compile(r" preview$", re.IGNORECASE), "sample of another book"),
    (re.compile(r"^excerpt from", re.IGNORECASE), "sample of another book"),
    (re.compile(r"^cast of characters$", re.IGNORECASE), "reference appendix"),
    (re.compile(r"^timeline$", re.IGNORECASE), "reference appendix"),
    (re.compile(r"^other titles", re.IGNORECASE), "bibliography"),
    (re.compile(r" books by ", re.IGNORECASE), "bibliography"),
]


def back_matter_reason(title: str) -> Optional[str]:
    for pattern, meaning in BACK_MATTER_PATTERNS:
        if pattern.search(title or ""):
            return meaning
    return None


def is_back_matter_title(title: str) -> bool:
    return back_matter_reason(title) is not None


def resolve_toc_bounds(
    entries: List[TocEntry],
    back_matter_ratio: float = 0.9,
    include_back_matter: bool = False
) -> ContentBounds:
    """
    Find where the main content of the book starts and stops.

    The first entry with a printed page number starts the content. Content
    stops at the first later entry that sits in the final stretch of the book
    (page / total >= back_matter_ratio) and whose title looks like back matter.
    Without such an entry the content runs to the last page.

    Raises:
        NoContentPagesError: no entry has a page number, or the bounds are empty.
    """
    first_content_entry = next((entry for entry in entries if entry.page is not None), None)
    if first_content_entry is None:
        raise NoContentPagesError("Unable to find first valid page in TOC")

    after_last_content_entry = None
    if not include_back_matter:
        for entry in entries:
            if entry is first_content_entry or entry.page is None:
                continue
            if entry.page / entry.total < back_matter_ratio:
                continue
            if is_back_matter_title(entry.title):
                after_last_content_entry = entry
                break

    total = first_content_entry.total
    end = after_last_content_entry.page if after_last_content_entry else total
    content_page_count = min(end, total)

    if content_page_count <= 0:
        raise NoContentPagesError("No content pages found")

    return ContentBounds(
        first_content_entry=first_content_entry,
        after_last_content_entry=after_last_content_entry,
        content_page_count=content_page_count,
    )
