import re
from typing import List, Optional, Pattern, Tuple

# Running header/footer page number on a line of its own; only the first one is dropped
PAGE_NUMBER_LINE = re.compile(r"^\s*\d+\s*$\n+", re.MULTILINE)

# (pattern, meaning); only consulted for short outputs
REFUSAL_PATTERNS: List[Tuple[Pattern, str]] = [
    (re.compile(r"i['’]m sorry", re.IGNORECASE), "apology"),
]


def clean_transcript(raw: Optional[str]) -> str:
    text = PAGE_NUMBER_LINE.sub("", raw or "", count=1)
    lines = (line.strip() for line in text.splitlines())
    return "\n".join(line for line in lines if line)


def refusal_reason(text: str, max_chars: int = 100) -> Optional[str]:
    if len(text) >= max_chars:
        return None
    for pattern, meaning in REFUSAL_PATTERNS:
        if pattern.search(text):
            return meaning
    return None


def is_refusal(text: str, max_chars: int = 100) -> bool:
    return refusal_reason(text, max_chars) is not None
