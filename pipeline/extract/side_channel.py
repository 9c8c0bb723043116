"""
Book metadata captured from the reader's own network traffic.

The reader fetches two payloads while a book opens: `startReading` (document
info) and `YJmetadata.jsonp` (title, authors, ...). A collector subscribes to
the surface's responses, keeps the first payload each rule accepts, and
is polled with a bounded wait once capture is done.
"""

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlparse, parse_qs, ParseResult

from infra.pipeline.logger import console_logger
from infra.reader import ReaderSurface

START_READING_HOST = "read.amazon.com"
START_READING_PATH = "/service/mobile/reader/startReading"
METADATA_PATH_SUFFIX = "YJmetadata.jsonp"

DOCUMENT_INFO_SCRUB = ("karamelToken", "metadataUrl", "YJFormatVersion")
DOCUMENT_META_SCRUB = ("cpr",)


@dataclass
class SideChannelRule:
    """Correlates a network response with one payload of the current document.

    matches(url, response) decides whether the response is a candidate;
    extract(response) returns the cleaned payload, or None to reject it.
    """
    name: str
    matches: Callable[[ParseResult, Any], bool]
    extract: Callable[[Any], Optional[Dict[str, Any]]]


def parse_jsonp(body: str) -> Any:
    start = body.find("(")
    end = body.rfind(")")
    if start == -1 or end == -1 or end <= start:
        raise ValueError("Invalid JSONP response")
    return json.loads(body[start + 1:end])


def normalize_authors(raw: Any) -> List[str]:
    if not isinstance(raw, list):
        return []

    authors = []
    for item in raw:
        if isinstance(item, str):
            name = item
        elif isinstance(item, dict):
            name = item.get("name") or item.get("authorName")
        else:
            name = None

        if isinstance(name, str) and name.strip():
            authors.append(name.strip())
    return authors


def _same_document(value: Any, document_id: str) -> bool:
    return value is not None and str(value).lower() == document_id.lower()


def document_info_rule(document_id: str) -> SideChannelRule:
    def matches(url: ParseResult, response) -> bool:
        if url.hostname != START_READING_HOST or url.path != START_READING_PATH:
            return False
        asin = parse_qs(url.query).get("asin", [None])[0]
        return _same_document(asin, document_id)

    def extract(response) -> Optional[Dict[str, Any]]:
        payload = response.json()
        if not isinstance(payload, dict):
            return None
        return {k: v for k, v in payload.items() if k not in DOCUMENT_INFO_SCRUB}

    return SideChannelRule("document_info", matches, extract)


def document_meta_rule(document_id: str) -> SideChannelRule:
    def matches(url: ParseResult, response) -> bool:
        return url.path.endswith(METADATA_PATH_SUFFIX)

    def extract(response) -> Optional[Dict[str, Any]]:
        payload = parse_jsonp(response.text())
        if not isinstance(payload, dict) or not _same_document(payload.get("asin"), document_id):
            return None

        cleaned = {k: v for k, v in payload.items() if k not in DOCUMENT_META_SCRUB}
        if isinstance(cleaned.get("authorsList"), list):
            cleaned["authorsList"] = normalize_authors(cleaned["authorsList"])
        return cleaned

    return SideChannelRule("document_meta", matches, extract)


def default_rules(document_id: str) -> List[SideChannelRule]:
    return [document_info_rule(document_id), document_meta_rule(document_id)]


class SideChannelCollector:
    def __init__(self, rules: List[SideChannelRule], logger=None):
        self.rules = rules
        self.logger = logger or console_logger("extract")
        self.payloads: Dict[str, Dict[str, Any]] = {}
        self._surface: Optional[ReaderSurface] = None
        self._handler = self.on_response

    def on_response(self, response) -> None:
        pending = [rule for rule in self.rules if rule.name not in self.payloads]
        if not pending:
            return

        try:
            if response.status != 200:
                return
            url = urlparse(response.url)
        except (AttributeError, ValueError):
            return

        for rule in pending:
            try:
                if not rule.matches(url, response):
                    continue
                payload = rule.extract(response)
            except Exception as e:
                # Raised inside the browser's event dispatch; malformed bodies are not fatal.
                self.logger.debug(f"Ignoring malformed {rule.name} response", error=str(e))
                continue

            if payload is not None:
                self.payloads[rule.name] = payload
                self.logger.info(f"Captured {rule.name}")
            return

    def subscribe(self, surface: ReaderSurface) -> None:
        self._surface = surface
        surface.subscribe(self._handler)

    def unsubscribe(self) -> None:
        if self._surface is not None:
            self._surface.unsubscribe(self._handler)
            self._surface = None

    def received(self, name: str) -> bool:
        return name in self.payloads

    @property
    def complete(self) -> bool:
        return all(rule.name in self.payloads for rule in self.rules)

    @property
    def missing(self) -> List[str]:
        return [rule.name for rule in self.rules if rule.name not in self.payloads]

    def get(self, name: str) -> Optional[Dict[str, Any]]:
        return self.payloads.get(name)

    def wait_until_complete(self, surface: ReaderSurface, timeout_seconds: float, poll_seconds: float) -> bool:
        """Poll on the surface (so responses keep arriving) until every rule has a payload."""
        waited = 0.0
        while not self.complete:
            if waited >= timeout_seconds:
                return False
            surface.wait(poll_seconds)
            waited += poll_seconds
        return True
