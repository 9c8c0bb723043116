"""
Shared fixtures for pipeline tests.

The reader is replaced by an in-memory surface and the vision model by a
scripted provider. Storage uses real temporary directories.
"""

import io
import json
from typing import Callable, List, Optional

import pytest
from PIL import Image

from infra.config import TranscriberConfig
from infra.reader import ReaderActionError, ReaderSurface, TocRow
from infra.transcription import TranscriptionProvider, TranscriptionResult


DOCUMENT_ID = "B0TESTBOOK"


def png_bytes(label: int = 0, size=(24, 32)) -> bytes:
    image = Image.new("RGB", size, color=(255, 255 - (label % 255), 255))
    buffered = io.BytesIO()
    image.save(buffered, format="PNG")
    return buffered.getvalue()


class FakeResponse:
    def __init__(self, url: str, body, status: int = 200):
        self.url = url
        self.status = status
        self._body = body

    def json(self):
        if isinstance(self._body, str):
            return json.loads(self._body)
        return self._body

    def text(self) -> str:
        if isinstance(self._body, str):
            return self._body
        return json.dumps(self._body)


def start_reading_response(document_id: str = DOCUMENT_ID, **payload) -> FakeResponse:
    body = {
        "asin": document_id,
        "karamelToken": "session-secret",
        "metadataUrl": "https://example.invalid/meta",
        "YJFormatVersion": "2",
        "srl": 123,
        **payload,
    }
    return FakeResponse(
        f"https://read.amazon.com/service/mobile/reader/startReading?asin={document_id}&clientVersion=1",
        body,
    )


def metadata_response(document_id: str = DOCUMENT_ID, title: str = "A Test Book", **payload) -> FakeResponse:
    body = {
        "asin": document_id,
        "title": title,
        "authorsList": [{"name": " Jane Doe "}, "John Roe"],
        "cpr": "drm-blob",
        **payload,
    }
    return FakeResponse(
        f"https://k4wyjmetadata.s3.amazonaws.com/books/{document_id}/YJmetadata.jsonp",
        f"loadMetadata({json.dumps(body)});",
    )


class FakeTocRow(TocRow):
    def __init__(self, surface: "FakeSurface", title: Optional[str], page: Optional[int]):
        self.surface = surface
        self._title = title
        self.page = page
        self.activations = 0

    def title(self) -> Optional[str]:
        return self._title

    def activate(self) -> None:
        self.activations += 1
        if self.page is None:
            raise ReaderActionError(f"TOC row {self._title!r} is not clickable")
        self.surface.current_page = self.page

    def scroll_into_view(self) -> None:
        pass


class FakeSurface(ReaderSurface):
    """
    A book of `total` pages rendered one at a time.

    The fingerprint is derived from the current page, so a page turn is
    visible exactly when current_page changes. The first `ignored_advances`
    next-page actions are dropped, like a reader that misses clicks. At the
    last page the next-page control disappears.
    """

    def __init__(
        self,
        total: int = 5,
        toc: Optional[List[tuple]] = None,
        start_page: int = 1,
        responses: Optional[List[FakeResponse]] = None,
        ignored_advances: int = 0,
        auth_redirect: bool = False,
        frozen: bool = False,
    ):
        self.total = total
        self.current_page = start_page
        self.toc = [FakeTocRow(self, title, page) for title, page in (toc if toc is not None else [("Chapter 1", 1)])]
        self.responses = list(responses if responses is not None else [start_reading_response(), metadata_response()])
        self.ignored_advances = ignored_advances
        self.auth_redirect = auth_redirect
        self.frozen = frozen

        self.url = None
        self.handlers: List[Callable] = []
        self.advance_calls = 0
        self.captures: List[int] = []
        self.waited = 0.0
        self.toc_open = False
        self.restored_to: Optional[int] = None

    def open(self, url: str) -> None:
        self.url = url
        for response in self.responses:
            for handler in list(self.handlers):
                handler(response)

    def current_url(self) -> str:
        return self.url or ""

    def is_auth_redirect(self) -> bool:
        return self.auth_redirect

    def dismiss_blocking_prompt(self) -> bool:
        return False

    def freeze_chrome(self) -> bool:
        return True

    def apply_display_settings(self) -> bool:
        return True

    def footer_text(self) -> Optional[str]:
        return f"Page {self.current_page} of {self.total}"

    def page_fingerprint(self) -> Optional[str]:
        return f"blob:page-{self.current_page}"

    def capture_page(self) -> bytes:
        self.captures.append(self.current_page)
        return png_bytes(self.current_page)

    def advance(self) -> None:
        self.advance_calls += 1
        if self.current_page >= self.total:
            raise ReaderActionError("Next page button not found")
        if self.frozen:
            return
        if self.ignored_advances > 0:
            self.ignored_advances -= 1
            return
        self.current_page += 1

    def open_toc(self) -> None:
        self.toc_open = True

    def close_toc(self) -> None:
        self.toc_open = False

    def toc_rows(self) -> List[TocRow]:
        return list(self.toc)

    def go_to_page(self, page: int) -> bool:
        self.current_page = page
        self.restored_to = page
        return True

    def wait(self, seconds: float) -> None:
        self.waited += seconds

    def subscribe(self, handler) -> None:
        self.handlers.append(handler)

    def unsubscribe(self, handler) -> None:
        if handler in self.handlers:
            self.handlers.remove(handler)


class ScriptedProvider(TranscriptionProvider):
    """
    Returns canned outputs in order; the last one repeats.

    Every call is recorded as (system_prompt, temperature).
    """

    def __init__(self, outputs: Optional[List[str]] = None):
        super().__init__(TranscriberConfig(type="fake", model="fake-vision"))
        self.outputs = list(outputs or ["Some page text"])
        self.calls: List[tuple] = []

    @property
    def name(self) -> str:
        return "fake"

    def _request(self, image_bytes: bytes, system_prompt: str, temperature: float) -> TranscriptionResult:
        index = min(len(self.calls), len(self.outputs) - 1)
        self.calls.append((system_prompt, temperature))
        return TranscriptionResult(
            text=self.outputs[index],
            model=self.model,
            prompt_tokens=10,
            completion_tokens=5,
        )


@pytest.fixture
def tmp_library(tmp_path):
    """Create a temporary library directory."""
    library_root = tmp_path / "library"
    library_root.mkdir()
    return library_root


@pytest.fixture
def library(tmp_library):
    from infra.pipeline.storage.library import Library
    return Library(storage_root=tmp_library)


@pytest.fixture
def book_storage(library):
    return library.get_book_storage(DOCUMENT_ID)


@pytest.fixture
def fast_settings():
    """Extraction settings with a short metadata budget."""
    from infra.config import ExtractionSettings
    return ExtractionSettings(metadata_timeout_seconds=1.0, metadata_poll_seconds=0.5)


@pytest.fixture
def quiet_logger(tmp_path):
    from infra.pipeline.logger import PipelineLogger
    return PipelineLogger(DOCUMENT_ID, "test", log_dir=tmp_path / "logs")


@pytest.fixture
def make_surface():
    return FakeSurface


@pytest.fixture
def make_provider():
    return ScriptedProvider


@pytest.fixture
def responses():
    """Factories for the two side-channel payloads."""
    return {
        "start_reading": start_reading_response,
        "metadata": metadata_response,
        "raw": FakeResponse,
    }


@pytest.fixture
def page_image():
    return png_bytes
