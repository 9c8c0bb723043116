"""
Capability interface for an interactive e-book reader.

The extraction pipeline only talks to a ReaderSurface, never to the browser
directly. Tests drive the pipeline with an in-memory surface.

Network responses handed to subscribers expose:
    .status   int HTTP status
    .url      str request URL
    .json()   parsed JSON body
    .text()   raw body text
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional

ResponseHandler = Callable[[Any], None]


class TocRow(ABC):
    """One row of the reader's table of contents panel."""

    @abstractmethod
    def title(self) -> Optional[str]:
        pass

    @abstractmethod
    def activate(self) -> None:
        """Jump the reader to this entry. Raises ReaderActionError on failure."""
        pass

    @abstractmethod
    def scroll_into_view(self) -> None:
        pass


class ReaderSurface(ABC):

    @abstractmethod
    def open(self, url: str) -> None:
        pass

    @abstractmethod
    def current_url(self) -> str:
        pass

    @abstractmethod
    def is_auth_redirect(self) -> bool:
        """True when the reader bounced to the sign-in flow."""
        pass

    @abstractmethod
    def dismiss_blocking_prompt(self) -> bool:
        pass

    @abstractmethod
    def freeze_chrome(self) -> bool:
        pass

    @abstractmethod
    def apply_display_settings(self) -> bool:
        pass

    @abstractmethod
    def footer_text(self) -> Optional[str]:
        pass

    @abstractmethod
    def page_fingerprint(self) -> Optional[str]:
        """Identity of the rendered page (the page image src)."""
        pass

    @abstractmethod
    def capture_page(self) -> bytes:
        """PNG bytes of the rendered page."""
        pass

    @abstractmethod
    def advance(self) -> None:
        """Issue the next-page action. Raises ReaderActionError if unavailable."""
        pass

    @abstractmethod
    def open_toc(self) -> None:
        pass

    @abstractmethod
    def close_toc(self) -> None:
        pass

    @abstractmethod
    def toc_rows(self) -> List[TocRow]:
        pass

    @abstractmethod
    def go_to_page(self, page: int) -> bool:
        pass

    @abstractmethod
    def wait(self, seconds: float) -> None:
        """Pause while letting the surface keep dispatching events."""
        pass

    @abstractmethod
    def subscribe(self, handler: ResponseHandler) -> None:
        pass

    @abstractmethod
    def unsubscribe(self, handler: ResponseHandler) -> None:
        pass


def reader_url(base_url: str, document_id: str) -> str:
    return f"{base_url.rstrip('/')}/?asin={document_id}"
