from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, model_validator


class PagePosition(BaseModel):
    """
    Reading position parsed from the reader footer.

    Exactly one of page/location is set. Roman-numeral front matter pages
    are reported as locations.
    """
    page: Optional[int] = Field(None, ge=1, description="Printed page number")
    location: Optional[int] = Field(None, ge=1, description="Location when no page number is shown")
    total: int = Field(..., ge=1, description="Total pages (or locations) in the book")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_exactly_one(self):
        if (self.page is None) == (self.location is None):
            raise ValueError("exactly one of page or location must be set")
        return self


class TocEntry(BaseModel):
    title: str = Field(..., min_length=1)
    position: PagePosition
    ordinal: int = Field(..., ge=0, description="Zero-based order in the table of contents")

    model_config = {"frozen": True}

    @property
    def page(self) -> Optional[int]:
        return self.position.page

    @property
    def location(self) -> Optional[int]:
        return self.position.location

    @property
    def total(self) -> int:
        return self.position.total


class ContentBounds(BaseModel):
    """Where the main content starts and stops. Derived every run, never persisted."""
    first_content_entry: TocEntry
    after_last_content_entry: Optional[TocEntry] = None
    content_page_count: int = Field(..., ge=1, description="Last page number that is still main content")

    model_config = {"frozen": True}


class PageSnapshot(BaseModel):
    index: int = Field(..., ge=0, description="Zero-based capture counter")
    page: int = Field(..., ge=1, description="The book's own page number")
    total: int = Field(..., ge=1)
    image_path: str = Field(..., description="Screenshot path relative to the book directory")

    model_config = {"frozen": True}


class BookManifest(BaseModel):
    """
    Durable hand-off from extraction to transcription.

    Stored at: {storage_root}/{document_id}/metadata.json
    """
    document_id: str
    document_info: Dict[str, Any] = Field(..., description="startReading payload, scrubbed of session tokens")
    document_meta: Dict[str, Any] = Field(..., description="YJmetadata payload (title, authors, ...)")
    toc: List[TocEntry]
    pages: List[PageSnapshot]
    captured_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": True}
