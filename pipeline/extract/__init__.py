from .schemas import PagePosition, TocEntry, ContentBounds, PageSnapshot, BookManifest
from .errors import (
    ExtractionError,
    SessionExpiredError,
    NoContentPagesError,
    MetadataTimeoutError,
    TocHarvestError,
)
from .page_nav import parse_page_nav, deromanize
from .toc_bounds import resolve_toc_bounds, is_back_matter_title, BACK_MATTER_PATTERNS
from .navigation import NavigationRetryDriver, NavigationResult, NavigationOutcome
from .side_channel import SideChannelCollector, SideChannelRule, default_rules
from .orchestrator import BookExtractor
from .batch import ExtractionBatch, BatchResult, load_document_ids

__all__ = [
    "PagePosition",
    "TocEntry",
    "ContentBounds",
    "PageSnapshot",
    "BookManifest",
    "ExtractionError",
    "SessionExpiredError",
    "NoContentPagesError",
    "MetadataTimeoutError",
    "TocHarvestError",
    "parse_page_nav",
    "deromanize",
    "resolve_toc_bounds",
    "is_back_matter_title",
    "BACK_MATTER_PATTERNS",
    "NavigationRetryDriver",
    "NavigationResult",
    "NavigationOutcome",
    "SideChannelCollector",
    "SideChannelRule",
    "default_rules",
    "BookExtractor",
    "ExtractionBatch",
    "BatchResult",
    "load_document_ids",
]
