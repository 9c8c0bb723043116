import csv
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from infra.config import LibraryConfig
from infra.pipeline.logger import console_logger
from infra.pipeline.storage import Library
from infra.reader import ReaderError

from .errors import ExtractionError
from .orchestrator import BookExtractor


def load_document_ids(csv_path: Path) -> List[str]:
    """First row is a header; one id per following row; blank rows ignored."""
    with open(csv_path, 'r', encoding='utf-8', newline='') as f:
        rows = list(csv.reader(f))

    ids = []
    for row in rows[1:]:
        if row and row[0].strip():
            ids.append(row[0].strip())
    return ids


def unique(ids: List[str]) -> List[str]:
    seen = set()
    ordered = []
    for document_id in ids:
        if document_id not in seen:
            seen.add(document_id)
            ordered.append(document_id)
    return ordered


@dataclass
class BatchResult:
    completed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)


def _default_session_factory(library_config: LibraryConfig):
    from infra.reader.session import ReaderSession
    return lambda: ReaderSession(library_config.reader)


class ExtractionBatch:
    """
    Extracts a list of documents one after another in a single reader session.

    Ids already in completed_extract.txt are skipped before any browser work;
    when nothing is pending no session is opened at all. A document that fails
    is logged and left out of the ledger so a re-run retries it. Only a
    SessionError (cannot sign in) aborts the batch.
    """

    def __init__(
        self,
        library: Library,
        library_config: Optional[LibraryConfig] = None,
        session_factory: Optional[Callable] = None,
        include_back_matter: bool = False,
        max_pages: Optional[int] = None,
        restore_position: bool = True,
        on_event: Optional[Callable[[str, str, str], None]] = None,
        logger=None
    ):
        self.library = library
        self.library_config = library_config or LibraryConfig.with_defaults()
        self.session_factory = session_factory or _default_session_factory(self.library_config)
        self.include_back_matter = include_back_matter
        self.max_pages = max_pages
        self.restore_position = restore_position
        self.on_event = on_event
        self.logger = logger or console_logger("extract", document_id="batch")

    def _emit(self, event: str, document_id: str, detail: str = ""):
        if self.on_event:
            self.on_event(event, document_id, detail)

    def run(self, document_ids: List[str]) -> BatchResult:
        ledger = self.library.ledger("extract")
        completed = ledger.load()

        result = BatchResult()
        pending = []
        for document_id in unique(document_ids):
            if document_id in completed:
                result.skipped.append(document_id)
                self.logger.info(f"Skipping already extracted document {document_id}")
                self._emit("skipped", document_id)
            else:
                pending.append(document_id)

        if not pending:
            self.logger.info("All documents have already been extracted")
            return result

        with self.session_factory() as session:
            surface = session.sign_in(pending[0])

            for document_id in pending:
                storage = self.library.get_book_storage(document_id)
                extractor = BookExtractor(
                    surface,
                    storage,
                    settings=self.library_config.extraction,
                    reader_settings=self.library_config.reader,
                    include_back_matter=self.include_back_matter,
                    max_pages=self.max_pages,
                    restore_position=self.restore_position,
                )
                self._emit("started", document_id)

                try:
                    manifest = extractor.extract()
                except (ExtractionError, ReaderError) as e:
                    extractor.logger.error(f"Extraction failed: {e}", error=type(e).__name__)
                    result.failed[document_id] = str(e)
                    self._emit("failed", document_id, str(e))
                    continue

                ledger.mark_completed(document_id)
                result.completed.append(document_id)
                self._emit("completed", document_id, f"{len(manifest.pages)} pages")

        return result
