from pathlib import Path
from typing import Optional, Dict, Any, List

from infra.config import Config
from infra.pipeline.storage.book_storage import BookStorage
from infra.pipeline.storage.ledger import CompletionLedger

class Library:
    LEDGER_TEMPLATE = "completed_{stage}.txt"

    def __init__(self, storage_root: Optional[Path] = None):
        self.storage_root = Path(storage_root or Config.book_storage_root).expanduser()
        self.storage_root.mkdir(parents=True, exist_ok=True)

        self._book_storage_cache: Dict[str, BookStorage] = {}
        self._ledgers: Dict[str, CompletionLedger] = {}

    def get_book_storage(self, document_id: str) -> BookStorage:
        if document_id not in self._book_storage_cache:
            self._book_storage_cache[document_id] = BookStorage(
                document_id,
                storage_root=self.storage_root
            )
        return self._book_storage_cache[document_id]

    def ledger(self, stage: str) -> CompletionLedger:
        if stage not in self._ledgers:
            self._ledgers[stage] = CompletionLedger(
                self.storage_root / self.LEDGER_TEMPLATE.format(stage=stage)
            )
        return self._ledgers[stage]

    def _scan_book_directories(self) -> List[str]:
        document_ids = []

        for item in self.storage_root.iterdir():
            if not item.is_dir() or item.name.startswith('.'):
                continue

            if (item / "metadata.json").exists() or (item / "pages").exists():
                document_ids.append(item.name)

        return sorted(document_ids)

    def list_books(self) -> List[Dict[str, Any]]:
        extracted = self.ledger("extract").load()
        transcribed = self.ledger("transcribe").load()

        books = []
        for document_id in self._scan_book_directories():
            storage = self.get_book_storage(document_id)

            title = None
            if storage.has_metadata:
                try:
                    meta = storage.load_metadata().get("document_meta") or {}
                    title = meta.get("title")
                except (ValueError, OSError):
                    title = None

            books.append({
                "document_id": document_id,
                "title": title,
                "page_images": len(storage.list_page_images()),
                "has_manifest": storage.has_metadata,
                "has_content": storage.content_file.exists(),
                "extracted": document_id in extracted,
                "transcribed": document_id in transcribed,
            })

        return books
