import json
import threading
from pathlib import Path
from typing import List, Dict, Any, Optional

from infra.pipeline.storage.stage_storage import StageStorage

# Stage name -> directory under the book dir
STAGE_DIRS = {
    "extract": "pages",
    "transcribe": "transcripts",
}

class BookStorage:
    """On-disk layout for one document.

    {storage_root}/{document_id}/
        metadata.json      manifest written by extraction
        content.json       transcripts written by transcription
        pages/             page screenshots
        transcripts/       per-page transcript checkpoints + metrics
        logs/              {stage}.jsonl
    """
    def __init__(self, document_id: str, storage_root: Optional[Path] = None):
        self._document_id = document_id
        self._storage_root = Path(storage_root or Path.home() / "Documents" / "folio").expanduser()
        self._book_dir = self._storage_root / document_id

        self._stage_cache: Dict[str, StageStorage] = {}

        self._metadata_lock = threading.Lock()

    @property
    def document_id(self) -> str:
        return self._document_id

    @property
    def storage_root(self) -> Path:
        return self._storage_root

    @property
    def book_dir(self) -> Path:
        return self._book_dir

    @property
    def exists(self) -> bool:
        return self._book_dir.exists()

    def stage(self, name: str) -> StageStorage:
        if name not in self._stage_cache:
            self._stage_cache[name] = StageStorage(self, name, dirname=STAGE_DIRS.get(name))
        return self._stage_cache[name]

    @property
    def pages(self) -> StageStorage:
        return self.stage("extract")

    @property
    def transcripts(self) -> StageStorage:
        return self.stage("transcribe")

    def list_page_images(self) -> List[Path]:
        return self.pages.list_files("*.png")

    @property
    def metadata_file(self) -> Path:
        return self._book_dir / "metadata.json"

    @property
    def content_file(self) -> Path:
        return self._book_dir / "content.json"

    @property
    def has_metadata(self) -> bool:
        return self.metadata_file.exists()

    def _write_json_unsafe(self, path: Path, data: Any):
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_file = path.with_suffix('.json.tmp')
        with open(temp_file, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        temp_file.replace(path)

    def _read_json_unsafe(self, path: Path) -> Any:
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def load_metadata(self) -> Dict[str, Any]:
        with self._metadata_lock:
            return self._read_json_unsafe(self.metadata_file)

    def save_metadata(self, metadata: Dict[str, Any]):
        with self._metadata_lock:
            self._write_json_unsafe(self.metadata_file, metadata)

    def load_content(self) -> List[Dict[str, Any]]:
        with self._metadata_lock:
            return self._read_json_unsafe(self.content_file)

    def save_content(self, content: List[Dict[str, Any]]):
        with self._metadata_lock:
            self._write_json_unsafe(self.content_file, content)
