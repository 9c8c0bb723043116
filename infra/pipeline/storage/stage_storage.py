import json
import os
import shutil
import threading
from pathlib import Path
from typing import Callable, Dict, Any, List, Optional, Type, TYPE_CHECKING
from pydantic import BaseModel

if TYPE_CHECKING:
    from infra.pipeline.storage.book_storage import BookStorage
    from infra.pipeline.storage.metrics import MetricsManager
    from infra.pipeline.logger import PipelineLogger


def _debug_enabled() -> bool:
    return os.environ.get("DEBUG", "").lower() in ("true", "1", "yes")


class StageStorage:
    """One output directory of a book (``pages/`` or ``transcripts/``).

    Nothing is created on disk until something is written, so status
    commands can inspect a library without leaving empty folders behind.
    Writes go through a temp file and a rename; a crash mid-write leaves the
    previous version (or nothing) rather than a truncated file.
    """

    def __init__(self, storage: 'BookStorage', name: str, dirname: Optional[str] = None):
        self.storage = storage
        self.name = name
        self.output_dir = storage.book_dir / (dirname or name)

        self._lock = threading.RLock()
        self._metrics_manager: Optional['MetricsManager'] = None
        self._logger: Optional['PipelineLogger'] = None

    @property
    def metrics_manager(self) -> 'MetricsManager':
        if self._metrics_manager is None:
            from infra.pipeline.storage.metrics import MetricsManager
            self._metrics_manager = MetricsManager(self.output_dir / 'metrics.json')
        return self._metrics_manager

    def logger(self, console_output: bool = False) -> 'PipelineLogger':
        """Stage logger writing to ``{book}/logs/{stage}.jsonl``."""
        if self._logger is None:
            from infra.pipeline.logger import create_logger
            self._logger = create_logger(
                self.storage.document_id,
                self.name,
                log_dir=self.storage.book_dir / "logs",
                console_output=console_output,
                level="DEBUG" if _debug_enabled() else "INFO",
            )
        return self._logger

    def _write_atomic(self, filename: str, write: Callable[[Path], None]) -> Path:
        target = self.output_dir / filename
        staging = target.with_name(target.name + '.tmp')

        with self._lock:
            target.parent.mkdir(parents=True, exist_ok=True)
            try:
                write(staging)
                staging.replace(target)
            except Exception:
                staging.unlink(missing_ok=True)
                raise

        return target

    def save_file(
        self,
        filename: str,
        data: Dict[str, Any],
        schema: Optional[Type[BaseModel]] = None
    ) -> Path:
        if schema is not None:
            # Validate before touching the disk so bad data never lands
            data = schema.model_validate(data).model_dump(mode="json")

        def write(path: Path):
            path.write_text(json.dumps(data, indent=2), encoding='utf-8')

        return self._write_atomic(filename, write)

    def save_bytes(self, filename: str, data: bytes) -> Path:
        return self._write_atomic(filename, lambda path: path.write_bytes(data))

    def load_file(
        self,
        filename: str,
        schema: Optional[Type[BaseModel]] = None
    ) -> Dict[str, Any]:
        source = self.output_dir / filename
        if not source.is_file():
            raise FileNotFoundError(f"File not found: {source}")

        data = json.loads(source.read_text(encoding='utf-8'))
        if schema is None:
            return data
        return schema.model_validate(data).model_dump(mode="json")

    def has_file(self, filename: str) -> bool:
        return (self.output_dir / filename).exists()

    def list_files(self, pattern: str) -> List[Path]:
        if not self.output_dir.is_dir():
            return []
        return sorted(self.output_dir.glob(pattern))

    def clean(self):
        with self._lock:
            shutil.rmtree(self.output_dir, ignore_errors=True)
            self._metrics_manager = None
