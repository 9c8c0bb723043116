import threading
from pathlib import Path
from typing import Set


class CompletionLedger:
    """Append-only list of finished document ids, one per line.

    Consulted at startup so a re-run skips documents that already completed.
    A missing file means nothing has completed yet.
    """
    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def load(self) -> Set[str]:
        if not self.path.exists():
            return set()

        with open(self.path, 'r', encoding='utf-8') as f:
            return {line.strip() for line in f if line.strip()}

    def is_completed(self, document_id: str) -> bool:
        return document_id in self.load()

    def mark_completed(self, document_id: str) -> None:
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'a', encoding='utf-8') as f:
                f.write(f"{document_id}\n")
