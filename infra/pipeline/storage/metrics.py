"""Per-page transcription accounting, persisted next to the transcripts."""

import json
import threading
from dataclasses import dataclass, asdict, fields
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Any

OUTCOMES = ("transcribed", "empty", "refused", "error")


@dataclass
class PageMetrics:
    page: int
    outcome: str = "error"
    attempts: int = 0
    refusals: int = 0
    prompt_tokens: int = 0
    completion_tokens: int = 0
    time_seconds: float = 0.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PageMetrics":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


class MetricsManager:
    """
    metrics.json keyed by capture index:

        {"updated_at": "...", "pages": {"0": {"page": 1, "attempts": 3, ...}}}

    Re-recording an index replaces its entry, so a forced re-run reports the
    latest attempt only.
    """

    def __init__(self, metrics_file: Path):
        self.metrics_file = Path(metrics_file)
        self._lock = threading.RLock()
        self._pages: Dict[int, PageMetrics] = {}
        self._load()

    def record_page(self, index: int, metrics: PageMetrics) -> None:
        with self._lock:
            self._pages[index] = metrics
            self._save()

    def get(self, index: int) -> Optional[PageMetrics]:
        with self._lock:
            return self._pages.get(index)

    def pages(self) -> Dict[int, PageMetrics]:
        with self._lock:
            return dict(sorted(self._pages.items()))

    def summary(self) -> Dict[str, Any]:
        with self._lock:
            entries = list(self._pages.values())

        totals: Dict[str, Any] = {
            "pages": len(entries),
            "attempts": sum(m.attempts for m in entries),
            "refusals": sum(m.refusals for m in entries),
            "prompt_tokens": sum(m.prompt_tokens for m in entries),
            "completion_tokens": sum(m.completion_tokens for m in entries),
            "time_seconds": sum(m.time_seconds for m in entries),
        }
        for outcome in OUTCOMES:
            totals[outcome] = sum(1 for m in entries if m.outcome == outcome)
        return totals

    def reset(self) -> None:
        with self._lock:
            self._pages = {}
            self._save()

    def _load(self) -> None:
        if not self.metrics_file.exists():
            return

        try:
            with open(self.metrics_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
            pages = data["pages"]
            self._pages = {int(k): PageMetrics.from_dict(v) for k, v in pages.items()}
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError):
            # Unreadable metrics are rebuilt by the next run
            self._pages = {}

    def _save(self) -> None:
        self.metrics_file.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "updated_at": datetime.now().isoformat(),
            "pages": {str(index): asdict(m) for index, m in sorted(self._pages.items())},
        }

        temp_file = self.metrics_file.with_suffix('.tmp')
        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            temp_file.replace(self.metrics_file)
        except OSError:
            if temp_file.exists():
                temp_file.unlink()
            raise
