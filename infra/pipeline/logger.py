import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, List, Optional

# LogRecord attributes promoted into each JSON line when present
STRUCTURED_FIELDS = (
    'document_id',
    'stage',
    'page',
    'index',
    'location',
    'total',
    'title',
    'text',
    'attempt',
    'temperature',
    'retries',
    'fingerprint',
    'advance_actions',
    'polls',
    'path',
    'duration_seconds',
    'tokens',
    'error',
)

# Keyword arguments that belong to Logger.log itself rather than to the record
_LOGGING_KWARGS = ('exc_info', 'stack_info', 'stacklevel')

CONSOLE_FORMAT = '%(levelname)s: %(message)s'


class FlushingFileHandler(logging.FileHandler):
    """Flushes on every record so a tail -f on the jsonl file stays current."""

    def emit(self, record):
        super().emit(record)
        self.flush()


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.now().astimezone().isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
        }
        entry.update(
            (name, getattr(record, name))
            for name in STRUCTURED_FIELDS
            if hasattr(record, name)
        )
        return json.dumps(entry, default=str)


class PipelineLogger:
    """Structured logger for one stage of one document.

    Records go to ``<log_dir>/<stage>.jsonl`` (appended, one JSON object per
    line) and optionally to stderr. Keyword arguments passed to the level
    methods become fields of the JSON line:

        logger.info("Page captured", index=4, page=5, total=312)

    Nothing touches the filesystem until the first record is emitted, so a
    stage that logs nothing leaves no empty files behind.
    """

    def __init__(
        self,
        document_id: str,
        stage: str,
        log_dir: Path,
        console_output: bool = False,
        json_output: bool = True,
        level: str = "INFO",
        filename: str = None
    ):
        self.document_id = document_id
        self.stage = stage
        self.log_dir = Path(log_dir)
        self.console_output = console_output
        self.json_output = json_output
        self.level = level.upper()
        self.filename = filename or f"{stage}.jsonl"

        self.log_file: Optional[Path] = None
        self._logger: Optional[logging.Logger] = None

    def _build_handlers(self) -> List[logging.Handler]:
        handlers: List[logging.Handler] = []

        if self.console_output:
            stream = logging.StreamHandler(sys.stderr)
            stream.setFormatter(logging.Formatter(CONSOLE_FORMAT))
            handlers.append(stream)

        if self.json_output:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.log_file = self.log_dir / self.filename
            jsonl = FlushingFileHandler(self.log_file, mode='a', encoding='utf-8')
            jsonl.setFormatter(JSONFormatter())
            handlers.append(jsonl)

        return handlers

    @property
    def logger(self) -> logging.Logger:
        if self._logger is None:
            # id(self) keeps two loggers for the same stage from sharing handlers
            target = logging.getLogger(f"folio.{self.document_id}.{self.stage}.{id(self)}")
            target.setLevel(self.level)
            target.propagate = False
            for handler in self._build_handlers():
                target.addHandler(handler)
            self._logger = target
        return self._logger

    def log(self, level: int, message: str, **fields):
        call_kwargs = {name: fields.pop(name) for name in _LOGGING_KWARGS if name in fields}

        extra = {'document_id': self.document_id, 'stage': self.stage}
        extra.update(fields.pop('extra', None) or {})
        extra.update(fields)

        self.logger.log(level, message, extra=extra, **call_kwargs)

    def debug(self, message: str, **fields):
        self.log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields):
        self.log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields):
        self.log(logging.WARNING, message, **fields)

    def error(self, message: str, **fields):
        self.log(logging.ERROR, message, **fields)

    def close(self):
        if self._logger is None:
            return
        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)
            handler.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __del__(self):
        try:
            self.close()
        except Exception:
            pass


def create_logger(document_id: str, stage: str, **kwargs) -> PipelineLogger:
    return PipelineLogger(document_id, stage, **kwargs)


def console_logger(stage: str, document_id: str = "-", level: str = "INFO") -> PipelineLogger:
    """Stderr-only logger for components running outside a book directory."""
    return PipelineLogger(
        document_id,
        stage,
        log_dir=Path.cwd(),
        console_output=True,
        json_output=False,
        level=level,
    )
