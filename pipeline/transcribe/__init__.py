from .schemas import PageTranscript
from .errors import TranscriptionError, RefusalLimitError, SnapshotNameError
from .postprocess import clean_transcript, is_refusal, REFUSAL_PATTERNS
from .retry import TranscriptionRetryPolicy, SYSTEM_PROMPT, EMPHASIS
from .processor import PageTranscriber, transcribe_book, parse_snapshot_name, manifest_images

__all__ = [
    "PageTranscript",
    "TranscriptionError",
    "RefusalLimitError",
    "SnapshotNameError",
    "clean_transcript",
    "is_refusal",
    "REFUSAL_PATTERNS",
    "TranscriptionRetryPolicy",
    "SYSTEM_PROMPT",
    "EMPHASIS",
    "PageTranscriber",
    "transcribe_book",
    "parse_snapshot_name",
    "manifest_images",
]
