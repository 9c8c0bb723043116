from infra.pipeline.storage.book_storage import BookStorage
from infra.pipeline.storage.metrics import MetricsManager, PageMetrics
from infra.pipeline.storage.library import Library
from infra.pipeline.storage.stage_storage import StageStorage
from infra.pipeline.storage.ledger import CompletionLedger

__all__ = [
    "Library",
    "BookStorage",
    "StageStorage",
    "MetricsManager",
    "PageMetrics",
    "CompletionLedger",
]
