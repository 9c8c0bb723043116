from infra.pipeline.logger import PipelineLogger, create_logger, console_logger
from infra.pipeline.rich_progress import RichProgressBar
from infra.pipeline.storage import (
    Library,
    BookStorage,
    StageStorage,
    MetricsManager,
    CompletionLedger,
)

__all__ = [
    # Logger
    "PipelineLogger",
    "create_logger",
    "console_logger",

    # Progress
    "RichProgressBar",

    # Storage
    "Library",
    "BookStorage",
    "StageStorage",
    "MetricsManager",
    "CompletionLedger",
]
