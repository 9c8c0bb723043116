from infra.config import Config
from infra.pipeline.storage import (
    Library,
    BookStorage,
    StageStorage,
    MetricsManager,
    CompletionLedger,
)

from infra.pipeline import (
    PipelineLogger,
    create_logger,
)

__all__ = [
    "Config",

    "Library",
    "BookStorage",
    "StageStorage",
    "MetricsManager",
    "CompletionLedger",

    "PipelineLogger",
    "create_logger",
]
