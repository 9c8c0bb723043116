"""
Configuration management for Folio.

Two layers:
- Environment (.env) config: credentials, model defaults, storage root
- Library config: {storage_root}/config.yaml (transcribers, timing budgets)

Usage:
    from infra.config import Config, LibraryConfigManager

    api_key = Config.openrouter_api_key

    manager = LibraryConfigManager(Config.book_storage_root)
    lib_config = manager.load()
"""

from .schemas import (
    ReaderSettings,
    ExtractionSettings,
    TranscriberConfig,
    TranscriptionSettings,
    LibraryConfig,
    resolve_env_vars,
)

from .library_config import (
    LibraryConfigManager,
    load_library_config,
    merge_settings,
)

from .legacy import Config, FolioConfig


__all__ = [
    "Config",
    "FolioConfig",
    "ReaderSettings",
    "ExtractionSettings",
    "TranscriberConfig",
    "TranscriptionSettings",
    "LibraryConfig",
    "resolve_env_vars",
    "LibraryConfigManager",
    "load_library_config",
    "merge_settings",
]
