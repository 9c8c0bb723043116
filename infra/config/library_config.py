"""
Reading and writing {storage_root}/config.yaml.

The file holds api keys (usually ``${ENV_VAR}`` references, kept unexpanded
on disk), named transcribers and the reader/extraction/transcription
sections. A missing file behaves like ``LibraryConfig.with_defaults()``;
a partial file is filled in from the schema defaults.
"""

from pathlib import Path
from typing import Any, Dict, Optional
import yaml

from .schemas import LibraryConfig, TranscriberConfig


CONFIG_FILENAME = "config.yaml"


def merge_settings(current: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
    """Return ``current`` with ``changes`` applied; nested sections merge key by key."""
    merged = dict(current)
    for key, value in changes.items():
        existing = merged.get(key)
        if isinstance(existing, dict) and isinstance(value, dict):
            merged[key] = merge_settings(existing, value)
        else:
            merged[key] = value
    return merged


class LibraryConfigManager:

    def __init__(self, storage_root: Path):
        self.storage_root = Path(storage_root).expanduser().resolve()
        self.config_path = self.storage_root / CONFIG_FILENAME

    def exists(self) -> bool:
        return self.config_path.is_file()

    def load(self) -> LibraryConfig:
        if not self.exists():
            return LibraryConfig.with_defaults()

        raw = yaml.safe_load(self.config_path.read_text(encoding="utf-8"))
        return LibraryConfig.model_validate(raw or {})

    def save(self, config: LibraryConfig) -> None:
        self.storage_root.mkdir(parents=True, exist_ok=True)
        text = yaml.safe_dump(
            config.model_dump(exclude_none=True),
            default_flow_style=False,
            sort_keys=False,
        )
        self.config_path.write_text(text, encoding="utf-8")

    def update(self, updates: Dict[str, Any]) -> LibraryConfig:
        """Merge ``updates`` into the stored config.

        The merged result is validated before anything is written, so an
        invalid value raises ``ValidationError`` and leaves the file as it was.
        """
        merged = merge_settings(self.load().model_dump(), updates)
        config = LibraryConfig.model_validate(merged)
        self.save(config)
        return config

    def add_transcriber(
        self,
        name: str,
        transcriber_type: str,
        model: str,
        host: Optional[str] = None,
        api_key_ref: Optional[str] = None,
        **extra
    ) -> None:
        config = self.load()
        config.transcribers[name] = TranscriberConfig(
            type=transcriber_type,
            model=model,
            host=host,
            api_key_ref=api_key_ref,
            extra=extra,
        )
        self.save(config)


def load_library_config(storage_root: Path) -> LibraryConfig:
    return LibraryConfigManager(storage_root).load()
