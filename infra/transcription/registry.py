import logging
from typing import Optional

from infra.config import LibraryConfig
from .provider import TranscriptionProvider

PROVIDER_DEFINITIONS = [
    {'type': 'ollama', 'class': 'infra.transcription.ollama_provider.OllamaTranscriber'},
    {'type': 'openrouter', 'class': 'infra.transcription.openrouter.provider.OpenRouterTranscriber'},
]

PROVIDER_TYPES = [p['type'] for p in PROVIDER_DEFINITIONS]


def get_provider_class(provider_type: str):
    for provider_def in PROVIDER_DEFINITIONS:
        if provider_def['type'] == provider_type:
            module_path, class_name = provider_def['class'].rsplit('.', 1)
            module = __import__(module_path, fromlist=[class_name])
            return getattr(module, class_name)

    raise ValueError(f"Unknown transcriber type: {provider_type} (known: {', '.join(PROVIDER_TYPES)})")


def create_transcriber(
    name: str,
    library_config: LibraryConfig,
    logger: Optional[logging.Logger] = None
) -> TranscriptionProvider:
    """Build the provider registered under `name` in the library config."""
    config = library_config.get_transcriber(name)
    if config is None:
        known = ', '.join(sorted(library_config.transcribers)) or 'none'
        raise ValueError(f"Unknown transcriber: {name} (configured: {known})")

    provider_class = get_provider_class(config.type)

    if config.type == 'openrouter':
        api_key = library_config.resolve_api_key(config.api_key_ref or config.type)
        return provider_class(config, api_key=api_key, logger=logger)

    return provider_class(config, logger=logger)
