from .errors import TranscriptionProviderError, MalformedResponseError
from .provider import TranscriptionProvider, TranscriptionResult, prepare_image
from .registry import create_transcriber, get_provider_class, PROVIDER_TYPES

__all__ = [
    'TranscriptionProviderError',
    'MalformedResponseError',
    'TranscriptionProvider',
    'TranscriptionResult',
    'prepare_image',
    'create_transcriber',
    'get_provider_class',
    'PROVIDER_TYPES',
]
