"""
OpenRouter transcription backend.

- transport.py: HTTP requests
- response_parser.py: Response parsing
- retry_policy.py: Transport retry logic
- provider.py: TranscriptionProvider implementation
"""

from .transport import OpenRouterTransport
from .response_parser import ParsedResponse, parse_chat_completion
from .retry_policy import RetryPolicy
from .provider import OpenRouterTranscriber

__all__ = [
    'OpenRouterTransport',
    'ParsedResponse',
    'parse_chat_completion',
    'RetryPolicy',
    'OpenRouterTranscriber',
]
