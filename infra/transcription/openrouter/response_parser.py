from dataclasses import dataclass
from typing import Dict, Any, Optional

from ..errors import MalformedResponseError


@dataclass
class ParsedResponse:
    content: str
    prompt_tokens: int
    completion_tokens: int
    model_used: str


def parse_chat_completion(result: Dict[str, Any], model: str) -> ParsedResponse:
    try:
        message = result['choices'][0]['message']
        content = message.get('content') or ""
    except (KeyError, IndexError, TypeError, AttributeError) as e:
        keys = list(result.keys()) if isinstance(result, dict) else type(result).__name__
        raise MalformedResponseError(
            f"Malformed OpenRouter response for {model}: missing {e!r} (keys: {keys})",
            provider="openrouter",
            retryable=True,
        ) from e

    usage: Optional[Dict[str, Any]] = result.get('usage') or {}

    return ParsedResponse(
        content=content,
        prompt_tokens=usage.get('prompt_tokens', 0),
        completion_tokens=usage.get('completion_tokens', 0),
        model_used=result.get('model', model),
    )
