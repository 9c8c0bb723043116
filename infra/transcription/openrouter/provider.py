import base64
import logging
from typing import Optional

import requests

from infra.config import TranscriberConfig
from ..errors import TranscriptionProviderError, MalformedResponseError
from ..provider import TranscriptionProvider, TranscriptionResult
from .transport import OpenRouterTransport
from .retry_policy import RetryPolicy
from .response_parser import parse_chat_completion


class OpenRouterTranscriber(TranscriptionProvider):
    """Hosted vision model reached through the OpenRouter chat completions API."""

    def __init__(
        self,
        config: TranscriberConfig,
        api_key: Optional[str],
        logger: Optional[logging.Logger] = None,
        transport: Optional[OpenRouterTransport] = None,
        retry_policy: Optional[RetryPolicy] = None
    ):
        super().__init__(config, logger)
        if not api_key and transport is None:
            raise TranscriptionProviderError(
                "OpenRouter API key not configured (set OPENROUTER_API_KEY or api_keys in config.yaml)",
                provider="openrouter",
            )

        self.transport = transport or OpenRouterTransport(api_key, base_url=config.host, logger=self.logger)
        self.retry_policy = retry_policy or RetryPolicy(logger=self.logger, max_retries=config.extra.get("max_retries", 3))

    @property
    def name(self) -> str:
        return "openrouter"

    def build_payload(self, image_bytes: bytes, system_prompt: str, temperature: float):
        image_b64 = base64.b64encode(image_bytes).decode('utf-8')
        return {
            "model": self.model,
            "temperature": temperature,
            "messages": [
                {"role": "system", "content": system_prompt},
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:image/png;base64,{image_b64}"},
                        }
                    ],
                },
            ],
        }

    def _request(self, image_bytes: bytes, system_prompt: str, temperature: float) -> TranscriptionResult:
        payload = self.build_payload(image_bytes, system_prompt, temperature)

        def call():
            result = self.transport.post(payload, timeout=self.config.timeout)
            return parse_chat_completion(result, self.model)

        try:
            parsed = self.retry_policy.execute_with_retry(call, model=self.model)
        except MalformedResponseError:
            raise
        except requests.exceptions.RequestException as e:
            raise TranscriptionProviderError(
                f"OpenRouter request failed: {e}",
                provider=self.name,
                retryable=self.retry_policy.is_retryable(e),
            ) from e

        return TranscriptionResult(
            text=parsed.content,
            model=parsed.model_used,
            prompt_tokens=parsed.prompt_tokens,
            completion_tokens=parsed.completion_tokens,
        )
