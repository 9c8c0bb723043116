import logging
from typing import Optional

import httpx
from ollama import Client, ResponseError, RequestError

from infra.config import Config, TranscriberConfig
from .errors import TranscriptionProviderError
from .provider import TranscriptionProvider, TranscriptionResult


class OllamaTranscriber(TranscriptionProvider):
    """Local vision model served by Ollama (default: llava:13b)."""

    def __init__(self, config: TranscriberConfig, logger: Optional[logging.Logger] = None, client: Optional[Client] = None):
        super().__init__(config, logger)
        self.host = config.host or Config.ollama_host
        self.client = client or Client(host=self.host, timeout=config.timeout)

    @property
    def name(self) -> str:
        return "ollama"

    def _request(self, image_bytes: bytes, system_prompt: str, temperature: float) -> TranscriptionResult:
        try:
            response = self.client.chat(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": " ", "images": [image_bytes]},
                ],
                options={"temperature": temperature, **self.config.extra},
            )
        except ResponseError as e:
            raise TranscriptionProviderError(
                f"Ollama error ({e.status_code}): {e.error}",
                provider=self.name,
                retryable=e.status_code >= 500,
            ) from e
        except (RequestError, ConnectionError, httpx.HTTPError) as e:
            raise TranscriptionProviderError(
                f"Ollama request to {self.host} failed: {e}",
                provider=self.name,
                retryable=True,
            ) from e

        return TranscriptionResult(
            text=response["message"]["content"] or "",
            model=self.model,
            prompt_tokens=response.get("prompt_eval_count") or 0,
            completion_tokens=response.get("eval_count") or 0,
        )
