import io
import time
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from PIL import Image

from infra.config import TranscriberConfig


@dataclass
class TranscriptionResult:
    text: str
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    execution_time_seconds: float = 0.0


def prepare_image(image_bytes: bytes, max_dimension: int) -> bytes:
    """Downscale so the longest side is at most max_dimension; re-encode as PNG only when resized."""
    with Image.open(io.BytesIO(image_bytes)) as image:
        if max(image.size) <= max_dimension:
            return image_bytes

        resized = image.convert("RGB") if image.mode not in ("RGB", "L") else image.copy()
        resized.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)

        buffered = io.BytesIO()
        resized.save(buffered, format="PNG")
        return buffered.getvalue()


class TranscriptionProvider(ABC):
    """Vision model that turns one page image into text.

    Subclasses implement _request(); transcribe() handles image preparation
    and timing.
    """

    def __init__(self, config: TranscriberConfig, logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    def model(self) -> str:
        return self.config.model

    @abstractmethod
    def _request(self, image_bytes: bytes, system_prompt: str, temperature: float) -> TranscriptionResult:
        pass

    def transcribe(self, image_bytes: bytes, system_prompt: str, temperature: float) -> TranscriptionResult:
        prepared = prepare_image(image_bytes, self.config.max_dimension)

        start_time = time.time()
        result = self._request(prepared, system_prompt, temperature)
        result.execution_time_seconds = time.time() - start_time

        return result
