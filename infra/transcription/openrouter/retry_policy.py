import time
import random
import logging
import requests
from typing import Callable, TypeVar, Optional

from ..errors import MalformedResponseError

T = TypeVar('T')

RETRYABLE_STATUS = (408, 429)


class RetryPolicy:
    """Transport-level retries: timeouts, rate limits, 5xx and malformed bodies.

    Refusals and empty transcriptions are not handled here; they are a
    property of the model output, retried by the transcription stage.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        max_retries: int = 3,
        base_delay: float = 2.0,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.max_retries = max(1, max_retries)
        self.base_delay = base_delay
        self._sleep = sleep

    def _delay(self, attempt: int) -> float:
        return self.base_delay * (2 ** attempt) + random.uniform(0, self.base_delay / 2)

    def is_retryable(self, error: Exception) -> bool:
        if isinstance(error, (MalformedResponseError, requests.exceptions.Timeout, requests.exceptions.ConnectionError)):
            return True

        if isinstance(error, requests.exceptions.HTTPError) and error.response is not None:
            status = error.response.status_code
            return status >= 500 or status in RETRYABLE_STATUS

        return False

    def execute_with_retry(self, fn: Callable[[], T], model: str = "unknown") -> T:
        for attempt in range(self.max_retries):
            try:
                return fn()
            except (MalformedResponseError, requests.exceptions.RequestException) as e:
                final = attempt >= self.max_retries - 1
                if final or not self.is_retryable(e):
                    self.logger.debug(f"{model}: giving up after attempt {attempt + 1}: {e}")
                    raise

                delay = self._delay(attempt)
                self.logger.debug(
                    f"{model}: {type(e).__name__} on attempt {attempt + 1}/{self.max_retries}, "
                    f"retrying in {delay:.1f}s"
                )
                self._sleep(delay)
