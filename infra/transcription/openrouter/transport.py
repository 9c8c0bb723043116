import logging
import requests
from typing import Dict, Any, Optional

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1/chat/completions"


class OpenRouterTransport:
    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
        session: Optional[requests.Session] = None
    ):
        self.api_key = api_key
        self.base_url = base_url or DEFAULT_BASE_URL
        self.logger = logger or logging.getLogger(__name__)
        self.session = session or requests.Session()

    def post(self, payload: Dict[str, Any], timeout: int = 120) -> Dict[str, Any]:
        model = payload.get('model', 'unknown')
        self.logger.debug(f"OpenRouter request: model={model}, timeout={timeout}s")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "X-Title": "folio",
        }

        response = self.session.post(
            self.base_url,
            headers=headers,
            json=payload,
            timeout=timeout
        )

        self.logger.debug(f"OpenRouter response: model={model}, status={response.status_code}")

        response.raise_for_status()
        return response.json()
