"""
Ollama Client

HTTP client for the Ollama generate API used by the LLM review engine.
"""

import logging
from typing import Dict, Optional

import requests
from requests.adapters import HTTPAdapter

from ..config import LLMConfig


logger = logging.getLogger(__name__)


class LLMClientError(Exception):
    """LLM call failed: transport error, timeout, bad status or malformed body"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class OllamaClient:
    """
    Client for an Ollama server.

    ``generate_code_review`` is blocking; callers that need concurrency
    run it on worker threads. The session's connection pool is the only
    bound on parallel calls.
    """

    def __init__(self, config: Optional[LLMConfig] = None, pool_size: int = 20):
        """
        Initialize Ollama client.

        Args:
            config: LLM settings (model, base URL, timeout, enabled flag)
            pool_size: HTTP connection pool size
        """
        self.config = config or LLMConfig()
        self.base_url = self.config.base_url.rstrip('/')
        self.session = self._create_session(pool_size)

    def _create_session(self, pool_size: int) -> requests.Session:
        """Create requests session sized for concurrent chunk reviews."""
        session = requests.Session()

        adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update({
            'Content-Type': 'application/json',
            'User-Agent': 'PR-Review-Bot/1.0'
        })

        return session

    def generate_code_review(self, prompt: str) -> str:
        """
        Ask the model to review a prompt.

        Args:
            prompt: Complete review prompt

        Returns:
            The model's free-form reply; empty when the LLM is disabled

        Raises:
            LLMClientError: On timeout, transport error, non-2xx status
                or a body without a ``response`` string
        """
        if not self.config.enabled:
            logger.debug("LLM review disabled, skipping generation")
            return ""

        request_body: Dict = {
            'model': self.config.model,
            'prompt': prompt,
            'stream': False,
            'temperature': self.config.temperature,
        }

        try:
            response = self.session.post(
                f"{self.base_url}/api/generate",
                json=request_body,
                timeout=self.config.timeout_seconds,
            )
        except requests.Timeout as e:
            raise LLMClientError(f"LLM request timed out after {self.config.timeout_seconds}s") from e
        except requests.RequestException as e:
            raise LLMClientError(f"LLM request failed: {e}") from e

        if not response.ok:
            raise LLMClientError(
                f"LLM API error: {response.status_code}",
                status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            raise LLMClientError("LLM response is not valid JSON") from e

        text = data.get('response') if isinstance(data, dict) else None
        if not isinstance(text, str):
            raise LLMClientError("LLM response has no 'response' field")

        return text

    def is_available(self) -> bool:
        """Check that the server answers ``/api/tags``."""
        try:
            response = self.session.get(f"{self.base_url}/api/tags", timeout=5)
            return response.ok
        except requests.RequestException as e:
            logger.debug(f"LLM service not available: {e}")
            return False
