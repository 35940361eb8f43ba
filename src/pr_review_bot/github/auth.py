"""
GitHub App Authentication

Issues RS256 JWTs for the GitHub App and exchanges them for
installation access tokens.
"""

import time
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Tuple

import jwt
import requests

from ..config import ConfigurationError, GitHubConfig


logger = logging.getLogger(__name__)

JWT_LIFETIME_SECONDS = 600
# GitHub rejects iat values in the future; allow for clock drift
JWT_BACKDATE_SECONDS = 60
TOKEN_REFRESH_MARGIN_SECONDS = 60


class GitHubAppAuth:
    """
    Token provider for a GitHub App.

    The private key is read once and cached. Call ``load_private_key``
    at startup, before any concurrent use.
    """

    def __init__(
        self,
        app_id: str,
        private_key_path: str,
        api_url: str = "https://api.github.com",
        timeout_seconds: int = 30,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize GitHub App authentication.

        Args:
            app_id: GitHub App id (JWT issuer)
            private_key_path: Path to the App's PEM private key
            api_url: GitHub API base URL
            timeout_seconds: Timeout of the token exchange request
            session: Optional requests session
        """
        self.app_id = str(app_id)
        self.private_key_path = private_key_path
        self.api_url = api_url.rstrip('/')
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()
        self._private_key: Optional[str] = None
        self._installation_tokens: Dict[int, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: GitHubConfig) -> "GitHubAppAuth":
        return cls(
            app_id=config.app.id,
            private_key_path=config.app.private_key_path,
            api_url=config.api_url,
            timeout_seconds=config.timeout_seconds,
        )

    def load_private_key(self) -> str:
        """
        Read and cache the PEM private key.

        Raises:
            ConfigurationError: When the key file cannot be read
        """
        if self._private_key is None:
            try:
                self._private_key = Path(self.private_key_path).read_text(encoding='utf-8')
            except (OSError, TypeError) as e:
                raise ConfigurationError(f"Cannot read GitHub App private key: {e}") from e
            logger.info("GitHub App private key loaded")
        return self._private_key

    def generate_app_token(self) -> str:
        """Sign a short-lived JWT identifying the App."""
        now = int(time.time())
        payload = {
            'iat': now - JWT_BACKDATE_SECONDS,
            'exp': now + JWT_LIFETIME_SECONDS,
            'iss': self.app_id,
        }
        return jwt.encode(payload, self.load_private_key(), algorithm='RS256')

    def get_installation_token(self, installation_id: int) -> str:
        """
        Installation access token, cached until shortly before expiry.

        Args:
            installation_id: Installation id from the webhook payload

        Returns:
            Token usable as bearer for repository endpoints
        """
        with self._lock:
            cached = self._installation_tokens.get(installation_id)
            if cached and cached[1] - TOKEN_REFRESH_MARGIN_SECONDS > time.time():
                return cached[0]

            logger.info(f"Requesting access token for installation {installation_id}")
            response = self.session.post(
                f"{self.api_url}/app/installations/{installation_id}/access_tokens",
                headers={
                    'Authorization': f'Bearer {self.generate_app_token()}',
                    'Accept': 'application/vnd.github.v3+json',
                },
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()

            data = response.json()
            token = data['token']
            expires_at = self._parse_expiry(data.get('expires_at'))
            self._installation_tokens[installation_id] = (token, expires_at)
            return token

    def token_for(self, installation_id: Optional[int] = None) -> str:
        """Bearer token for API calls: installation token when possible, else the App JWT."""
        if installation_id is not None:
            return self.get_installation_token(installation_id)
        return self.generate_app_token()

    def _parse_expiry(self, expires_at: Optional[str]) -> float:
        if not expires_at:
            # installation tokens live one hour
            return time.time() + 3600
        return datetime.fromisoformat(expires_at.replace('Z', '+00:00')).timestamp()
