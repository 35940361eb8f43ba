"""
Webhook Signature Verifier

Checks the ``X-Hub-Signature-256`` header GitHub sends with every
webhook delivery.
"""

import hmac
import hashlib
import logging
from typing import Optional


logger = logging.getLogger(__name__)

SIGNATURE_PREFIX = "sha256="


class WebhookSignatureVerifier:
    """HMAC-SHA256 verification of webhook bodies against the shared secret."""

    def __init__(self, webhook_secret: Optional[str]):
        self.webhook_secret = webhook_secret

    def compute_signature(self, payload: bytes) -> str:
        """``sha256=`` followed by the lowercase hex HMAC of the raw body."""
        if not self.webhook_secret:
            raise ValueError("GitHub webhook secret not configured")

        digest = hmac.new(self.webhook_secret.encode('utf-8'), payload, hashlib.sha256).hexdigest()
        return SIGNATURE_PREFIX + digest

    def verify_signature(self, payload: bytes, signature: Optional[str]) -> bool:
        """
        Verify a delivery signature in constant time.

        Args:
            payload: Raw request body
            signature: Value of ``X-Hub-Signature-256``

        Returns:
            False when the secret is missing, the header is missing or
            the signature does not match
        """
        if not self.webhook_secret:
            logger.error("GitHub webhook secret not configured")
            return False

        if not signature:
            return False

        expected = self.compute_signature(payload)
        return hmac.compare_digest(expected.encode('utf-8'), signature.encode('utf-8'))
