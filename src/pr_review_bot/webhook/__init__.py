"""
Webhook Layer

Flask endpoint for GitHub webhook deliveries, signature verification
and event payload models.
"""

from .signature import WebhookSignatureVerifier
from .payload import PullRequestEvent, SUPPORTED_ACTIONS
from .app import create_app, ReviewDispatcher

__all__ = ['WebhookSignatureVerifier', 'PullRequestEvent', 'SUPPORTED_ACTIONS', 'create_app', 'ReviewDispatcher']
