"""
GitHub Integration Layer

This module provides GitHub App authentication, the REST client used
for diff retrieval and comments, and the review publisher.
"""

from .auth import GitHubAppAuth
from .client import GitHubClient, GitHubAPIError, RateLimitExceeded
from .publisher import ReviewPublisher

__all__ = ['GitHubAppAuth', 'GitHubClient', 'GitHubAPIError', 'RateLimitExceeded', 'ReviewPublisher']
