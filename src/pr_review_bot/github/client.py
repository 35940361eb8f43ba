"""
GitHub API Client

Handles GitHub API authentication, rate limiting, and communication.
Provides methods for PR diff retrieval and issue comment management.
"""

import time
import logging
from typing import Callable, Dict, List, Optional
from datetime import datetime
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


logger = logging.getLogger(__name__)

DIFF_MEDIA_TYPE = 'application/vnd.github.v3.diff'
JSON_MEDIA_TYPE = 'application/vnd.github.v3+json'

TokenProvider = Callable[[Optional[int]], str]


class GitHubAPIError(Exception):
    """GitHub API related errors"""
    def __init__(self, message: str, status_code: Optional[int] = None, response_data: Optional[Dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data


class RateLimitExceeded(GitHubAPIError):
    """GitHub API rate limit exceeded"""
    def __init__(self, reset_time: datetime):
        super().__init__(f"Rate limit exceeded. Resets at {reset_time}", status_code=429)
        self.reset_time = reset_time


class GitHubClient:
    """
    GitHub API client with authentication, rate limiting, and error handling.

    Provides methods for:
    - PR diff retrieval
    - Issue comment publication, listing and deletion
    - API rate limit tracking

    Every request carries a bearer token from ``token_provider``, called
    with the installation id of the pull request (or None).
    """

    def __init__(
        self,
        token_provider: TokenProvider,
        base_url: str = "https://api.github.com",
        timeout_seconds: int = 30
    ):
        """
        Initialize GitHub client.

        Args:
            token_provider: Callable returning a bearer token for an installation id
            base_url: GitHub API base URL (default: https://api.github.com)
            timeout_seconds: Per-request timeout
        """
        self.token_provider = token_provider
        self.base_url = base_url.rstrip('/')
        self.timeout_seconds = timeout_seconds
        self.session = self._create_session()
        self.rate_limit_remaining = 5000
        self.rate_limit_reset = datetime.now()

    def _create_session(self) -> requests.Session:
        """Create requests session with retry strategy."""
        session = requests.Session()

        # Retry only idempotent methods; comment posts must not be duplicated
        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[500, 502, 503, 504],
            allowed_methods=frozenset(['GET', 'DELETE']),
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update({
            'Accept': JSON_MEDIA_TYPE,
            'User-Agent': 'PR-Review-Bot/1.0'
        })

        return session

    def _update_rate_limit(self, response: requests.Response) -> None:
        """Update rate limit information from response headers."""
        if 'X-RateLimit-Remaining' in response.headers:
            self.rate_limit_remaining = int(response.headers['X-RateLimit-Remaining'])

        if 'X-RateLimit-Reset' in response.headers:
            reset_timestamp = int(response.headers['X-RateLimit-Reset'])
            self.rate_limit_reset = datetime.fromtimestamp(reset_timestamp)

        if self.rate_limit_remaining <= 10:
            logger.warning(f"GitHub rate limit low ({self.rate_limit_remaining}), resets at {self.rate_limit_reset}")

    def _make_request(
        self,
        method: str,
        endpoint: str,
        installation_id: Optional[int] = None,
        **kwargs
    ) -> requests.Response:
        """
        Make authenticated request to GitHub API.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint (without base URL)
            installation_id: Installation the token is issued for
            **kwargs: Additional arguments for requests

        Returns:
            Response object

        Raises:
            GitHubAPIError: For API and transport errors
            RateLimitExceeded: When rate limit is exceeded
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        try:
            token = self.token_provider(installation_id)
        except requests.RequestException as e:
            logger.error(f"Token exchange failed: {e}")
            raise GitHubAPIError(f"Token exchange failed: {str(e)}")

        headers = dict(kwargs.pop('headers', {}) or {})
        headers['Authorization'] = f'Bearer {token}'
        kwargs.setdefault('timeout', self.timeout_seconds)

        try:
            response = self.session.request(method, url, headers=headers, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Request failed: {e}")
            raise GitHubAPIError(f"Request failed: {str(e)}")

        self._update_rate_limit(response)

        if response.status_code == 429 or (response.status_code == 403 and self.rate_limit_remaining == 0):
            reset_time = datetime.fromtimestamp(int(response.headers.get('X-RateLimit-Reset', time.time() + 3600)))
            raise RateLimitExceeded(reset_time)

        if not response.ok:
            try:
                error_data = response.json() if response.content else {}
            except ValueError:
                error_data = {}
            raise GitHubAPIError(
                f"GitHub API error: {response.status_code} - {error_data.get('message', 'Unknown error')}",
                status_code=response.status_code,
                response_data=error_data
            )

        return response

    def fetch_diff(self, owner: str, repo: str, pr_number: int, installation_id: Optional[int] = None) -> str:
        """
        Get the unified diff of a pull request.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number
            installation_id: App installation of the repository

        Returns:
            Unified diff text
        """
        logger.info(f"Fetching diff for {owner}/{repo}#{pr_number}")

        response = self._make_request(
            'GET',
            f'/repos/{owner}/{repo}/pulls/{pr_number}',
            installation_id=installation_id,
            headers={'Accept': DIFF_MEDIA_TYPE}
        )
        return response.text

    def post_comment(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        body: str,
        installation_id: Optional[int] = None
    ) -> Dict:
        """
        Post a comment on the pull request conversation.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number
            body: Markdown comment body
            installation_id: App installation of the repository

        Returns:
            Created comment data
        """
        logger.info(f"Posting comment on {owner}/{repo}#{pr_number}")

        response = self._make_request(
            'POST',
            f'/repos/{owner}/{repo}/issues/{pr_number}/comments',
            installation_id=installation_id,
            json={'body': body}
        )
        return response.json()

    def list_issue_comments(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        installation_id: Optional[int] = None
    ) -> List[Dict]:
        """
        Get all comments on the pull request conversation.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number
            installation_id: App installation of the repository

        Returns:
            List of comment data
        """
        comments = []
        page = 1
        per_page = 100

        while True:
            response = self._make_request(
                'GET',
                f'/repos/{owner}/{repo}/issues/{pr_number}/comments',
                installation_id=installation_id,
                params={'page': page, 'per_page': per_page}
            )

            page_comments = response.json()
            if not page_comments:
                break

            comments.extend(page_comments)

            if len(page_comments) < per_page:
                break

            page += 1

        logger.debug(f"Found {len(comments)} comments on {owner}/{repo}#{pr_number}")
        return comments

    def delete_comment(
        self,
        owner: str,
        repo: str,
        comment_id: int,
        installation_id: Optional[int] = None
    ) -> None:
        """
        Delete an issue comment.

        Args:
            owner: Repository owner
            repo: Repository name
            comment_id: Comment id
            installation_id: App installation of the repository
        """
        logger.info(f"Deleting comment {comment_id} on {owner}/{repo}")

        self._make_request(
            'DELETE',
            f'/repos/{owner}/{repo}/issues/comments/{comment_id}',
            installation_id=installation_id
        )
