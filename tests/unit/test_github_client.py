"""
Unit tests for the GitHub API client.
"""

import pytest
from unittest.mock import Mock, patch
import requests
import time

from pr_review_bot.github.client import GitHubClient, GitHubAPIError, RateLimitExceeded


def make_response(status_code=200, json_data=None, text="", headers=None):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.json.return_value = json_data
    response.text = text
    response.content = text.encode() if text else (b"{}" if json_data is not None else b"")
    response.headers = headers or {
        "X-RateLimit-Remaining": "4999",
        "X-RateLimit-Reset": str(int(time.time()) + 3600),
    }
    return response


class TestGitHubClient:
    """Unit tests for GitHubClient class."""

    def setup_method(self):
        self.token_provider = Mock(return_value="inst_token")
        self.client = GitHubClient(self.token_provider, base_url="https://github.example.com/api/v3/")

    def test_client_initialization(self):
        """Test GitHubClient initialization."""
        assert self.client.base_url == "https://github.example.com/api/v3"
        assert self.client.session.headers["Accept"] == "application/vnd.github.v3+json"
        assert self.client.timeout_seconds == 30

    def test_fetch_diff(self):
        """Test diff retrieval with the diff media type and installation token."""
        with patch.object(self.client.session, 'request', return_value=make_response(text="diff --git a/x b/x")) as mock_request:
            diff = self.client.fetch_diff("octo", "shop", 7, installation_id=99)

        assert diff == "diff --git a/x b/x"
        self.token_provider.assert_called_once_with(99)
        args, kwargs = mock_request.call_args
        assert args == ('GET', "https://github.example.com/api/v3/repos/octo/shop/pulls/7")
        assert kwargs['headers']['Accept'] == "application/vnd.github.v3.diff"
        assert kwargs['headers']['Authorization'] == "Bearer inst_token"
        assert kwargs['timeout'] == 30

    def test_post_comment(self):
        """Test comment publication."""
        created = {'id': 1, 'body': 'hello'}
        with patch.object(self.client.session, 'request', return_value=make_response(201, json_data=created)) as mock_request:
            result = self.client.post_comment("octo", "shop", 7, "hello", installation_id=99)

        assert result == created
        args, kwargs = mock_request.call_args
        assert args == ('POST', "https://github.example.com/api/v3/repos/octo/shop/issues/7/comments")
        assert kwargs['json'] == {'body': 'hello'}

    def test_list_issue_comments_paginates(self):
        """Test that comment listing follows pages until a short page."""
        first_page = [{'id': i} for i in range(100)]
        second_page = [{'id': 100}]
        responses = [make_response(json_data=first_page), make_response(json_data=second_page)]

        with patch.object(self.client.session, 'request', side_effect=responses) as mock_request:
            comments = self.client.list_issue_comments("octo", "shop", 7)

        assert len(comments) == 101
        pages = [call.kwargs['params']['page'] for call in mock_request.call_args_list]
        assert pages == [1, 2]

    def test_delete_comment(self):
        """Test comment deletion."""
        with patch.object(self.client.session, 'request', return_value=make_response(204)) as mock_request:
            self.client.delete_comment("octo", "shop", 555, installation_id=99)

        args, _ = mock_request.call_args
        assert args == ('DELETE', "https://github.example.com/api/v3/repos/octo/shop/issues/comments/555")

    def test_api_error(self):
        """Test that error statuses raise GitHubAPIError."""
        response = make_response(404, json_data={'message': 'Not Found'})
        with patch.object(self.client.session, 'request', return_value=response):
            with pytest.raises(GitHubAPIError) as exc_info:
                self.client.fetch_diff("octo", "shop", 7)

        assert exc_info.value.status_code == 404
        assert "Not Found" in str(exc_info.value)

    def test_rate_limit_exceeded(self):
        """Test rate limit handling."""
        response = make_response(403, json_data={'message': 'rate limited'}, headers={
            "X-RateLimit-Remaining": "0",
            "X-RateLimit-Reset": str(int(time.time()) + 3600),
        })
        with patch.object(self.client.session, 'request', return_value=response):
            with pytest.raises(RateLimitExceeded):
                self.client.fetch_diff("octo", "shop", 7)

        assert self.client.rate_limit_remaining == 0

    def test_transport_error(self):
        """Test that transport errors raise GitHubAPIError."""
        with patch.object(self.client.session, 'request', side_effect=requests.ConnectionError("down")):
            with pytest.raises(GitHubAPIError, match="Request failed"):
                self.client.fetch_diff("octo", "shop", 7)

    def test_token_exchange_error(self):
        """Test that token provider failures raise GitHubAPIError."""
        self.token_provider.side_effect = requests.HTTPError("401")

        with pytest.raises(GitHubAPIError, match="Token exchange failed"):
            self.client.fetch_diff("octo", "shop", 7, installation_id=1)
