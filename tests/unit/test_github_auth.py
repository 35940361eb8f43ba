"""
Unit tests for GitHub App authentication.
"""

import pytest
from unittest.mock import Mock
import time

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from pr_review_bot.config import ConfigurationError, GitHubAppConfig, GitHubConfig
from pr_review_bot.github.auth import GitHubAppAuth


@pytest.fixture(scope="module")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def key_path(tmp_path, rsa_key):
    pem = rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )
    path = tmp_path / "app.pem"
    path.write_bytes(pem)
    return str(path)


def token_response(token="ghs_installation", expires_at="2099-01-01T00:00:00Z"):
    response = Mock()
    response.json.return_value = {'token': token, 'expires_at': expires_at}
    response.raise_for_status.return_value = None
    return response


class TestGitHubAppAuth:
    """Unit tests for GitHubAppAuth class."""

    def test_app_token_claims(self, key_path, rsa_key):
        """Test that the App JWT is RS256-signed with the expected claims."""
        auth = GitHubAppAuth("12345", key_path)

        token = auth.generate_app_token()
        claims = jwt.decode(token, rsa_key.public_key(), algorithms=["RS256"])

        now = int(time.time())
        assert claims['iss'] == "12345"
        assert now - 120 <= claims['iat'] <= now
        assert claims['exp'] - claims['iat'] == 660

    def test_missing_key_file(self, tmp_path):
        """Test that an unreadable key raises ConfigurationError."""
        auth = GitHubAppAuth("1", str(tmp_path / "missing.pem"))

        with pytest.raises(ConfigurationError):
            auth.load_private_key()

    def test_from_config(self, key_path):
        """Test construction from configuration."""
        config = GitHubConfig(app=GitHubAppConfig(id="42", private_key_path=key_path), api_url="https://ghe.local/api/v3/")

        auth = GitHubAppAuth.from_config(config)

        assert auth.app_id == "42"
        assert auth.api_url == "https://ghe.local/api/v3"

    def test_installation_token_exchange(self, key_path):
        """Test installation token request and caching."""
        session = Mock()
        session.post.return_value = token_response()
        auth = GitHubAppAuth("1", key_path, session=session)

        assert auth.get_installation_token(777) == "ghs_installation"
        assert auth.get_installation_token(777) == "ghs_installation"

        session.post.assert_called_once()
        args, kwargs = session.post.call_args
        assert args[0] == "https://api.github.com/app/installations/777/access_tokens"
        assert kwargs['headers']['Authorization'].startswith("Bearer ")

    def test_expiring_token_is_refreshed(self, key_path):
        """Test that a token close to expiry is requested again."""
        soon = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(time.time() + 30))
        session = Mock()
        session.post.side_effect = [token_response("first", soon), token_response("second")]
        auth = GitHubAppAuth("1", key_path, session=session)

        assert auth.get_installation_token(5) == "first"
        assert auth.get_installation_token(5) == "second"

    def test_token_for(self, key_path):
        """Test token selection by installation id."""
        session = Mock()
        session.post.return_value = token_response()
        auth = GitHubAppAuth("1", key_path, session=session)

        assert auth.token_for(3) == "ghs_installation"
        assert auth.token_for(None).count(".") == 2
