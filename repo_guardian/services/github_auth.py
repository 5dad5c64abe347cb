"""
GitHub App Authentication Service

This module handles GitHub App authentication:
- JWT generation for App authentication
- Installation access token exchange

Design Decisions:
- Use RS256 algorithm for JWT signing (GitHub requirement)
- Parse the private key once, at startup, so a bad key stops the process
- Mint a fresh JWT and installation token for every webhook request
- No token caching and no retries
"""

import time
from functools import lru_cache
from typing import Optional

import httpx
import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from repo_guardian.config import ConfigurationError, get_settings
from repo_guardian.logging_config import get_logger
from repo_guardian.services.github_client import (
    GITHUB_API_BASE,
    GitHubAPIError,
    GitHubAppClient,
    InstallationClient,
)

logger = get_logger(__name__)

# GitHub rejects App JWTs that live longer than ten minutes
JWT_LIFETIME_SECONDS = 10 * 60


class GitHubAuthError(Exception):
    """Custom exception for GitHub authentication errors."""
    pass


def load_private_key(pem: str) -> RSAPrivateKey:
    """
    Parse a PEM encoded RSA private key.

    Raises:
        ConfigurationError: If the key is malformed or not an RSA key
    """
    try:
        key = serialization.load_pem_private_key(pem.encode(), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise ConfigurationError(f"Invalid GitHub App private key: {e}") from e

    if not isinstance(key, RSAPrivateKey):
        raise ConfigurationError("GitHub App private key must be an RSA key")
    return key


class GitHubAppAuth:
    """
    GitHub App Authentication Manager.

    Holds the App identity (id and private key) and hands out clients
    authenticated as the App or as one of its installations.

    Usage:
        auth = GitHubAppAuth(app_id, private_key)
        app_client = auth.authenticate_app()
        client = await auth.authenticate_installation(app_client, installation_id)
    """

    def __init__(
        self,
        app_id: int,
        private_key: str,
        api_base: str = GITHUB_API_BASE,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the auth manager.

        Args:
            app_id: GitHub App identifier
            private_key: PEM encoded RSA private key
            api_base: Base URL of the REST API
            timeout: Timeout in seconds for outbound calls
            transport: Optional httpx transport shared by the clients

        Raises:
            ConfigurationError: If the private key cannot be loaded
        """
        self.app_id = app_id
        self._private_key = load_private_key(private_key)
        self.api_base = api_base
        self.timeout = timeout
        self._transport = transport

    def generate_jwt(self, now: Optional[int] = None) -> str:
        """
        Generate a JWT for GitHub App authentication.

        The JWT authenticates as the App itself, not as an installation.

        Args:
            now: Issue time as a unix timestamp (defaults to the current time)

        Returns:
            Signed JWT string
        """
        issued_at = int(time.time()) if now is None else now

        payload = {
            "iat": issued_at,
            "exp": issued_at + JWT_LIFETIME_SECONDS,
            # PyJWT requires a string issuer
            "iss": str(self.app_id),
        }

        token = jwt.encode(payload, self._private_key, algorithm="RS256")

        logger.debug("Generated GitHub App JWT", app_id=self.app_id)
        return token

    def authenticate_app(self) -> GitHubAppClient:
        """Create a client authenticated as the GitHub App."""
        return GitHubAppClient(
            self.generate_jwt(),
            api_base=self.api_base,
            timeout=self.timeout,
            transport=self._transport
        )

    async def authenticate_installation(
        self,
        app_client: GitHubAppClient,
        installation_id: int
    ) -> InstallationClient:
        """
        Exchange the App credential for an installation client.

        Args:
            app_client: Client authenticated as the App
            installation_id: Installation that triggered the webhook

        Returns:
            InstallationClient bound to a fresh installation token

        Raises:
            GitHubAuthError: If the token exchange fails
        """
        try:
            installation_token = await app_client.create_installation_access_token(installation_id)
        except GitHubAPIError as e:
            logger.error(
                "Failed to get installation token",
                installation_id=installation_id,
                status_code=e.status_code,
                error=str(e)
            )
            raise GitHubAuthError(
                f"Failed to get installation token for installation {installation_id}: {e}"
            ) from e

        return InstallationClient(
            installation_token.token,
            api_base=self.api_base,
            timeout=self.timeout,
            transport=self._transport
        )


@lru_cache()
def get_github_auth() -> GitHubAppAuth:
    """
    Get the process-wide GitHubAppAuth instance.

    Built from settings on first use; the application lifespan calls this
    at startup so configuration errors surface before traffic is accepted.

    Returns:
        GitHubAppAuth instance
    """
    settings = get_settings()
    return GitHubAppAuth(
        app_id=settings.github_app_id,
        private_key=settings.get_private_key(),
        api_base=settings.github_api_base,
        timeout=settings.github_api_timeout
    )
