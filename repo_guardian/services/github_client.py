"""
GitHub API Client Module

This module provides thin clients for the GitHub REST endpoints the
service calls: minting installation tokens, protecting branches and
creating issues.

Design Decisions:
- Use httpx for async HTTP requests
- One client per credential: App JWT or installation token
- No retries; failures surface to the webhook request
- Transport is injectable so tests can serve GitHub locally
"""

from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from repo_guardian.logging_config import get_logger
from repo_guardian.models import BranchProtectionPolicy, InstallationToken

logger = get_logger(__name__)

GITHUB_API_BASE = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
GITHUB_JSON_MEDIA_TYPE = "application/vnd.github+json"

# Branch protection was released behind a preview media type
BRANCH_PROTECTION_MEDIA_TYPE = "application/vnd.github.luke-cage-preview+json"


class GitHubAPIError(Exception):
    """Custom exception for GitHub API errors."""
    def __init__(self, message: str, status_code: Optional[int] = None, response_body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class GitHubClient:
    """
    Async GitHub API client bound to a single bearer credential.

    Subclasses add the endpoints each credential is allowed to call.

    Usage:
        client = InstallationClient(installation_token)
        await client.create_issue("owner/repo", "Title", "Body")
    """

    def __init__(
        self,
        bearer_token: str,
        api_base: str = GITHUB_API_BASE,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the GitHub client.

        Args:
            bearer_token: App JWT or installation access token
            api_base: Base URL of the REST API
            timeout: Timeout in seconds for each request
            transport: Optional httpx transport (tests use MockTransport)
        """
        self._bearer_token = bearer_token
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _get_headers(self, accept: Optional[str] = None) -> Dict[str, str]:
        """Get authenticated headers for API requests."""
        return {
            "Authorization": f"Bearer {self._bearer_token}",
            "Accept": accept or GITHUB_JSON_MEDIA_TYPE,
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }

    async def _request(
        self,
        method: str,
        endpoint: str,
        accept: Optional[str] = None,
        **kwargs
    ) -> httpx.Response:
        """
        Make an authenticated request to the GitHub API.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint (without base URL)
            accept: Media type for the Accept header
            **kwargs: Additional arguments to pass to httpx

        Returns:
            httpx.Response object

        Raises:
            GitHubAPIError: If the request fails or GitHub returns an error status
        """
        url = f"{self.api_base}{endpoint}"

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.request(
                    method,
                    url,
                    headers=self._get_headers(accept),
                    **kwargs
                )
            except httpx.HTTPError as e:
                logger.error(
                    "GitHub API request failed",
                    method=method,
                    endpoint=endpoint,
                    error=str(e),
                    error_type=type(e).__name__
                )
                raise GitHubAPIError(f"GitHub API request failed: {e}") from e

        if response.status_code >= 400:
            error_body = response.text
            logger.error(
                "GitHub API error",
                method=method,
                status_code=response.status_code,
                endpoint=endpoint,
                error=error_body[:500]
            )
            raise GitHubAPIError(
                f"GitHub API error: {response.status_code}",
                status_code=response.status_code,
                response_body=error_body
            )

        return response


class GitHubAppClient(GitHubClient):
    """Client authenticated as the GitHub App itself (JWT)."""

    async def create_installation_access_token(self, installation_id: int) -> InstallationToken:
        """
        Mint an installation access token.

        Args:
            installation_id: GitHub App installation ID

        Returns:
            InstallationToken scoped to the installation
        """
        response = await self._request(
            "POST",
            f"/app/installations/{installation_id}/access_tokens"
        )
        token = InstallationToken.model_validate(response.json())

        logger.info(
            "Obtained installation access token",
            installation_id=installation_id,
            expires_at=token.expires_at.isoformat() if token.expires_at else None
        )
        return token


class InstallationClient(GitHubClient):
    """Client authenticated as one installation of the GitHub App."""

    async def protect_branch(
        self,
        full_name: str,
        branch: str,
        policy: BranchProtectionPolicy
    ) -> Dict[str, Any]:
        """
        Apply a branch protection policy.

        Args:
            full_name: Repository in owner/repo form
            branch: Branch to protect
            policy: Protection rules to apply

        Returns:
            Branch protection resource returned by GitHub
        """
        endpoint = f"/repos/{full_name}/branches/{quote(branch, safe='')}/protection"

        logger.info("Protecting branch", repo=full_name, branch=branch)

        response = await self._request(
            "PUT",
            endpoint,
            accept=BRANCH_PROTECTION_MEDIA_TYPE,
            json=policy.to_request_body()
        )
        return response.json() if response.content else {}

    async def create_issue(self, full_name: str, title: str, body: str) -> Dict[str, Any]:
        """
        Create an issue on a repository.

        Args:
            full_name: Repository in owner/repo form
            title: Issue title
            body: Issue body in markdown

        Returns:
            Issue resource returned by GitHub
        """
        response = await self._request(
            "POST",
            f"/repos/{full_name}/issues",
            json={"title": title, "body": body}
        )
        issue = response.json()

        logger.info(
            "Created issue",
            repo=full_name,
            issue_number=issue.get("number"),
            issue_url=issue.get("html_url")
        )
        return issue
