"""
Tests for the GitHub API Clients
"""

import httpx
import pytest

from repo_guardian.models import DEFAULT_BRANCH_PROTECTION
from repo_guardian.services.github_client import (
    BRANCH_PROTECTION_MEDIA_TYPE,
    GitHubAPIError,
    GitHubAppClient,
    InstallationClient,
)


@pytest.fixture
def installation_client(fake_github) -> InstallationClient:
    return InstallationClient("ghs_token", transport=fake_github.transport)


class TestInstallationClient:
    """Test suite for installation-scoped calls."""

    async def test_protect_branch_request(self, installation_client, fake_github):
        await installation_client.protect_branch("org/repo", "main", DEFAULT_BRANCH_PROTECTION)

        (request,) = fake_github.requests
        assert request.method == "PUT"
        assert request.url.path == "/repos/org/repo/branches/main/protection"
        assert request.headers["Accept"] == BRANCH_PROTECTION_MEDIA_TYPE
        assert request.headers["Authorization"] == "Bearer ghs_token"
        assert fake_github.json_body(request) == DEFAULT_BRANCH_PROTECTION.to_request_body()

    async def test_create_issue_request(self, installation_client, fake_github):
        issue = await installation_client.create_issue("org/repo", "Title", "Body")

        (request,) = fake_github.requests
        assert request.method == "POST"
        assert request.url.path == "/repos/org/repo/issues"
        assert request.headers["Accept"] == "application/vnd.github+json"
        assert fake_github.json_body(request) == {"title": "Title", "body": "Body"}
        assert issue["number"] == 1

    async def test_error_status_raises(self, installation_client, fake_github):
        fake_github.fail_paths.add("/repos/org/repo/issues")

        with pytest.raises(GitHubAPIError) as exc_info:
            await installation_client.create_issue("org/repo", "Title", "Body")

        assert exc_info.value.status_code == 500
        assert "Server Error" in exc_info.value.response_body

    async def test_network_error_raises(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = InstallationClient("ghs_token", transport=httpx.MockTransport(refuse))

        with pytest.raises(GitHubAPIError) as exc_info:
            await client.protect_branch("org/repo", "main", DEFAULT_BRANCH_PROTECTION)

        assert exc_info.value.status_code is None

    async def test_custom_api_base(self, fake_github):
        client = InstallationClient(
            "ghs_token",
            api_base="https://github.example.com/api/v3/",
            transport=fake_github.transport
        )

        await client.create_issue("org/repo", "Title", "Body")

        request = fake_github.requests[0]
        assert request.url.host == "github.example.com"
        assert request.url.path == "/api/v3/repos/org/repo/issues"


class TestGitHubAppClient:
    """Test suite for App-level calls."""

    async def test_create_installation_access_token(self, fake_github):
        client = GitHubAppClient("jwt-token", transport=fake_github.transport)

        token = await client.create_installation_access_token(123)

        assert token.token == "ghs_installationtoken1234567890"
        assert token.expires_at is not None
        assert token.expires_at.year == 2030
