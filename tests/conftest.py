"""
Test Configuration

Pytest configuration and fixtures for the test suite.
"""

import hashlib
import hmac
import json
import os
from typing import Callable, Dict, Generator, List, Optional, Set

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa


def _generate_private_key_pem() -> str:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


TEST_APP_ID = 42
TEST_WEBHOOK_SECRET = "test_secret"
TEST_PRIVATE_KEY = _generate_private_key_pem()

# Settings are read when the app module is imported
os.environ["GITHUB_APP_ID"] = str(TEST_APP_ID)
os.environ["GITHUB_WEBHOOK_SECRET"] = TEST_WEBHOOK_SECRET
os.environ["GITHUB_PRIVATE_KEY"] = TEST_PRIVATE_KEY.replace("\n", "\\n")
os.environ["LOG_JSON_FORMAT"] = "false"

from fastapi.testclient import TestClient  # noqa: E402

from repo_guardian.main import app  # noqa: E402
from repo_guardian.services.github_auth import GitHubAppAuth, get_github_auth  # noqa: E402


class FakeGitHub:
    """
    In-process stand-in for the GitHub REST API.

    Records every request and answers the three endpoints the service
    calls. Paths listed in `fail_paths` answer with a 500.
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.fail_paths: Set[str] = set()

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path in self.fail_paths:
            return httpx.Response(500, json={"message": "Server Error"})

        if request.method == "POST" and path.startswith("/app/installations/"):
            return httpx.Response(
                201,
                json={"token": "ghs_installationtoken1234567890", "expires_at": "2030-01-01T00:00:00Z"},
            )
        if request.method == "PUT" and path.endswith("/protection"):
            return httpx.Response(200, json={"url": f"https://api.github.com{path}"})
        if request.method == "POST" and path.endswith("/issues"):
            return httpx.Response(
                201,
                json={"number": 1, "html_url": "https://github.com/org/repo/issues/1"},
            )
        return httpx.Response(404, json={"message": "Not Found"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, method: str, suffix: str) -> List[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and r.url.path.endswith(suffix)
        ]

    @staticmethod
    def json_body(request: httpx.Request) -> Dict:
        return json.loads(request.content)


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def private_key_pem() -> str:
    return TEST_PRIVATE_KEY


@pytest.fixture
def github_auth(fake_github: FakeGitHub) -> GitHubAppAuth:
    """App authenticator whose clients talk to the fake GitHub."""
    return GitHubAppAuth(
        app_id=TEST_APP_ID,
        private_key=TEST_PRIVATE_KEY,
        transport=fake_github.transport,
    )


@pytest.fixture
def client(github_auth: GitHubAppAuth) -> Generator[TestClient, None, None]:
    """Create a test client wired to the fake GitHub."""
    app.dependency_overrides[get_github_auth] = lambda: github_auth
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sign() -> Callable[[bytes, Optional[str]], str]:
    """Build a valid X-Hub-Signature-256 header for a body."""
    def _sign(body: bytes, secret: Optional[str] = None) -> str:
        digest = hmac.new(
            (secret or TEST_WEBHOOK_SECRET).encode(),
            body,
            hashlib.sha256
        ).hexdigest()
        return f"sha256={digest}"
    return _sign


@pytest.fixture
def repository_created_payload() -> dict:
    """Sample repository created webhook payload."""
    return {
        "action": "created",
        "repository": {
            "id": 111,
            "name": "repo",
            "full_name": "org/repo",
            "private": False,
            "url": "https://api.github.com/repos/org/repo",
            "default_branch": "main",
        },
        "sender": {
            "login": "alice",
            "id": 12345,
            "type": "User",
        },
        "installation": {
            "id": 123,
        },
    }
