"""
Services Package

This package contains the GitHub integration services:
- github_auth: GitHub App and installation authentication
- github_client: GitHub REST API clients
"""

from repo_guardian.services.github_auth import get_github_auth, GitHubAppAuth, GitHubAuthError
from repo_guardian.services.github_client import (
    GitHubAPIError,
    GitHubAppClient,
    GitHubClient,
    InstallationClient,
)

__all__ = [
    "get_github_auth",
    "GitHubAppAuth",
    "GitHubAuthError",
    "GitHubAPIError",
    "GitHubAppClient",
    "GitHubClient",
    "InstallationClient",
]
