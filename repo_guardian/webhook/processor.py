"""
Repository Event Processor Module

This module handles `repository` events once they have been verified
and routed. For a newly created repository it protects the default
branch and then opens an issue announcing the protection.

Design Decisions:
- Two sequential side effects, protect then notify
- No rollback: if the issue cannot be created the protection stays
- Errors propagate to the webhook request
"""

from repo_guardian.logging_config import get_logger
from repo_guardian.models import (
    DEFAULT_BRANCH_PROTECTION,
    BranchProtectionPolicy,
    ProtectionOutcome,
    RepositoryWebhookPayload,
)
from repo_guardian.services.github_client import InstallationClient

logger = get_logger(__name__)


def compose_issue_title(full_name: str) -> str:
    return f"The Default Branch of {full_name} is now protected!"


def compose_issue_body(
    full_name: str,
    sender_login: str,
    policy: BranchProtectionPolicy
) -> str:
    """Issue body mentioning the sender and listing the applied rules."""
    rules = "\n".join(f"- {line}" for line in policy.describe())
    return (
        f"@{sender_login} Protection has been enabled for {full_name}.\n\n"
        f"The protections added are:\n\n"
        f"{rules}"
    )


async def handle_repository_created(
    payload: RepositoryWebhookPayload,
    installation_client: InstallationClient,
    policy: BranchProtectionPolicy = DEFAULT_BRANCH_PROTECTION
) -> ProtectionOutcome:
    """
    Protect the default branch of a new repository and announce it.

    Args:
        payload: Validated repository webhook payload
        installation_client: Client authenticated as the installation
        policy: Branch protection rules to apply

    Returns:
        ProtectionOutcome describing what was changed

    Raises:
        GitHubAPIError: If either GitHub call fails
    """
    repository = payload.repository
    full_name = repository.full_name
    branch = repository.default_branch
    sender_login = payload.sender.login

    logger.info(
        "Repository created, protecting default branch",
        repo=full_name,
        repo_url=repository.url,
        branch=branch,
        sender=sender_login
    )

    await installation_client.protect_branch(full_name, branch, policy)

    issue = await installation_client.create_issue(
        full_name,
        compose_issue_title(full_name),
        compose_issue_body(full_name, sender_login, policy)
    )

    return ProtectionOutcome(
        repository=full_name,
        branch=branch,
        issue_number=issue.get("number"),
        issue_url=issue.get("html_url")
    )
