"""
Data Models Module

This module defines the Pydantic models used throughout the application.
Strong typing ensures data integrity and provides clear contracts between components.

Design Decisions:
- Model only the subset of the webhook payload the service consumes
- Unknown payload fields are ignored, missing required ones fail validation
- The branch protection policy is a fixed, immutable value
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Enums
# =============================================================================

class RepositoryAction(str, Enum):
    """Repository event actions we handle."""
    CREATED = "created"


# =============================================================================
# GitHub Webhook Models
# =============================================================================

class GitHubUser(BaseModel):
    """GitHub user information."""
    login: str = Field(min_length=1)
    id: Optional[int] = None
    type: str = "User"


class GitHubRepository(BaseModel):
    """GitHub repository information."""
    full_name: str = Field(min_length=3, pattern=r"^[^/\s]+/[^/\s]+$")
    url: str
    default_branch: str = Field(min_length=1)
    id: Optional[int] = None
    name: Optional[str] = None
    private: bool = False


class GitHubInstallation(BaseModel):
    """GitHub App installation information."""
    id: int
    account: Optional[GitHubUser] = None


class RepositoryWebhookPayload(BaseModel):
    """Subset of the `repository` event webhook payload."""
    action: str
    repository: GitHubRepository
    sender: GitHubUser
    installation: GitHubInstallation


# =============================================================================
# Authentication Models
# =============================================================================

class InstallationToken(BaseModel):
    """
    Installation access token minted for a single webhook request.

    GitHub controls the expiry; the service never reuses a token
    across requests.
    """
    token: str
    expires_at: Optional[datetime] = None


# =============================================================================
# Branch Protection
# =============================================================================

class BranchProtectionPolicy(BaseModel):
    """
    Default branch protection applied to every new repository.

    Attributes:
        dismiss_stale_reviews: Dismiss approvals when new commits are pushed
        require_code_owner_reviews: Require review from code owners
        required_approving_review_count: Approvals needed before merging
        enforce_admins: Apply the rules to administrators as well
        allow_force_pushes: Permit force pushes to the protected branch
    """
    model_config = ConfigDict(frozen=True)

    dismiss_stale_reviews: bool = False
    require_code_owner_reviews: bool = True
    required_approving_review_count: int = Field(default=1, ge=0, le=6)
    enforce_admins: bool = True
    allow_force_pushes: bool = False

    def to_request_body(self) -> Dict[str, Any]:
        """Build the body of the `PUT .../branches/{branch}/protection` call."""
        return {
            "required_status_checks": None,
            "enforce_admins": self.enforce_admins,
            "required_pull_request_reviews": {
                "dismiss_stale_reviews": self.dismiss_stale_reviews,
                "require_code_owner_reviews": self.require_code_owner_reviews,
                "required_approving_review_count": self.required_approving_review_count,
            },
            "restrictions": None,
            "allow_force_pushes": self.allow_force_pushes,
        }

    def describe(self) -> List[str]:
        """Human-readable description of each rule, one sentence per line."""
        approvals = self.required_approving_review_count
        lines = [
            "All commits must be made to a non-protected branch and submitted "
            "via a pull request before they can be merged.",
            f"{approvals} code review approval{'s' if approvals != 1 else ''} "
            "required to merge changes.",
        ]
        if self.require_code_owner_reviews:
            lines.append("Code owners must review changes to the files they own.")
        if self.dismiss_stale_reviews:
            lines.append("Approvals are dismissed when new commits are pushed.")
        if self.enforce_admins:
            lines.append("Administrators must follow these rules too!")
        if not self.allow_force_pushes:
            lines.append("Force pushes are not allowed.")
        return lines


DEFAULT_BRANCH_PROTECTION = BranchProtectionPolicy()


# =============================================================================
# Internal Processing Models
# =============================================================================

class ProtectionOutcome(BaseModel):
    """Result of handling a single repository-created event."""
    repository: str
    branch: str
    issue_number: Optional[int] = None
    issue_url: Optional[str] = None
