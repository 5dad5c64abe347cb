"""
Webhook Package

This package contains webhook handling components:
- handler: FastAPI route handlers
- security: Webhook signature verification
- dispatcher: Routing of event type and action to a handler
- processor: Repository-created handling logic
"""

from repo_guardian.webhook.handler import router

__all__ = ["router"]
