"""
Event Dispatcher Module

Routes a webhook by event type and action to the coroutine that
handles it. Combinations without a route are acknowledged and ignored.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type

from pydantic import BaseModel

from repo_guardian.models import RepositoryAction, RepositoryWebhookPayload
from repo_guardian.services.github_client import InstallationClient
from repo_guardian.webhook.processor import handle_repository_created

EventHandler = Callable[[Any, InstallationClient], Awaitable[BaseModel]]


@dataclass(frozen=True)
class EventRoute:
    """A handler together with the payload model it expects."""
    name: str
    payload_model: Type[BaseModel]
    handler: EventHandler


ROUTES: Dict[Tuple[str, str], EventRoute] = {
    ("repository", RepositoryAction.CREATED.value): EventRoute(
        name="repository.created",
        payload_model=RepositoryWebhookPayload,
        handler=handle_repository_created,
    ),
}


def resolve_route(event_type: str, action: Any) -> Optional[EventRoute]:
    """
    Find the route for an event type and action.

    Args:
        event_type: GitHub event type from X-GitHub-Event header
        action: Action from payload (absent for some events, e.g. push)

    Returns:
        The matching EventRoute, or None if the event is not handled
    """
    if not isinstance(action, str):
        return None
    return ROUTES.get((event_type, action))
