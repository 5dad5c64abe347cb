"""
Webhook Handler Module

This module defines the FastAPI endpoint that receives GitHub webhooks.

Design Decisions:
- Verify the signature before looking at the payload
- Acknowledge unrouted events with 200 so GitHub does not redeliver them
- Process routed events synchronously; upstream failures become 502
"""

import json
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import ValidationError

from repo_guardian.config import Settings, get_settings
from repo_guardian.logging_config import get_logger
from repo_guardian.services.github_auth import GitHubAppAuth, GitHubAuthError, get_github_auth
from repo_guardian.services.github_client import GitHubAPIError
from repo_guardian.webhook.dispatcher import resolve_route
from repo_guardian.webhook.security import extract_delivery_id, require_valid_signature

logger = get_logger(__name__)

router = APIRouter(tags=["webhook"])


@router.post("/event_handler", status_code=status.HTTP_200_OK)
async def event_handler(
    request: Request,
    settings: Settings = Depends(get_settings),
    auth: GitHubAppAuth = Depends(get_github_auth)
) -> Dict[str, Any]:
    """
    GitHub webhook endpoint.

    Verifies the signature, routes the event and, for handled events,
    authenticates as the App installation and runs the handler.

    Args:
        request: FastAPI request object
        settings: Application settings
        auth: GitHub App authenticator

    Returns:
        JSON response with status and delivery ID

    Raises:
        HTTPException: On signature, validation or upstream failures
    """
    delivery_id = extract_delivery_id(request)
    event_type = request.headers.get("X-GitHub-Event")

    # Raw body is required for signature verification
    raw_body = await request.body()

    require_valid_signature(request, raw_body, settings.github_webhook_secret)

    try:
        payload_dict = json.loads(raw_body)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
        logger.error(
            "Failed to parse webhook payload",
            event_type=event_type,
            delivery_id=delivery_id,
            error=str(e)
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid JSON payload"
        )

    if not isinstance(payload_dict, dict):
        logger.error(
            "Webhook payload is not a JSON object",
            event_type=event_type,
            delivery_id=delivery_id
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid JSON payload"
        )

    if not event_type:
        logger.warning("Missing event type header", delivery_id=delivery_id)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing X-GitHub-Event header"
        )

    action = payload_dict.get("action")

    logger.debug("Received event", event_type=event_type, action=action, delivery_id=delivery_id)

    route = resolve_route(event_type, action)
    if route is None:
        logger.debug("Ignoring webhook event", event_type=event_type, action=action)
        return {
            "status": "ignored",
            "reason": f"Event type '{event_type}' with action '{action}' not processed",
            "delivery_id": delivery_id
        }

    try:
        payload = route.payload_model.model_validate(payload_dict)
    except ValidationError as e:
        logger.error(
            "Invalid webhook payload",
            event_type=event_type,
            action=action,
            delivery_id=delivery_id,
            error=str(e)
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid payload: {e.error_count()} validation error(s)"
        )

    try:
        app_client = auth.authenticate_app()
        installation_client = await auth.authenticate_installation(
            app_client, payload.installation.id
        )
        outcome = await route.handler(payload, installation_client)
    except (GitHubAuthError, GitHubAPIError) as e:
        logger.error(
            "Webhook processing failed",
            event_type=event_type,
            action=action,
            delivery_id=delivery_id,
            error=str(e),
            error_type=type(e).__name__
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="GitHub API request failed"
        )

    logger.info(
        "Webhook processed",
        event_type=event_type,
        action=action,
        route=route.name,
        delivery_id=delivery_id
    )

    return {
        "status": "processed",
        "event": route.name,
        "delivery_id": delivery_id,
        "result": outcome.model_dump()
    }
