"""
Webhook Security Module

This module handles secure verification of GitHub webhook payloads.
It implements HMAC-SHA256 signature verification to ensure requests
are genuinely from GitHub.

Design Decisions:
- Use constant-time comparison to prevent timing attacks
- Verify signature before any payload processing
- A missing header is verified as an empty digest, so it can never match
"""

import hashlib
import hmac
from typing import Optional

from fastapi import HTTPException, Request, status

from repo_guardian.logging_config import get_logger

logger = get_logger(__name__)

SIGNATURE_HEADER = "X-Hub-Signature-256"
SIGNATURE_ALGORITHM = "sha256"


def compute_signature(raw_body: bytes, secret: str) -> str:
    """Hex HMAC-SHA256 digest of the body keyed by the webhook secret."""
    return hmac.new(secret.encode(), raw_body, hashlib.sha256).hexdigest()


def verify_signature(
    raw_body: bytes,
    signature_header: Optional[str],
    secret: str
) -> bool:
    """
    Check a `X-Hub-Signature-256` header value against the body.

    Args:
        raw_body: Raw request body bytes
        signature_header: Header value, e.g. "sha256=1a2b...", or None
        secret: Shared webhook secret

    Returns:
        True only if the header carries the expected sha256 digest
    """
    header = signature_header if signature_header is not None else f"{SIGNATURE_ALGORITHM}="

    algorithm, separator, their_digest = header.partition("=")
    if not separator or algorithm != SIGNATURE_ALGORITHM:
        return False

    our_digest = compute_signature(raw_body, secret)
    return hmac.compare_digest(their_digest.encode(), our_digest.encode())


def require_valid_signature(
    request: Request,
    raw_body: bytes,
    secret: str
) -> None:
    """
    Verify the GitHub webhook signature of a request.

    Raises:
        HTTPException: 401 if the signature is missing or invalid
    """
    signature_header = request.headers.get(SIGNATURE_HEADER)

    if not verify_signature(raw_body, signature_header, secret):
        logger.warning(
            "Webhook signature mismatch",
            remote_addr=request.client.host if request.client else "unknown",
            header_present=signature_header is not None,
            event_type=request.headers.get("X-GitHub-Event"),
            delivery_id=extract_delivery_id(request)
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid webhook signature"
        )

    logger.debug("Webhook signature verified successfully")


def extract_delivery_id(request: Request) -> Optional[str]:
    """
    Extract the webhook delivery ID from headers.

    Args:
        request: FastAPI request object

    Returns:
        Delivery ID or None
    """
    return request.headers.get("X-GitHub-Delivery")
