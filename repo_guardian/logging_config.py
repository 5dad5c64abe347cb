"""
Structured Logging Configuration

This module sets up structured logging using structlog.
Logs are formatted as JSON in production for easy parsing by log aggregators.

Design Decisions:
- Use structlog for structured, contextual logging
- JSON format in production, colored console in development
- Never log sensitive data (keys, tokens, secrets, signatures)
"""

import logging
import sys
from typing import Any, Dict

import structlog
from structlog.types import EventDict, WrappedLogger

from repo_guardian import __version__
from repo_guardian.config import get_settings

SERVICE_NAME = "repo-guardian"

_SENSITIVE_KEYS = {
    "token", "access_token", "secret", "password", "private_key",
    "authorization", "auth", "credential", "jwt", "bearer", "signature"
}

# Prefixes GitHub uses for App, installation and user tokens
_TOKEN_PREFIXES = ("ghp_", "ghs_", "ghu_", "github_pat_", "eyJ")


def filter_sensitive_data(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Processor to filter out sensitive data from logs.

    Keeps installation tokens, App JWTs and the webhook secret out of the
    log stream even when a caller binds them by mistake.
    """

    def redact_dict(d: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively redact sensitive values in a dict."""
        result = {}
        for key, value in d.items():
            key_lower = key.lower()
            if any(sensitive in key_lower for sensitive in _SENSITIVE_KEYS):
                result[key] = "[REDACTED]"
            elif isinstance(value, dict):
                result[key] = redact_dict(value)
            elif isinstance(value, str) and len(value) > 20 and value.startswith(_TOKEN_PREFIXES):
                result[key] = "[REDACTED]"
            else:
                result[key] = value
        return result

    return redact_dict(event_dict)


def add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add application context to every log entry."""
    event_dict["app"] = SERVICE_NAME
    event_dict["version"] = __version__
    return event_dict


def setup_logging() -> None:
    """
    Configure structured logging for the application.

    This function should be called once at application startup.
    It configures both structlog and the standard logging library.
    """
    settings = get_settings()

    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_app_context,
        filter_sensitive_data,
    ]

    if settings.log_json_format:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    # Replace rather than stack handlers when the app module is re-imported
    root_logger.handlers = [handler]
    root_logger.setLevel(getattr(logging, settings.log_level))

    # Suppress noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a logger instance with the given name.

    Usage:
        logger = get_logger(__name__)
        logger.info("Protected branch", repo="owner/repo", branch="main")

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)
