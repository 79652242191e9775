"""
Structured JSON logging configuration for CineVault.

This module sets up structured logging using structlog with:
- JSON formatting for production
- Console formatting for development
- Request ID and API version propagation
- Log scrubbing for sensitive data (passwords, envelope secrets, PII)
- Configurable log levels via environment variables
"""

import os
import logging
import structlog
from typing import Any, Dict, Optional
import re

# Sensitive field names that should be fully redacted
SENSITIVE_FIELD_NAMES = {
    "password", "passwd", "pwd", "password_hash",
    "secret", "secret_code", "secretcode",
    "token", "auth", "authorization",
    "bearer", "access_token", "refresh_token",
    "api_key", "apikey",
}

# Fields that should never be scrubbed (e.g., request tracking)
SAFE_FIELD_NAMES = {
    "request_id", "envelope_request_id", "api_version", "event", "timestamp",
    "level", "service", "environment", "duration_ms", "status_code",
}

EMAIL_PATTERN = re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b')
BEARER_PATTERN = re.compile(r'Bearer\s+[A-Za-z0-9_\-\.]+', re.IGNORECASE)
INLINE_SECRET_PATTERN = re.compile(
    r'((?:password|secret[_\-]?code)["\s:=]+)([^\s,"]+)', re.IGNORECASE
)


def scrub_sensitive_data(value: Any, parent_key: str = None) -> Any:
    """
    Recursively scrub sensitive data from log entries.

    Args:
        value: Value to scrub (can be dict, list, str, or other)
        parent_key: Parent key name for field-level redaction

    Returns:
        Scrubbed value with sensitive data replaced with [REDACTED]
    """
    if isinstance(value, dict):
        return {k: scrub_sensitive_data(v, k) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [scrub_sensitive_data(item, parent_key) for item in value]

    key = parent_key.lower() if isinstance(parent_key, str) else None
    if key in SAFE_FIELD_NAMES:
        return value
    if key in SENSITIVE_FIELD_NAMES:
        return "[REDACTED]"

    if isinstance(value, str):
        scrubbed = BEARER_PATTERN.sub('Bearer [REDACTED]', value)
        scrubbed = INLINE_SECRET_PATTERN.sub(r'\1[REDACTED]', scrubbed)
        scrubbed = EMAIL_PATTERN.sub('[EMAIL_REDACTED]', scrubbed)
        return scrubbed
    return value


def add_app_context(logger: Any, method_name: str, event_dict: Dict) -> Dict:
    """
    Add service name and deployment environment to log entries.
    """
    event_dict["service"] = "cinevault"
    event_dict["environment"] = os.getenv("CINEVAULT_ENV", "Development")
    return event_dict


def add_scrubbing(logger: Any, method_name: str, event_dict: Dict) -> Dict:
    """Processor to scrub sensitive data from log entries."""
    return scrub_sensitive_data(event_dict)


def configure_structlog():
    """
    Configure structlog for the application.

    Sets up processors, formatters, and output based on environment. The
    level is read from LOG_LEVEL on every call so tests can reconfigure.
    """
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    is_dev = os.getenv("FLASK_ENV") == "development" or os.getenv("DEBUG") == "1"

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_app_context,
        add_scrubbing,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if is_dev:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer(default=str))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(log_level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """
    Get a configured structlog logger.

    Args:
        name: Optional logger name (defaults to calling module)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


# Configure logging on module import
configure_structlog()
