"""
Context management for request-scoped logging fields.

Propagates request_id, the API version being served and the v2 envelope
metadata throughout the application stack using contextvars.
"""

import uuid
from contextvars import ContextVar
from typing import Optional
import structlog

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
api_version_var: ContextVar[Optional[str]] = ContextVar("api_version", default=None)


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return str(uuid.uuid4())


def set_request_id(request_id: Optional[str] = None) -> str:
    """
    Set the request ID in context.

    Args:
        request_id: Optional request ID (generates new one if not provided)

    Returns:
        The request ID that was set
    """
    if not request_id:
        request_id = generate_request_id()

    request_id_var.set(request_id)
    structlog.contextvars.bind_contextvars(request_id=request_id)
    return request_id


def get_request_id() -> Optional[str]:
    return request_id_var.get()


def set_api_version(api_version: str) -> str:
    """
    Set the API version ("v1" or "v2") being served in context.
    """
    api_version_var.set(api_version)
    structlog.contextvars.bind_contextvars(api_version=api_version)
    return api_version


def get_api_version() -> Optional[str]:
    return api_version_var.get()


def bind_envelope(username: Optional[str], name_of_server: Optional[str],
                  envelope_request_id: Optional[str]):
    """
    Bind v2 envelope metadata to the log context.

    The envelope secret_code is never bound.
    """
    structlog.contextvars.bind_contextvars(
        caller=username,
        name_of_server=name_of_server,
        envelope_request_id=envelope_request_id,
    )


def clear_context():
    """
    Clear all context variables.

    Called at request teardown so fields do not leak between requests.
    """
    request_id_var.set(None)
    api_version_var.set(None)
    structlog.contextvars.clear_contextvars()


def bind_context(**kwargs):
    """Bind additional context variables to structlog."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys):
    """Unbind context variables from structlog."""
    structlog.contextvars.unbind_contextvars(*keys)
