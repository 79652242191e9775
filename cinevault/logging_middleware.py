"""
Flask middleware for structured request logging.

This module provides Flask hooks to:
- Inject request_id and the served API version into the logging context
- Log HTTP request start, completion and failure
- Track request duration and status codes
"""

import time
from flask import Flask, request, g
from cinevault.logging_config import get_logger
from cinevault.logging_context import (
    set_request_id,
    set_api_version,
    clear_context,
)

logger = get_logger(__name__)


def _api_version_from_blueprint(blueprint_name):
    if not blueprint_name:
        return None
    root = blueprint_name.split(".", 1)[0]
    return root if root in ("v1", "v2") else None


def init_logging_middleware(app: Flask):
    """
    Initialize logging middleware for Flask application.

    Args:
        app: Flask application instance
    """

    @app.before_request
    def before_request_logging():
        request_id = set_request_id(request.headers.get("X-Request-ID"))
        g.request_id = request_id
        g.request_start_time = time.perf_counter()

        api_version = _api_version_from_blueprint(request.blueprint)
        if api_version:
            set_api_version(api_version)

        logger.info(
            "request_started",
            method=request.method,
            path=request.path,
            remote_addr=request.remote_addr,
        )

    @app.after_request
    def after_request_logging(response):
        duration_ms = None
        if hasattr(g, "request_start_time"):
            duration_ms = round((time.perf_counter() - g.request_start_time) * 1000, 2)

        logger.info(
            "request_completed",
            method=request.method,
            path=request.path,
            status_code=response.status_code,
            duration_ms=duration_ms,
        )

        if hasattr(g, "request_id"):
            response.headers["X-Request-ID"] = g.request_id

        return response

    @app.teardown_request
    def teardown_request_logging(exception=None):
        if exception:
            logger.warning(
                "request_failed",
                method=request.method,
                path=request.path,
                error=str(exception),
            )

        clear_context()
