# Initialize structured logging early
from cinevault.logging_config import get_logger, configure_structlog
configure_structlog()

import time

from flask import Flask, Response, g, jsonify, request

from cinevault.config import Config
from cinevault.exceptions import register_error_handlers
from cinevault.logging_middleware import init_logging_middleware
from cinevault.metrics import get_metrics, track_http_request
from cinevault.models import db
from cinevault.routes import api_v1, api_v2

# Configure structured logger for app
logger = get_logger(__name__)


def create_app(config_object=None):
    """
    Build the CineVault application.

    Args:
        config_object: Config class (default ``Config``) or a mapping of
            overrides applied on top of it

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if isinstance(config_object, dict):
        app.config.update(config_object)
    elif config_object is not None:
        app.config.from_object(config_object)

    # Initialize logging middleware
    init_logging_middleware(app)

    db.init_app(app)

    app.register_blueprint(api_v1)
    app.register_blueprint(api_v2)
    register_error_handlers(app)

    # Middleware to track HTTP request metrics
    @app.before_request
    def before_request_metrics():
        """Store request start time for duration tracking."""
        g.metrics_start_time = time.time()

    @app.after_request
    def after_request_metrics(response):
        """Track HTTP request metrics after each request."""
        if hasattr(g, "metrics_start_time"):
            duration = time.time() - g.metrics_start_time
            # Unmatched URLs share one label value
            endpoint = request.endpoint or "unmatched"
            track_http_request(request.method, endpoint, response.status_code, duration)
        return response

    # --- Health Check Endpoint ---
    @app.route('/health')
    def health():
        """Health check endpoint for deployment monitoring."""
        return jsonify({"status": "healthy", "service": "cinevault"}), 200

    @app.route('/api/metrics')
    def metrics():
        """Prometheus scrape endpoint."""
        data, content_type = get_metrics()
        return Response(data, content_type=content_type)

    logger.info(
        "app_created",
        environment=app.config.get("APP_ENV"),
        testing=app.config.get("TESTING", False),
    )
    return app


def init_db(app):
    """Initialize database tables."""
    with app.app_context():
        db.create_all()
    logger.info("database_initialized", message="Database tables initialized successfully")
