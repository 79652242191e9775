"""
Prometheus metrics for the CineVault API.

This module provides metrics collection for HTTP traffic and for the
catalog operations performed by the entity services.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST


# API Request Metrics
http_requests_total = Counter(
    'cinevault_http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'cinevault_http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

# Catalog Metrics
entity_operations_total = Counter(
    'cinevault_entity_operations_total',
    'Total number of catalog operations',
    ['entity', 'operation']  # operation: create, update, delete, soft_delete
)

soft_deletes_total = Counter(
    'cinevault_soft_deletes_total',
    'Total number of rows hidden through soft delete',
    ['entity']
)

search_results = Histogram(
    'cinevault_search_results',
    'Number of rows returned by search endpoints',
    ['entity'],
    buckets=(0, 1, 5, 10, 25, 50, 100, 250)
)


def track_entity_operation(entity, operation, count=1):
    """
    Record a catalog mutation.

    Args:
        entity: Entity name (e.g., 'movie', 'review')
        operation: One of 'create', 'update', 'delete', 'soft_delete'
        count: Number of rows affected
    """
    entity_operations_total.labels(entity=entity, operation=operation).inc(count)
    if operation == 'soft_delete':
        soft_deletes_total.labels(entity=entity).inc(count)


def observe_search(entity, result_count):
    """Record the size of a search result set."""
    search_results.labels(entity=entity).observe(result_count)


def track_http_request(method, endpoint, status, duration):
    """Record a completed HTTP request."""
    http_requests_total.labels(method=method, endpoint=endpoint, status=status).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)


def get_metrics():
    """
    Generate Prometheus metrics in text format.

    Returns:
        Tuple of (metrics_text, content_type)
    """
    return generate_latest(), CONTENT_TYPE_LATEST
