"""
Prometheus metrics for the backend service.
"""

import os
from fastapi.responses import Response
from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, generate_latest, CONTENT_TYPE_LATEST
from prometheus_client.multiprocess import MultiProcessCollector


SCHEDULED_FLIGHTS = Gauge(
    'backend_scheduled_flights',
    'Flights in the loaded schedule'
)

ACTIVE_FLIGHTS = Gauge(
    'backend_active_flights',
    'Flights airborne at the current simulated time'
)

WEBSOCKET_CONNECTIONS = Gauge(
    'backend_websocket_connections',
    'Active WebSocket connections'
)

WEBSOCKET_MESSAGES_SENT = Counter(
    'backend_websocket_messages_sent_total',
    'Messages sent by type',
    ['type']  # frame, error
)

HTTP_REQUESTS = Counter(
    'backend_http_requests_total',
    'HTTP requests',
    ['method', 'path', 'status']
)

async def get_metrics():
    """Render every registered collector in the Prometheus text format."""
    registry = REGISTRY
    if 'PROMETHEUS_MULTIPROC_DIR' in os.environ:
        # uvicorn workers each write their own files
        registry = CollectorRegistry()
        MultiProcessCollector(registry)

    return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)
