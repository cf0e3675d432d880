"""
Metrics Collection with Prometheus.

Exposes channel and SDK forwarding metrics for monitoring.
"""

from enum import Enum

from prometheus_client import Counter, Gauge, Histogram, Info

from purchases_bridge.config import settings


class MetricLabels(str, Enum):
    """Standard metric label names."""

    ENDPOINT = "endpoint"
    METHOD = "method"
    STATUS_CODE = "status_code"
    OUTCOME = "outcome"
    EVENT = "event"
    OPERATION = "operation"
    ERROR_TYPE = "error_type"


class BridgeMetrics:
    """
    Centralized metrics for the purchases bridge.

    Covers:
    - Method calls (rate, duration, outcome)
    - Outbound events (sent, dropped)
    - HTTP transport requests
    - Errors by type
    """

    def __init__(self) -> None:
        """Initialize all Prometheus metrics."""

        # ====================================================================
        # Service Info
        # ====================================================================
        self.service_info = Info(
            "purchases_bridge_service",
            "Service information",
        )
        self.service_info.info(
            {
                "version": settings.api_version,
                "service_name": settings.service_name,
                "channel": settings.channel_name,
            }
        )

        # ====================================================================
        # Method Call Metrics
        # ====================================================================
        self.method_calls_total = Counter(
            "purchases_bridge_method_calls_total",
            "Total method calls by outcome",
            [MetricLabels.METHOD, MetricLabels.OUTCOME],
        )

        self.method_call_duration_seconds = Histogram(
            "purchases_bridge_method_call_duration_seconds",
            "Method call duration in seconds, including the SDK round trip",
            [MetricLabels.METHOD],
            buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
        )

        self.method_calls_in_progress = Gauge(
            "purchases_bridge_method_calls_in_progress",
            "Number of calls currently waiting on the SDK",
            [MetricLabels.METHOD],
        )

        # ====================================================================
        # Event Metrics
        # ====================================================================
        self.events_sent_total = Counter(
            "purchases_bridge_events_sent_total",
            "Total events pushed to the host shell",
            [MetricLabels.EVENT],
        )

        self.events_dropped_total = Counter(
            "purchases_bridge_events_dropped_total",
            "Total events dropped because the listener was detached",
            [MetricLabels.EVENT],
        )

        # ====================================================================
        # HTTP Metrics
        # ====================================================================
        self.http_requests_total = Counter(
            "purchases_bridge_http_requests_total",
            "Total HTTP requests",
            [MetricLabels.ENDPOINT, MetricLabels.METHOD, MetricLabels.STATUS_CODE],
        )

        self.http_request_duration_seconds = Histogram(
            "purchases_bridge_http_request_duration_seconds",
            "HTTP request duration in seconds",
            [MetricLabels.ENDPOINT, MetricLabels.METHOD],
            buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
        )

        # ====================================================================
        # Error Metrics
        # ====================================================================
        self.errors_total = Counter(
            "purchases_bridge_errors_total",
            "Total errors by type",
            [MetricLabels.ERROR_TYPE, MetricLabels.OPERATION],
        )

    # ========================================================================
    # Helper Methods
    # ========================================================================

    def record_method_call(self, method: str, outcome: str, duration: float) -> None:
        """Record method call metrics."""
        self.method_calls_total.labels(method=method, outcome=outcome).inc()
        self.method_call_duration_seconds.labels(method=method).observe(duration)

    def record_event(self, event: str, sent: bool) -> None:
        """Record an outbound event."""
        if sent:
            self.events_sent_total.labels(event=event).inc()
        else:
            self.events_dropped_total.labels(event=event).inc()

    def record_http_request(
        self, endpoint: str, method: str, status_code: int, duration: float
    ) -> None:
        """Record HTTP request metrics."""
        self.http_requests_total.labels(
            endpoint=endpoint, method=method, status_code=status_code
        ).inc()
        self.http_request_duration_seconds.labels(endpoint=endpoint, method=method).observe(
            duration
        )

    def record_error(self, error_type: str, operation: str) -> None:
        """Record error occurrence."""
        self.errors_total.labels(error_type=error_type, operation=operation).inc()


# Global metrics instance
metrics = BridgeMetrics()
