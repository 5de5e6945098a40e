"""
Prometheus metrics for the secret generator operator.

This module provides metrics collection for reconciliation passes and
generated secret fields, and the HTTP server exposing them.
"""

import logging
import time
from contextlib import asynccontextmanager

# aiohttp is provided transitively by kopf, which uses it for probes.
from aiohttp.web import (
    Application,
    AppRunner,
    Request,
    Response,
    TCPSite,
)
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)

# Global metrics registry
_metrics_registry: CollectorRegistry | None = None

RECONCILIATION_TOTAL = Counter(
    "secret_generator_reconciliation_total",
    "Total number of reconciliation passes",
    ["namespace", "result"],
    registry=None,  # Will be set during initialization
)

RECONCILIATION_DURATION = Histogram(
    "secret_generator_reconciliation_duration_seconds",
    "Time spent on reconciliation passes",
    ["namespace"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
    registry=None,
)

RECONCILIATION_ERRORS = Counter(
    "secret_generator_reconciliation_errors_total",
    "Total number of reconciliation errors",
    ["namespace", "error_type", "retryable"],
    registry=None,
)

SECRET_UPDATES_TOTAL = Counter(
    "secret_generator_secret_updates_total",
    "Total number of secrets written back after generation",
    ["namespace", "secret_type"],
    registry=None,
)

FIELDS_GENERATED_TOTAL = Counter(
    "secret_generator_fields_generated_total",
    "Total number of secret fields whose value was (re)generated",
    ["namespace", "secret_type"],
    registry=None,
)


def get_metrics_registry() -> CollectorRegistry:
    """Get or create the global metrics registry."""
    global _metrics_registry

    if _metrics_registry is None:
        _metrics_registry = CollectorRegistry()

        for metric in [
            RECONCILIATION_TOTAL,
            RECONCILIATION_DURATION,
            RECONCILIATION_ERRORS,
            SECRET_UPDATES_TOTAL,
            FIELDS_GENERATED_TOTAL,
        ]:
            _metrics_registry.register(metric)

    return _metrics_registry


class MetricsCollector:
    """Collects and manages metrics for the operator."""

    def __init__(self):
        self.registry = get_metrics_registry()

    @asynccontextmanager
    async def track_reconciliation(self, namespace: str):
        """
        Context manager to track a reconciliation pass.

        Args:
            namespace: Namespace of the secret being reconciled
        """
        start_time = time.time()
        result = "unknown"

        try:
            yield
            result = "success"
        except Exception as e:
            result = "error"

            retryable = "true" if getattr(e, "retryable", False) else "false"
            RECONCILIATION_ERRORS.labels(
                namespace=namespace,
                error_type=type(e).__name__,
                retryable=retryable,
            ).inc()

            raise
        finally:
            RECONCILIATION_TOTAL.labels(namespace=namespace, result=result).inc()
            RECONCILIATION_DURATION.labels(namespace=namespace).observe(
                time.time() - start_time
            )

    def record_secret_update(
        self, namespace: str, secret_type: str, generated_fields: int
    ) -> None:
        """
        Record a persisted secret update.

        Args:
            namespace: Namespace of the secret
            secret_type: Resolved secret type
            generated_fields: Number of fields whose value changed
        """
        SECRET_UPDATES_TOTAL.labels(namespace=namespace, secret_type=secret_type).inc()
        if generated_fields:
            FIELDS_GENERATED_TOTAL.labels(
                namespace=namespace, secret_type=secret_type
            ).inc(generated_fields)


class MetricsServer:
    """HTTP server for exposing Prometheus metrics."""

    def __init__(self, port: int = 8081, host: str = "0.0.0.0"):
        """
        Initialize metrics server.

        Args:
            port: Port to serve metrics on
            host: Host interface to bind to
        """
        self.port = port
        self.host = host
        self.app = Application()
        self.runner: AppRunner | None = None
        self.site: TCPSite | None = None
        self._setup_routes()

    def _setup_routes(self) -> None:
        self.app.router.add_get("/metrics", self._metrics_handler)
        self.app.router.add_get("/healthz", self._healthz_handler)

    async def _metrics_handler(self, request: Request) -> Response:
        """Handle /metrics endpoint for Prometheus scraping."""
        try:
            metrics_data = generate_latest(get_metrics_registry())
            return Response(body=metrics_data, headers={"Content-Type": CONTENT_TYPE_LATEST})
        except Exception as e:
            logger.error(f"Failed to generate metrics: {e}")
            return Response(
                text=f"Error generating metrics: {type(e).__name__}. Check logs for details.",
                status=500,
            )

    async def _healthz_handler(self, request: Request) -> Response:
        return Response(text="ok")

    async def start(self) -> None:
        """Start the metrics server."""
        self.runner = AppRunner(self.app)
        await self.runner.setup()

        self.site = TCPSite(self.runner, self.host, self.port)
        await self.site.start()

        logger.info(f"Metrics available at http://{self.host}:{self.port}/metrics")

    async def stop(self) -> None:
        """Stop the metrics server."""
        if self.site:
            await self.site.stop()
            self.site = None

        if self.runner:
            await self.runner.cleanup()
            self.runner = None

        logger.info("Metrics server stopped")


# Global metrics collector instance
metrics_collector = MetricsCollector()
