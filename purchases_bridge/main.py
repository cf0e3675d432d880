"""
Main Application - FastAPI host for the purchases channel.
"""

import asyncio
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
from prometheus_client import generate_latest

from purchases_bridge.api.routes import router
from purchases_bridge.config import settings
from purchases_bridge.observability import get_logger, metrics, setup_logging, setup_tracing
from purchases_bridge.observability.tracing import instrument_fastapi
from purchases_bridge.services.events import EventHub
from purchases_bridge.services.plugin import PurchasesPlugin
from purchases_bridge.services.purchases_sdk import PurchasesSDK, load_sdk

# Setup logging before anything else
setup_logging()
logger = get_logger(__name__)

setup_tracing()


def create_app(sdk: PurchasesSDK | None = None) -> FastAPI:
    """
    Build the application.

    Args:
        sdk: SDK handle to forward to; loaded from settings.sdk_factory when None
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """
        Application lifespan manager.

        Startup owns the SDK handle; shutdown is the host teardown.
        """
        logger.info(
            "application_starting",
            service=settings.api_title,
            version=settings.api_version,
            channel=settings.channel_name,
            tracing_enabled=settings.tracing_enabled,
        )

        events = EventHub()
        events.bind(asyncio.get_running_loop())
        app.state.events = events
        bridge_sdk = sdk if sdk is not None else load_sdk(settings.sdk_factory)
        app.state.plugin = PurchasesPlugin(bridge_sdk, events)

        yield

        logger.info("application_shutting_down")
        app.state.plugin.close()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description=settings.api_description,
        lifespan=lifespan,
    )

    instrument_fastapi(app)

    @app.middleware("http")
    async def logging_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Log all HTTP requests with timing."""
        start_time = time.time()
        endpoint = request.url.path
        method = request.method

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.time() - start_time
            metrics.record_http_request(endpoint, method, 500, duration)
            metrics.record_error(type(e).__name__, "http_request")
            logger.error(
                "request_failed",
                method=method,
                path=endpoint,
                error=str(e),
                duration_seconds=duration,
                exc_info=True,
            )
            raise

        duration = time.time() - start_time
        metrics.record_http_request(endpoint, method, response.status_code, duration)
        logger.info(
            "request_completed",
            method=method,
            path=endpoint,
            status_code=response.status_code,
            duration_seconds=duration,
        )
        return response

    app.include_router(router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {
            "service": settings.api_title,
            "version": settings.api_version,
            "channel": settings.channel_name,
            "status": "running",
        }

    @app.get("/metrics")
    async def metrics_endpoint() -> Response:
        """Prometheus metrics endpoint."""
        if not settings.metrics_enabled:
            return PlainTextResponse("metrics disabled", status_code=404)
        return PlainTextResponse(generate_latest())

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "purchases_bridge.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )
