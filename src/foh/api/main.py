from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from foh.api.error_handling import register_exception_handlers
from foh.api.live import build_live_views
from foh.api.middleware.request_id import RequestIDMiddleware
from foh.api.routes.analytics import router as analytics_router
from foh.api.routes.bills import router as bills_router
from foh.api.routes.cart import router as cart_router
from foh.api.routes.health import router as health_router
from foh.api.routes.menu import router as menu_router
from foh.api.routes.metrics import router as metrics_router
from foh.api.routes.orders import router as orders_router
from foh.api.routes.tables import router as tables_router
from foh.api.settings import app_env, cors_allow_origins
from foh.api.ws.manager import ConnectionManager
from foh.api.ws.routes import router as ws_router
from foh.infrastructure.messaging.redis_change_listener import listen_for_changes
from foh.infrastructure.observability.logging_config import configure_logging
from foh.infrastructure.observability.otel import configure_otel

logger = logging.getLogger("foh.api.access")

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "path", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)


def _cors_allow_origins() -> list[str]:
    env = app_env()

    # Dev/test: unblock everything (no credentials allowed)
    if env in {"dev", "test"}:
        return ["*"]

    # Staging/prod: restrict to explicit allowlist
    return cors_allow_origins()


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        path = request.url.path
        method = request.method
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - started) * 1000
            REQUEST_COUNT.labels(method=method, path=path, status_code="500").inc()
            REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000)
            logger.exception(
                "request_error",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": 500,
                    "duration_ms": round(duration_ms, 2),
                },
            )
            raise

        duration_ms = (time.perf_counter() - started) * 1000
        REQUEST_COUNT.labels(method=method, path=path, status_code=str(response.status_code)).inc()
        REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000)
        logger.info(
            "request_complete",
            extra={
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    manager = ConnectionManager()
    app.state.ws_manager = manager
    listener_task: asyncio.Task | None = None
    try:
        live_views = build_live_views()
    except RuntimeError:
        logger.warning("change_listener_not_started", extra={"reason": "store not configured"})
    else:
        listener_task = asyncio.create_task(listen_for_changes(live_views, manager.broadcast))
    app.state.change_listener_task = listener_task
    try:
        yield
    finally:
        if listener_task is not None:
            listener_task.cancel()
            with suppress(asyncio.CancelledError):
                await listener_task


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="Front-of-House Backend", version="0.1.0", lifespan=lifespan)
    register_exception_handlers(app)
    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(menu_router)
    app.include_router(tables_router)
    app.include_router(cart_router)
    app.include_router(orders_router)
    app.include_router(bills_router)
    app.include_router(analytics_router)
    app.include_router(ws_router)

    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_allow_origins(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ETag", "X-Request-Id"],
    )

    configure_otel(app)
    return app


app = create_app()
