from __future__ import annotations

import logging
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from shopcart.api.routes.cart_routes import router as cart_router
from shopcart.container import Container, build_container
from shopcart.core.logging import configure_logging
from shopcart.infrastructure.observability import RequestTimer

logger = logging.getLogger(__name__)


def _error_code(status_code: int) -> str:
    codes = {
        400: "VALIDATION_ERROR",
        404: "NOT_FOUND",
        409: "CONFLICT",
        422: "UNPROCESSABLE",
        500: "INTERNAL_ERROR",
        502: "UPSTREAM_ERROR",
    }
    return codes.get(status_code, "INTERNAL_ERROR")


def _path_group(path: str, api_prefix: str) -> str:
    prefix_parts = [part for part in api_prefix.split("/") if part]
    parts = [part for part in path.split("/") if part]
    if prefix_parts and parts[: len(prefix_parts)] == prefix_parts:
        parts = parts[len(prefix_parts) :]
    if parts:
        return parts[0]
    return "root"


def create_app(container: Container | None = None) -> FastAPI:
    container = container or build_container()
    settings = container.settings
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def app_lifespan(_: FastAPI):
        logger.info(
            "Cart ready with %d item(s) under %s",
            len(container.cart_manager.cart),
            settings.cart_storage_key,
        )
        try:
            yield
        finally:
            await container.aclose()

    app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=app_lifespan)
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(cart_router, prefix=settings.api_prefix)

    @app.exception_handler(HTTPException)
    async def handle_http_exception(_: Request, exc: HTTPException) -> JSONResponse:
        if isinstance(exc.detail, dict) and isinstance(exc.detail.get("error"), dict):
            return JSONResponse(status_code=exc.status_code, content=exc.detail)

        message = str(exc.detail) if exc.detail else "Request failed"
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "code": _error_code(exc.status_code),
                    "message": message,
                    "details": [],
                }
            },
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_exception(_: Request, exc: RequestValidationError) -> JSONResponse:
        details = []
        for issue in exc.errors():
            loc = issue.get("loc", ())
            field_parts = [str(part) for part in loc[1:]] if len(loc) > 1 else [str(loc[0])] if loc else ["body"]
            details.append(
                {
                    "field": ".".join(field_parts),
                    "message": str(issue.get("msg", "Invalid value")),
                }
            )
        return JSONResponse(
            status_code=400,
            content={
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": "Invalid request data",
                    "details": details,
                }
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_exception(_: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "Internal server error",
                    "details": [],
                }
            },
        )

    @app.middleware("http")
    async def collect_http_metrics(request: Request, call_next):  # type: ignore[no-untyped-def]
        stopwatch = RequestTimer.start()
        path_group = _path_group(request.url.path, settings.api_prefix)
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            with suppress(Exception):
                container.metrics_collector.record_http(
                    method=request.method,
                    path_group=path_group,
                    status_code=status_code,
                    duration_ms=stopwatch.elapsed_ms(),
                )

    @app.get("/health")
    def health() -> dict[str, object]:
        load_error = container.cart_manager.load_error
        return {
            "status": "ok",
            "services": {
                "storage": {
                    "backend": settings.storage_backend,
                    "redis": {
                        "status": container.redis_manager.status,
                        "error": container.redis_manager.error,
                    },
                },
                "inventory": {
                    "backend": settings.inventory_backend,
                    "url": settings.inventory_api_url if settings.inventory_backend == "http" else None,
                },
                "cart": {
                    "itemCount": len(container.cart_manager.cart),
                    "restoredFromCorruptState": load_error is not None,
                },
            },
        }

    @app.get("/metrics", response_class=PlainTextResponse)
    def metrics() -> PlainTextResponse:
        return PlainTextResponse(
            container.metrics_collector.render_prometheus(),
            media_type="text/plain; version=0.0.4",
        )

    return app
