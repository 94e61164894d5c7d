"""API middleware: error responses, request logging, and HTTP metrics."""

import time
import uuid
from typing import Callable

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from deploy_web.utils.metrics import REQUEST_COUNT, REQUEST_DURATION

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"
ACTIVATION_ID_HEADER = "X-Activation-Id"


def setup_error_handling(app: FastAPI) -> None:
    """Errors outside the deploy pipeline, which builds its own failure envelopes."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Unknown routes and the like; same body shape as a failure envelope."""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.detail,
                "activationId": getattr(request.state, "activation_id", None),
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unexpected error", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={
                "error": "An unexpected error occurred",
                "activationId": getattr(request.state, "activation_id", None),
            },
        )


def setup_logging_middleware(app: FastAPI) -> None:
    """Log each request and tag the response with its request and activation ids."""

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Callable) -> Response:
        # Generate request ID
        request_id = str(uuid.uuid4())

        # Fresh logging context per request
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client=request.client.host if request.client else None,
        )
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception(
                "Request failed",
                duration_seconds=time.time() - start_time,
                exc_info=exc,
            )
            raise

        logger.info(
            "Request completed",
            status_code=response.status_code,
            duration_seconds=time.time() - start_time,
        )

        # Echo ids so callers can find the activation in the logs
        response.headers[REQUEST_ID_HEADER] = request_id
        activation_id = getattr(request.state, "activation_id", None)
        if activation_id:
            response.headers[ACTIVATION_ID_HEADER] = activation_id

        return response


def setup_metrics_middleware(app: FastAPI) -> None:
    """Count and time requests by route."""

    @app.middleware("http")
    async def collect_metrics(request: Request, call_next: Callable) -> Response:
        start_time = time.time()

        response = await call_next(request)

        # Record metrics
        endpoint = request.url.path
        REQUEST_COUNT.labels(
            method=request.method,
            endpoint=endpoint,
            status=response.status_code,
        ).inc()
        REQUEST_DURATION.labels(
            method=request.method,
            endpoint=endpoint,
        ).observe(time.time() - start_time)

        return response
