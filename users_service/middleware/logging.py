"""Logging middleware and configuration."""

import logging
import sys
import time
from collections.abc import AsyncIterator, Callable
from uuid import uuid4

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from users_service.config import settings

REQUEST_ID_HEADER = "X-Request-ID"
STREAM_MEDIA_TYPE = "application/x-ndjson"


def configure_logging() -> None:
    """Configure structured logging."""
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.log_format == "json":
        processors = shared_processors + [
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Configure standard logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper()),
    )


async def _log_stream_end(
    body: AsyncIterator[bytes],
    logger: structlog.stdlib.BoundLogger,
    path: str,
    start_time: float,
) -> AsyncIterator[bytes]:
    """Pass a streamed body through, logging when the last line went out."""
    lines = 0
    completed = False
    try:
        async for chunk in body:
            lines += chunk.count(b"\n")
            yield chunk
        completed = True
    finally:
        logger.info(
            "stream_completed" if completed else "stream_aborted",
            path=path,
            lines=lines,
            duration=time.time() - start_time,
        )


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests and responses.

    Binds a request id into structlog's context so the service's per-operation
    latency events carry the same id as the request lines.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        """
        Log request and response details.

        Args:
            request: Request object
            call_next: Next middleware in chain

        Returns:
            Response object
        """
        logger = structlog.get_logger()

        # Correlate every event of this request
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        # Start timer
        start_time = time.time()

        # Log request
        logger.info(
            "request_started",
            method=request.method,
            path=request.url.path,
            client=request.client.host if request.client else None,
        )

        # Process request
        try:
            response = await call_next(request)
        except Exception as e:
            # Log error
            logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
                duration=time.time() - start_time,
            )
            raise

        # Calculate duration
        duration = time.time() - start_time

        # Log response; for streams this is time to first line
        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration=duration,
        )

        # Streams also log when their body is done
        if response.headers.get("content-type", "").startswith(STREAM_MEDIA_TYPE):
            response.body_iterator = _log_stream_end(
                response.body_iterator, logger, request.url.path, start_time
            )

        # Add duration and request id headers
        response.headers["X-Process-Time"] = str(duration)
        response.headers[REQUEST_ID_HEADER] = request_id

        return response
