from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import time
from typing import Callable
import logging

logger = logging.getLogger(__name__)

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status code and duration of every request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"{request.method} {request.url.path} status={response.status_code} duration={duration_ms:.1f}ms"
        )
        return response

def add_middleware(app: FastAPI) -> None:
    """Add all middleware to the FastAPI application."""
    app.add_middleware(RequestLoggingMiddleware)
