"""
Request logging middleware.
Assigns a request id, logs each request and sets the response headers every endpoint shares.
"""

from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import logging
import time
import uuid

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware tagging each request with an id and timing it.
    Adds X-Request-ID, X-Processing-Time and Referrer-Policy to every response.
    """

    def __init__(
        self,
        app: ASGIApp,
        enable_request_logging: bool = True,
        referrer_policy: str = "strict-origin-when-cross-origin"
    ):
        super().__init__(app)
        self.enable_request_logging = enable_request_logging
        self.referrer_policy = referrer_policy

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request through the middleware.

        Args:
            request: FastAPI request object
            call_next: Next middleware/handler in chain

        Returns:
            Response object
        """
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id

        start_time = time.time()
        response = await call_next(request)
        processing_time = time.time() - start_time

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Processing-Time"] = f"{processing_time:.4f}"
        response.headers["Referrer-Policy"] = self.referrer_policy

        if self.enable_request_logging:
            logger.info(
                f"Request [{request_id}]: {request.method} {request.url.path} "
                f"-> {response.status_code} ({processing_time:.4f}s)"
            )

        return response
